"""클라이언트 API 테스트 — 가입, 확인, 로그인 시도 추적, 비밀번호 재설정, 관리자 대시보드.

Client API tests — Business account registration and confirmation,
login attempt tracking, password reset and the admin views.
"""

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

from httpx import AsyncClient

from app.utils.datetime_utils import utc_now
from tests.conftest import auth_header, create_client_account, create_survey

CLIENTS = "/api/clients"

REGISTRATION = {
    "company_name": "Initech",
    "contact_name": "Peter",
    "contact_email": "Peter@Initech.com",
    "password": "client123",
    "industry": "Software",
}


def _token_from_link(link: str) -> str:
    return parse_qs(urlparse(link).query)["token"][0]


class TestClientRegister:
    """클라이언트 가입 테스트."""

    async def test_register(self, client: AsyncClient, mailer):
        res = await client.post(f"{CLIENTS}/register", json=REGISTRATION)
        assert res.status_code == 201
        data = res.json()
        assert data["contact_email"] == "peter@initech.com"
        assert data["is_confirmed"] is False
        assert "/client/confirm?token=" in mailer.sent[0]["link"]

    async def test_duplicate_company(self, client: AsyncClient, client_account):
        res = await client.post(f"{CLIENTS}/register", json={**REGISTRATION, "company_name": "Acme"})
        assert res.status_code == 409
        assert res.json()["detail"] == "Company name already registered"

    async def test_duplicate_email(self, client: AsyncClient, client_account):
        res = await client.post(f"{CLIENTS}/register", json={**REGISTRATION, "contact_email": "owner@acme.com"})
        assert res.status_code == 409
        assert res.json()["detail"] == "Contact email already registered"

    async def test_confirm_issues_tokens(self, client: AsyncClient, mailer):
        await client.post(f"{CLIENTS}/register", json=REGISTRATION)
        token = _token_from_link(mailer.sent[0]["link"])

        res = await client.get(f"{CLIENTS}/confirm/{token}")
        assert res.status_code == 200
        access = res.json()["access_token"]

        me = await client.get(f"{CLIENTS}/me", headers=auth_header(access))
        assert me.status_code == 200
        assert me.json()["is_confirmed"] is True

    async def test_confirm_unknown_token(self, client: AsyncClient):
        res = await client.get(f"{CLIENTS}/confirm/nope")
        assert res.status_code == 400


class TestClientLogin:
    """클라이언트 로그인 테스트."""

    async def test_login_success_resets_attempts(self, client: AsyncClient, db, client_account):
        client_account.login_attempts = 2
        await db.flush()

        res = await client.post(f"{CLIENTS}/login", json={"email": "owner@acme.com", "password": "client123"})
        assert res.status_code == 200

        me = await client.get(f"{CLIENTS}/me", headers=auth_header(res.json()["access_token"]))
        assert me.json()["login_attempts"] == 0
        assert me.json()["last_login"] is not None

    async def test_wrong_password_counts_attempt(self, client: AsyncClient, db, client_account):
        for _ in range(2):
            res = await client.post(f"{CLIENTS}/login", json={"email": "owner@acme.com", "password": "bad"})
            assert res.status_code == 401

        await db.refresh(client_account)
        assert client_account.login_attempts == 2

    async def test_unconfirmed_client(self, client: AsyncClient, db):
        await create_client_account(db, "Pending", "pending@corp.com", confirmed=False)
        res = await client.post(f"{CLIENTS}/login", json={"email": "pending@corp.com", "password": "client123"})
        assert res.status_code == 403

    async def test_user_token_rejected_on_client_route(self, client: AsyncClient, user_token):
        res = await client.get(f"{CLIENTS}/me", headers=auth_header(user_token))
        assert res.status_code == 401

    async def test_refresh(self, client: AsyncClient, client_account):
        login = await client.post(f"{CLIENTS}/login", json={"email": "owner@acme.com", "password": "client123"})
        refresh = login.json()["refresh_token"]

        res = await client.post(f"{CLIENTS}/refresh-token", json={"refresh_token": refresh})
        assert res.status_code == 200

        # 사용자 리프레시 엔드포인트에서는 클라이언트 토큰 거부
        res = await client.post("/api/auth/refresh-token", json={"refresh_token": res.json()["refresh_token"]})
        assert res.status_code == 401


class TestClientPasswordReset:
    """클라이언트 비밀번호 재설정 테스트."""

    async def test_full_flow(self, client: AsyncClient, client_account, mailer):
        res = await client.post(f"{CLIENTS}/forgot-password", json={"email": "owner@acme.com"})
        assert res.status_code == 200
        token = _token_from_link(mailer.sent[0]["link"])
        assert "/client/reset-password?token=" in mailer.sent[0]["link"]

        res = await client.get(f"{CLIENTS}/validate-reset-token/{token}")
        assert res.json() == {"valid": True, "email": "owner@acme.com"}

        res = await client.post(f"{CLIENTS}/reset-password/{token}", json={"new_password": "fresh-pass"})
        assert res.status_code == 200

        res = await client.get(f"{CLIENTS}/validate-reset-token/{token}")
        assert res.json()["valid"] is False

        res = await client.post(f"{CLIENTS}/login", json={"email": "owner@acme.com", "password": "fresh-pass"})
        assert res.status_code == 200

    async def test_expired_token(self, client: AsyncClient, db, client_account):
        client_account.reset_password_token = "expired"
        client_account.reset_password_expires = utc_now() - timedelta(minutes=5)
        await db.flush()

        res = await client.get(f"{CLIENTS}/validate-reset-token/expired")
        assert res.json()["valid"] is False
        res = await client.post(f"{CLIENTS}/reset-password/expired", json={"new_password": "fresh-pass"})
        assert res.status_code == 400


class TestClientAdmin:
    """관리자 전용 클라이언트 조회."""

    async def test_all_clients(self, client: AsyncClient, admin_token, client_account, other_client_account):
        res = await client.get(f"{CLIENTS}/admin/all-clients", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert {c["company_name"] for c in res.json()} == {"Acme", "Globex"}

    async def test_all_clients_requires_admin(self, client: AsyncClient, user_token):
        res = await client.get(f"{CLIENTS}/admin/all-clients", headers=auth_header(user_token))
        assert res.status_code == 403

    async def test_dashboard(self, client: AsyncClient, db, admin_token, respondent, survey):
        await create_survey(db, None, title="Expired", expiration_time=utc_now() - timedelta(days=1), status="expired")
        res = await client.get(f"{CLIENTS}/admin/dashboard", headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json() == {
            "total_clients": 1,
            "confirmed_clients": 1,
            "total_surveys": 2,
            "active_surveys": 1,
            "total_users": 2,
            "total_results": 0,
        }
