"""인증 API 테스트 — 회원가입, 가입 확인, 로그인, 토큰 갱신, 비밀번호 재설정.

Auth API tests — Respondent registration and confirmation, login,
refresh token rotation and the password reset flow.
"""

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

from httpx import AsyncClient

from app.utils.datetime_utils import utc_now
from tests.conftest import auth_header, create_user

AUTH = "/api/auth"
USERS = "/api/users"

REGISTRATION = {
    "email": "New.Person@Test.com",
    "password": "secret123",
    "first_name": "New",
    "last_name": "Person",
    "city": "Lisbon",
    "age": 33,
}


def _token_from_link(link: str) -> str:
    return parse_qs(urlparse(link).query)["token"][0]


# ===== Register / Confirm =====

class TestRegister:
    """회원가입 및 확인 테스트."""

    async def test_register_creates_unconfirmed_user(self, client: AsyncClient, mailer):
        res = await client.post(f"{AUTH}/register", json=REGISTRATION)
        assert res.status_code == 201
        data = res.json()
        assert data["email"] == "new.person@test.com"
        assert data["role"] == "user"
        assert data["is_confirmed"] is False
        assert "password_hash" not in data

        assert len(mailer.sent) == 1
        assert mailer.sent[0]["kind"] == "confirmation"
        assert "/confirm?token=" in mailer.sent[0]["link"]

    async def test_register_duplicate_email(self, client: AsyncClient, respondent):
        res = await client.post(f"{AUTH}/register", json={**REGISTRATION, "email": "ANA@test.com"})
        assert res.status_code == 409
        assert res.json()["detail"] == "Email already registered"

    async def test_register_cannot_choose_role(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/register", json={**REGISTRATION, "role": "admin"})
        assert res.status_code == 201
        assert res.json()["role"] == "user"

    async def test_register_survives_mail_failure(self, client: AsyncClient, mailer):
        """메일 발송 실패는 가입을 막지 않음."""
        mailer.fail = True
        res = await client.post(f"{AUTH}/register", json=REGISTRATION)
        assert res.status_code == 201
        assert mailer.sent == []

    async def test_register_short_password(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/register", json={**REGISTRATION, "password": "abc"})
        assert res.status_code == 422

    async def test_confirm_then_login(self, client: AsyncClient, mailer):
        await client.post(f"{AUTH}/register", json=REGISTRATION)
        token = _token_from_link(mailer.sent[0]["link"])

        res = await client.get(f"{USERS}/confirm/{token}")
        assert res.status_code == 200
        assert res.json()["is_confirmed"] is True

        res = await client.post(f"{AUTH}/login", json={"email": "new.person@test.com", "password": "secret123"})
        assert res.status_code == 200

    async def test_confirm_token_single_use(self, client: AsyncClient, mailer):
        await client.post(f"{AUTH}/register", json=REGISTRATION)
        token = _token_from_link(mailer.sent[0]["link"])
        await client.get(f"{USERS}/confirm/{token}")

        res = await client.get(f"{USERS}/confirm/{token}")
        assert res.status_code == 400
        assert res.json()["detail"] == "Invalid or expired token"

    async def test_confirm_expired_link(self, client: AsyncClient, db):
        await create_user(
            db,
            "late@test.com",
            is_confirmed=False,
            confirmation_token="late-token",
            created_at=utc_now() - timedelta(hours=3),
        )
        res = await client.get(f"{USERS}/confirm/late-token")
        assert res.status_code == 400


# ===== Login =====

class TestLogin:
    """로그인 테스트."""

    async def test_login_success(self, client: AsyncClient, respondent):
        res = await client.post(f"{AUTH}/login", json={"email": "ana@test.com", "password": "secret123"})
        assert res.status_code == 200
        data = res.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"] and data["refresh_token"]

        me = await client.get(f"{USERS}/me", headers=auth_header(data["access_token"]))
        assert me.status_code == 200
        assert me.json()["email"] == "ana@test.com"

    async def test_login_email_case_insensitive(self, client: AsyncClient, respondent):
        res = await client.post(f"{AUTH}/login", json={"email": "Ana@Test.com", "password": "secret123"})
        assert res.status_code == 200

    async def test_login_wrong_password(self, client: AsyncClient, respondent):
        res = await client.post(f"{AUTH}/login", json={"email": "ana@test.com", "password": "wrong"})
        assert res.status_code == 401
        assert res.json()["detail"] == "Invalid email or password"

    async def test_login_unknown_email(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/login", json={"email": "nobody@test.com", "password": "secret123"})
        assert res.status_code == 401

    async def test_login_unconfirmed(self, client: AsyncClient, db):
        await create_user(db, "pending@test.com", is_confirmed=False)
        res = await client.post(f"{AUTH}/login", json={"email": "pending@test.com", "password": "secret123"})
        assert res.status_code == 403

    async def test_login_deleted(self, client: AsyncClient, db):
        await create_user(db, "gone@test.com", deleted=True)
        res = await client.post(f"{AUTH}/login", json={"email": "gone@test.com", "password": "secret123"})
        assert res.status_code == 401


# ===== Refresh Token =====

class TestRefreshToken:
    """리프레시 토큰 교체 테스트."""

    async def _login(self, client: AsyncClient) -> dict:
        res = await client.post(f"{AUTH}/login", json={"email": "ana@test.com", "password": "secret123"})
        return res.json()

    async def test_refresh_rotates(self, client: AsyncClient, respondent):
        tokens = await self._login(client)
        res = await client.post(f"{AUTH}/refresh-token", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200
        new_tokens = res.json()
        assert new_tokens["refresh_token"] != tokens["refresh_token"]

        # 이전 토큰은 재사용 불가
        res = await client.post(f"{AUTH}/refresh-token", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 401

    async def test_access_token_rejected_as_refresh(self, client: AsyncClient, respondent):
        tokens = await self._login(client)
        res = await client.post(f"{AUTH}/refresh-token", json={"refresh_token": tokens["access_token"]})
        assert res.status_code == 401

    async def test_refresh_token_rejected_as_access(self, client: AsyncClient, respondent):
        tokens = await self._login(client)
        res = await client.get(f"{USERS}/me", headers=auth_header(tokens["refresh_token"]))
        assert res.status_code == 401

    async def test_garbage_refresh_token(self, client: AsyncClient):
        res = await client.post(f"{AUTH}/refresh-token", json={"refresh_token": "not-a-jwt"})
        assert res.status_code == 401

    async def test_relogin_invalidates_old_refresh(self, client: AsyncClient, respondent):
        first = await self._login(client)
        await self._login(client)
        res = await client.post(f"{AUTH}/refresh-token", json={"refresh_token": first["refresh_token"]})
        assert res.status_code == 401


# ===== Password Reset =====

class TestPasswordReset:
    """비밀번호 재설정 테스트."""

    async def test_forgot_password_unknown_email_same_message(self, client: AsyncClient, respondent, mailer):
        known = await client.post(f"{AUTH}/forgot-password", json={"email": "ana@test.com"})
        unknown = await client.post(f"{AUTH}/forgot-password", json={"email": "nobody@test.com"})
        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert len(mailer.sent) == 1
        assert mailer.sent[0]["kind"] == "reset"

    async def test_reset_password_flow(self, client: AsyncClient, respondent, mailer):
        await client.post(f"{AUTH}/forgot-password", json={"email": "ana@test.com"})
        token = _token_from_link(mailer.sent[0]["link"])

        res = await client.post(f"{AUTH}/reset-password", json={"token": token, "new_password": "brandnew1"})
        assert res.status_code == 200

        old = await client.post(f"{AUTH}/login", json={"email": "ana@test.com", "password": "secret123"})
        assert old.status_code == 401
        new = await client.post(f"{AUTH}/login", json={"email": "ana@test.com", "password": "brandnew1"})
        assert new.status_code == 200

        # 토큰은 1회용
        again = await client.post(f"{AUTH}/reset-password", json={"token": token, "new_password": "another1"})
        assert again.status_code == 400

    async def test_reset_password_expired(self, client: AsyncClient, db):
        await create_user(
            db,
            "expired@test.com",
            reset_password_token="old-reset",
            reset_password_expires=utc_now() - timedelta(minutes=1),
        )
        res = await client.post(f"{AUTH}/reset-password", json={"token": "old-reset", "new_password": "brandnew1"})
        assert res.status_code == 400
        assert res.json()["detail"] == "Invalid or expired token"
