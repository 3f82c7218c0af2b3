"""사용자 API 테스트 — 내 프로필, 관리자 사용자 관리, 지갑, 미확인 계정 정리.

User API tests — Own profile, admin user management, wallet and the
purge of stale unconfirmed accounts.
"""

from datetime import timedelta

from httpx import AsyncClient

from app.services.user_service import user_service
from app.utils.datetime_utils import utc_now
from tests.conftest import auth_header, create_user, make_token

USERS = "/api/users"


# ===== /me =====

class TestMe:

    async def test_get_me(self, client: AsyncClient, user_token):
        res = await client.get(f"{USERS}/me", headers=auth_header(user_token))
        assert res.status_code == 200
        data = res.json()
        assert data["city"] == "Lisbon"
        assert data["wallet_balance"] == 0.0

    async def test_me_requires_token(self, client: AsyncClient):
        res = await client.get(f"{USERS}/me")
        assert res.status_code in (401, 403)

    async def test_update_me_partial(self, client: AsyncClient, user_token):
        res = await client.patch(f"{USERS}/me", json={"city": "Braga", "children_count": 2}, headers=auth_header(user_token))
        assert res.status_code == 200
        data = res.json()
        assert data["city"] == "Braga"
        assert data["children_count"] == 2
        assert data["gender"] == "female"

    async def test_update_me_ignores_protected_fields(self, client: AsyncClient, user_token):
        res = await client.patch(
            f"{USERS}/me",
            json={"role": "admin", "wallet_balance": 999, "first_name": "Anna"},
            headers=auth_header(user_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["role"] == "user"
        assert data["wallet_balance"] == 0.0
        assert data["first_name"] == "Anna"

    async def test_client_token_rejected(self, client: AsyncClient, client_token):
        res = await client.get(f"{USERS}/me", headers=auth_header(client_token))
        assert res.status_code == 401


# ===== Admin management =====

class TestAdminUsers:

    async def test_list_users_paginated(self, client: AsyncClient, admin_token, respondent, other_respondent):
        res = await client.get(f"{USERS}?per_page=2", headers=auth_header(admin_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 3
        assert data["pages"] == 2
        assert len(data["items"]) == 2

    async def test_list_users_filters(self, client: AsyncClient, admin_token, respondent, other_respondent):
        res = await client.get(f"{USERS}?city=Porto", headers=auth_header(admin_token))
        assert [u["email"] for u in res.json()["items"]] == ["bruno@test.com"]

        res = await client.get(f"{USERS}?search=ana", headers=auth_header(admin_token))
        assert [u["email"] for u in res.json()["items"]] == ["ana@test.com"]

    async def test_list_users_requires_admin(self, client: AsyncClient, user_token):
        res = await client.get(USERS, headers=auth_header(user_token))
        assert res.status_code == 403

    async def test_get_other_user_forbidden(self, client: AsyncClient, user_token, other_respondent):
        res = await client.get(f"{USERS}/{other_respondent.id}", headers=auth_header(user_token))
        assert res.status_code == 403

    async def test_get_self_by_id(self, client: AsyncClient, user_token, respondent):
        res = await client.get(f"{USERS}/{respondent.id}", headers=auth_header(user_token))
        assert res.status_code == 200

    async def test_admin_updates_user(self, client: AsyncClient, admin_token, respondent):
        res = await client.patch(f"{USERS}/{respondent.id}", json={"age": 30}, headers=auth_header(admin_token))
        assert res.status_code == 200
        assert res.json()["age"] == 30

    async def test_soft_delete(self, client: AsyncClient, admin_token, respondent):
        user_token = make_token(respondent)
        res = await client.delete(f"{USERS}/{respondent.id}", headers=auth_header(admin_token))
        assert res.status_code == 204

        # 삭제된 사용자는 목록/조회/토큰 모두 차단
        res = await client.get(f"{USERS}/{respondent.id}", headers=auth_header(admin_token))
        assert res.status_code == 404
        res = await client.get(f"{USERS}/me", headers=auth_header(user_token))
        assert res.status_code == 401
        res = await client.get(USERS, headers=auth_header(admin_token))
        assert res.json()["total"] == 1

    async def test_delete_unknown_user(self, client: AsyncClient, admin_token):
        res = await client.delete(f"{USERS}/00000000-0000-0000-0000-000000000000", headers=auth_header(admin_token))
        assert res.status_code == 404


# ===== Wallet =====

class TestWallet:

    async def test_get_own_wallet(self, client: AsyncClient, user_token, respondent):
        res = await client.get(f"{USERS}/{respondent.id}/wallet", headers=auth_header(user_token))
        assert res.status_code == 200
        assert res.json() == {"user_id": str(respondent.id), "wallet_balance": 0.0, "score": 0}

    async def test_adjust_wallet(self, client: AsyncClient, admin_token, respondent):
        res = await client.patch(
            f"{USERS}/{respondent.id}/wallet",
            json={"amount": 25.5, "score_delta": 10},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["wallet_balance"] == 25.5
        assert res.json()["score"] == 10

    async def test_adjust_wallet_negative_rejected(self, client: AsyncClient, admin_token, respondent):
        res = await client.patch(f"{USERS}/{respondent.id}/wallet", json={"amount": -1}, headers=auth_header(admin_token))
        assert res.status_code == 400
        assert res.json()["detail"] == "Insufficient wallet balance"

    async def test_adjust_wallet_requires_admin(self, client: AsyncClient, user_token, respondent):
        res = await client.patch(f"{USERS}/{respondent.id}/wallet", json={"amount": 5}, headers=auth_header(user_token))
        assert res.status_code == 403


# ===== Unconfirmed purge =====

class TestPurgeUnconfirmed:

    async def test_purges_only_stale_unconfirmed(self, db, respondent):
        await create_user(db, "stale@test.com", is_confirmed=False, created_at=utc_now() - timedelta(hours=2))
        await create_user(db, "fresh@test.com", is_confirmed=False)

        assert await user_service.purge_unconfirmed(db) == 1

        from app.repositories.user_repository import user_repository
        assert await user_repository.get_by_email(db, "stale@test.com") is None
        assert await user_repository.get_by_email(db, "fresh@test.com") is not None
        assert await user_repository.get_by_email(db, "ana@test.com") is not None

    async def test_keeps_accounts_with_valid_confirmation_link(self, db, monkeypatch):
        from app.config import settings
        from app.repositories.user_repository import user_repository

        monkeypatch.setattr(settings, "UNCONFIRMED_USER_TTL_MINUTES", 30)
        monkeypatch.setattr(settings, "CONFIRMATION_TOKEN_EXPIRE_MINUTES", 60)
        await create_user(db, "pending@test.com", is_confirmed=False, created_at=utc_now() - timedelta(minutes=45))

        assert await user_service.purge_unconfirmed(db) == 0
        assert await user_repository.get_by_email(db, "pending@test.com") is not None
