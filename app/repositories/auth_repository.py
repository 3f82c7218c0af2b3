"""인증 레포지토리 — 리프레시 토큰 CRUD.

Auth Repository — Refresh token lifecycle for both principal kinds
(users and clients), keyed by ``principal_kind`` and ``principal_id``.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.token import RefreshToken


class AuthRepository:
    """인증 관련 데이터베이스 쿼리를 담당하는 레포지토리."""

    async def create_refresh_token(
        self,
        db: AsyncSession,
        principal_kind: str,
        principal_id: UUID,
        token: str,
        expires_at: datetime,
    ) -> RefreshToken:
        """새 리프레시 토큰을 생성합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            principal_kind: 주체 종류 (Principal kind, "user" or "client")
            principal_id: 토큰 소유자 ID (Token owner UUID)
            token: JWT 리프레시 토큰 문자열 (JWT refresh token string)
            expires_at: 토큰 만료 일시 (Token expiration timestamp)

        Returns:
            RefreshToken: 생성된 리프레시 토큰 레코드 (Created refresh token record)
        """
        db_token: RefreshToken = RefreshToken(
            principal_kind=principal_kind,
            principal_id=principal_id,
            token=token,
            expires_at=expires_at,
        )
        db.add(db_token)
        await db.flush()
        return db_token

    async def get_refresh_token(self, db: AsyncSession, token: str, principal_kind: str) -> RefreshToken | None:
        """토큰 문자열과 주체 종류로 레코드 조회."""
        query: Select = select(RefreshToken).where(
            RefreshToken.token == token,
            RefreshToken.principal_kind == principal_kind,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def delete_refresh_token(self, db: AsyncSession, db_token: RefreshToken) -> None:
        await db.delete(db_token)
        await db.flush()

    async def delete_principal_tokens(self, db: AsyncSession, principal_kind: str, principal_id: UUID) -> None:
        """주체의 모든 리프레시 토큰 삭제 (비밀번호 재설정/계정 삭제 시)."""
        stmt = delete(RefreshToken).where(
            RefreshToken.principal_kind == principal_kind,
            RefreshToken.principal_id == principal_id,
        )
        await db.execute(stmt)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
auth_repository: AuthRepository = AuthRepository()
