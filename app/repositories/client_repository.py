"""클라이언트 레포지토리 — 기업 계정 조회.

Client Repository — Business account lookups by contact email,
company name and account tokens.
"""

from typing import Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.client import Client
from app.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    """클라이언트 테이블 쿼리 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Client)

    async def get_by_email(self, db: AsyncSession, email: str) -> Client | None:
        """담당자 이메일로 조회 (case-insensitive)."""
        query: Select = select(Client).where(func.lower(Client.contact_email) == email.strip().lower())
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_company_name(self, db: AsyncSession, company_name: str) -> Client | None:
        return await self.get_one_by(db, company_name=company_name.strip())

    async def get_by_confirmation_token(self, db: AsyncSession, token: str) -> Client | None:
        return await self.get_one_by(db, confirmation_token=token)

    async def get_by_reset_token(self, db: AsyncSession, token: str) -> Client | None:
        return await self.get_one_by(db, reset_password_token=token)

    async def get_all_ordered(self, db: AsyncSession) -> Sequence[Client]:
        return await self.get_all(db, order_by=Client.created_at.desc())


# 싱글턴 인스턴스 — Singleton instance
client_repository: ClientRepository = ClientRepository()
