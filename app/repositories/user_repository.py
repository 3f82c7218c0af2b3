"""사용자 레포지토리 — 사용자 조회, 목록, 미확인 계정 정리.

User Repository — Lookups by email and account tokens, filtered listing
and purge of stale unconfirmed accounts.
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리."""

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        """이메일로 사용자 조회 (대소문자 무시, case-insensitive)."""
        query: Select = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_confirmation_token(self, db: AsyncSession, token: str) -> User | None:
        return await self.get_one_by(db, confirmation_token=token)

    async def get_by_reset_token(self, db: AsyncSession, token: str) -> User | None:
        return await self.get_one_by(db, reset_password_token=token)

    async def get_list(
        self,
        db: AsyncSession,
        page: int = 1,
        per_page: int = 20,
        role: str | None = None,
        city: str | None = None,
        search: str | None = None,
    ) -> tuple[Sequence[User], int]:
        """삭제되지 않은 사용자 목록 (페이지네이션).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            page: 페이지 번호 (1-based page number)
            per_page: 페이지당 항목 수 (Items per page)
            role: 역할 필터 (Role filter)
            city: 도시 필터 (City filter)
            search: 이메일/이름 부분 검색 (Substring search on email and names)

        Returns:
            tuple[Sequence[User], int]: (사용자 목록, 전체 개수)
        """
        query: Select = select(User).where(User.deleted.is_(False))
        if role:
            query = query.where(User.role == role)
        if city:
            query = query.where(User.city == city)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                func.lower(User.email).like(pattern)
                | func.lower(User.first_name).like(pattern)
                | func.lower(User.last_name).like(pattern)
            )
        query = query.order_by(User.created_at.desc())
        return await self.get_paginated(db, query, page, per_page)

    async def delete_unconfirmed_before(self, db: AsyncSession, cutoff: datetime) -> int:
        """cutoff 이전에 생성된 미확인 사용자 삭제 — 삭제된 행 수 반환."""
        stmt = (
            delete(User)
            .where(User.is_confirmed.is_(False), User.created_at < cutoff)
            .execution_options(synchronize_session="fetch")
        )
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
