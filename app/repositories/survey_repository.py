"""설문 레포지토리 — 설문 조회 및 응답자 수 집계.

Survey Repository — Survey lookups, listings and distinct-respondent counts.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.survey import Result, Survey
from app.repositories.base import BaseRepository


class SurveyRepository(BaseRepository[Survey]):
    """설문 테이블 쿼리 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Survey)

    async def get_by_access_token(self, db: AsyncSession, access_token: str) -> Survey | None:
        return await self.get_one_by(db, access_token=access_token)

    async def get_active(self, db: AsyncSession, now: datetime) -> Sequence[Survey]:
        """진행 중이며 만료되지 않은 설문 — Active, unexpired surveys."""
        query: Select = (
            select(Survey)
            .where(Survey.status == "active", Survey.expiration_time > now)
            .order_by(Survey.created_at.desc())
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_by_client(self, db: AsyncSession, client_id: UUID) -> Sequence[Survey]:
        query: Select = select(Survey).where(Survey.client_id == client_id).order_by(Survey.created_at.desc())
        result = await db.execute(query)
        return result.scalars().all()

    async def get_with_clients(self, db: AsyncSession) -> Sequence[Survey]:
        """클라이언트 소유 설문 전체 (클라이언트 즉시 로딩)."""
        query: Select = (
            select(Survey)
            .options(selectinload(Survey.client))
            .where(Survey.client_id.is_not(None))
            .order_by(Survey.created_at.desc())
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def count_respondents(self, db: AsyncSession, survey_id: UUID) -> int:
        """설문의 고유 응답자 수 — Distinct respondents of one survey."""
        query: Select = select(func.count(distinct(Result.user_id))).where(Result.survey_id == survey_id)
        return (await db.execute(query)).scalar() or 0

    async def count_respondents_many(self, db: AsyncSession, survey_ids: list[UUID]) -> dict[UUID, int]:
        """여러 설문의 고유 응답자 수를 한 번에 집계."""
        if not survey_ids:
            return {}
        query: Select = (
            select(Result.survey_id, func.count(distinct(Result.user_id)))
            .where(Result.survey_id.in_(survey_ids))
            .group_by(Result.survey_id)
        )
        rows = (await db.execute(query)).all()
        return {survey_id: count for survey_id, count in rows}

    async def has_responded(self, db: AsyncSession, survey_id: UUID, user_id: UUID) -> bool:
        query: Select = select(Result.id).where(Result.survey_id == survey_id, Result.user_id == user_id).limit(1)
        return (await db.execute(query)).first() is not None

    async def count_active(self, db: AsyncSession, now: datetime) -> int:
        return await self.count(db, Survey.status == "active", Survey.expiration_time > now)


# 싱글턴 인스턴스 — Singleton instance
survey_repository: SurveyRepository = SurveyRepository()
