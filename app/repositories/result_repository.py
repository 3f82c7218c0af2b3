"""결과 레포지토리 — 응답 결과 일괄 저장 및 조회.

Result Repository — Bulk insert of a submission and result listings,
optionally joined with the respondent.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.survey import Result, Survey
from app.models.user import User
from app.repositories.base import BaseRepository


class ResultRepository(BaseRepository[Result]):
    """결과 테이블 쿼리 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Result)

    async def bulk_create(self, db: AsyncSession, rows: list[dict[str, Any]]) -> list[Result]:
        """결과 일괄 생성 — 한 번의 flush로 저장.

        Raises:
            sqlalchemy.exc.IntegrityError: 설문·사용자·질문 중복 시
                (When a (survey, user, question) row already exists)
        """
        results = [Result(**row) for row in rows]
        db.add_all(results)
        await db.flush()
        return results

    async def get_by_survey(
        self,
        db: AsyncSession,
        survey_id: UUID,
        question_id: str | None = None,
        with_users: bool = False,
    ) -> Sequence[Result]:
        """설문의 결과 목록 — 최신순 (newest first).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            survey_id: 설문 ID (Survey UUID)
            question_id: 질문 필터 (Optional question filter)
            with_users: 응답자 즉시 로딩 여부 (Eager-load respondents)

        Returns:
            Sequence[Result]: 결과 목록 (Result rows)
        """
        query: Select = select(Result).where(Result.survey_id == survey_id)
        if question_id is not None:
            query = query.where(Result.question_id == question_id)
        if with_users:
            query = query.options(selectinload(Result.user))
        query = query.order_by(Result.created_at.desc(), Result.question_id)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_by_user(self, db: AsyncSession, user_id: UUID) -> Sequence[tuple[Result, str | None]]:
        """사용자의 전체 결과와 설문 제목."""
        query: Select = (
            select(Result, Survey.title)
            .outerjoin(Survey, Survey.id == Result.survey_id)
            .where(Result.user_id == user_id)
            .order_by(Result.created_at.desc())
        )
        rows = (await db.execute(query)).all()
        return [(row[0], row[1]) for row in rows]

    async def get_rows_with_users(self, db: AsyncSession, survey_id: UUID) -> Sequence[tuple[Result, User | None]]:
        """분석/내보내기용 결과+응답자 — 제출 순 (submission order)."""
        query: Select = (
            select(Result, User)
            .outerjoin(User, User.id == Result.user_id)
            .where(Result.survey_id == survey_id)
            .order_by(Result.created_at, Result.question_id)
        )
        rows = (await db.execute(query)).all()
        return [(row[0], row[1]) for row in rows]


# 싱글턴 인스턴스 — Singleton instance
result_repository: ResultRepository = ResultRepository()
