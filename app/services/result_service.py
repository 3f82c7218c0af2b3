"""결과 서비스 — 설문 결과 조회, 분석, Excel 내보내기.

Result Service — Raw result listings, the analytics document and the
Excel report. Every survey-scoped operation checks ownership first:
admins see everything, clients only their own surveys.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.survey import Result, Survey
from app.models.user import User
from app.repositories.result_repository import result_repository
from app.schemas.result import RespondentInfo, ResultResponse, ResultWithUser, UserResultResponse
from app.services.analytics_service import ResultRow, build_survey_analytics
from app.services.export_service import build_results_workbook
from app.services.survey_service import survey_service
from app.utils.datetime_utils import ensure_utc


class ResultService:
    """결과 관련 비즈니스 로직을 처리하는 서비스."""

    def _base_fields(self, result: Result) -> dict[str, Any]:
        return {
            "id": str(result.id),
            "survey_id": str(result.survey_id),
            "user_id": str(result.user_id),
            "question_id": result.question_id,
            "question": result.question,
            "answer": result.answer,
            "created_at": ensure_utc(result.created_at),
        }

    def _respondent(self, user: User | None) -> RespondentInfo | None:
        if user is None:
            return None
        return RespondentInfo(
            id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            gender=user.gender,
            age=user.age,
            city=user.city,
            residential_area=user.residential_area,
            education_level=user.education_level,
            purchase_responsibility=user.purchase_responsibility,
            children_count=user.children_count,
        )

    async def _rows(self, db: AsyncSession, survey_id: UUID) -> list[ResultRow]:
        pairs = await result_repository.get_rows_with_users(db, survey_id)
        return [ResultRow.from_result(result, user) for result, user in pairs]

    async def get_survey_results(self, db: AsyncSession, survey_id: UUID, client_id: UUID | None = None) -> list[ResultResponse]:
        """설문 원시 결과 — 최신순."""
        await survey_service.get_survey(db, survey_id, client_id)
        results = await result_repository.get_by_survey(db, survey_id)
        return [ResultResponse(**self._base_fields(r)) for r in results]

    async def get_question_results(
        self,
        db: AsyncSession,
        survey_id: UUID,
        question_id: str,
        client_id: UUID | None = None,
    ) -> list[ResultResponse]:
        await survey_service.get_survey(db, survey_id, client_id)
        results = await result_repository.get_by_survey(db, survey_id, question_id=question_id)
        return [ResultResponse(**self._base_fields(r)) for r in results]

    async def get_results_with_users(
        self,
        db: AsyncSession,
        survey_id: UUID,
        client_id: UUID | None = None,
    ) -> list[ResultWithUser]:
        """응답자 인구통계가 포함된 결과."""
        await survey_service.get_survey(db, survey_id, client_id)
        results = await result_repository.get_by_survey(db, survey_id, with_users=True)
        return [
            ResultWithUser(**self._base_fields(r), user=self._respondent(r.user))
            for r in results
        ]

    async def get_user_results(self, db: AsyncSession, user_id: UUID) -> list[UserResultResponse]:
        """사용자별 전체 결과 (관리자) — 설문 제목 포함."""
        pairs = await result_repository.get_by_user(db, user_id)
        return [
            UserResultResponse(**self._base_fields(result), survey_title=title)
            for result, title in pairs
        ]

    async def get_analytics(self, db: AsyncSession, survey_id: UUID, client_id: UUID | None = None) -> dict[str, Any]:
        """설문 분석 문서 — 요청마다 재계산 (recomputed on every call)."""
        survey: Survey = await survey_service.get_survey(db, survey_id, client_id)
        return build_survey_analytics(survey, await self._rows(db, survey_id))

    async def export_excel(self, db: AsyncSession, survey_id: UUID, client_id: UUID | None = None) -> bytes:
        """설문 결과를 Excel 파일로 내보내기."""
        survey: Survey = await survey_service.get_survey(db, survey_id, client_id)
        return build_results_workbook(survey, await self._rows(db, survey_id))


# 싱글턴 인스턴스 — Singleton instance
result_service: ResultService = ResultService()
