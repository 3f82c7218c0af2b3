"""설문 서비스 — 설문 생성/삭제, 목록, 응답 제출 비즈니스 로직.

Survey Service — Survey creation and deletion, the admin and client
listings, and the tokenized respond flow (limit check, duplicate check,
answer validation, bulk insert of results).
"""

import math
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.client import Client
from app.models.survey import Survey
from app.models.user import User
from app.repositories.client_repository import client_repository
from app.repositories.result_repository import result_repository
from app.repositories.survey_repository import survey_repository
from app.schemas.survey import (
    ActiveSurveyResponse,
    ClientSurveyResponse,
    MySurveysResponse,
    PublicSurveyResponse,
    SubmissionDetails,
    SubmissionResponse,
    SurveyCreate,
    SurveyResponse,
    SurveyStats,
    SurveyWithStats,
)
from app.services.response_validation import AnswerValidationError, normalize_questions, validate_submission
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.exceptions import BadRequestError, DuplicateError, ForbiddenError, NotFoundError
from app.utils.logger import get_logger

logger = get_logger(__name__)

RESPONSE_LIMIT_MESSAGE: str = "This survey has reached the maximum response limit."
ALREADY_RESPONDED_MESSAGE: str = "You have already responded to this survey."

SECONDS_PER_DAY: int = 86400


def is_expired(survey: Survey, now: datetime | None = None) -> bool:
    """만료 여부 — expiration_time이 현재 시각 이하이면 만료."""
    return ensure_utc(survey.expiration_time) <= (now or utc_now())


def response_percentage(count: int, limit: int | None) -> int | None:
    """응답 제한 대비 진행률 (0-100), 제한이 없으면 None."""
    if not limit:
        return None
    return min(100, round(count / limit * 100))


def days_until_expiration(survey: Survey, now: datetime) -> int:
    remaining = (ensure_utc(survey.expiration_time) - now).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining / SECONDS_PER_DAY)


class SurveyService:
    """설문 관련 비즈니스 로직을 처리하는 서비스."""

    def _to_response(self, survey: Survey) -> SurveyResponse:
        return SurveyResponse(**self._base_fields(survey))

    def _base_fields(self, survey: Survey) -> dict[str, Any]:
        return {
            "id": str(survey.id),
            "title": survey.title,
            "description": survey.description or "",
            "questions": normalize_questions(survey.questions),
            "status": survey.status,
            "expiration_time": ensure_utc(survey.expiration_time),
            "response_limit": survey.response_limit,
            "access_token": survey.access_token,
            "client_id": str(survey.client_id) if survey.client_id else None,
            "created_at": ensure_utc(survey.created_at),
        }

    async def get_survey(self, db: AsyncSession, survey_id: UUID, client_id: UUID | None = None) -> Survey:
        """설문 조회 + 소유권 확인.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            survey_id: 설문 ID (Survey UUID)
            client_id: 요청 클라이언트 ID, 관리자는 None (Requesting client; None for admins)

        Raises:
            NotFoundError: 설문 없음 (Unknown survey)
            ForbiddenError: 다른 클라이언트의 설문 (Survey owned by another client)
        """
        survey: Survey | None = await survey_repository.get_by_id(db, survey_id)
        if survey is None:
            raise NotFoundError("Survey not found")
        if client_id is not None and survey.client_id != client_id:
            raise ForbiddenError("Access denied to this survey")
        return survey

    async def create_survey(self, db: AsyncSession, data: SurveyCreate, client: Client | None = None) -> SurveyResponse:
        """설문 생성 (관리자 또는 클라이언트).

        클라이언트가 생성한 설문은 항상 해당 클라이언트 소유.
        관리자는 client_id를 지정할 수 있으며, 존재하는 클라이언트여야 함.

        Raises:
            NotFoundError: 지정한 클라이언트가 없을 때 (Unknown client_id)
        """
        if client is not None:
            owner_id: UUID | None = client.id
        else:
            owner_id = data.client_id
            if owner_id is not None and await client_repository.get_by_id(db, owner_id) is None:
                raise NotFoundError("Client not found")

        now: datetime = utc_now()
        survey: Survey = await survey_repository.create(
            db,
            {
                "title": data.title.strip(),
                "description": data.description,
                "questions": [q.to_storage() for q in data.questions],
                "expiration_time": data.expiration_time,
                "response_limit": data.response_limit,
                "client_id": owner_id,
                "status": "expired" if data.expiration_time <= now else "active",
            },
        )
        logger.info("Survey created: %s (client=%s)", survey.id, owner_id)
        return self._to_response(survey)

    async def delete_survey(self, db: AsyncSession, survey_id: UUID, client_id: UUID | None = None) -> None:
        """설문 삭제 — 결과도 함께 삭제 (cascade)."""
        survey: Survey = await self.get_survey(db, survey_id, client_id)
        await survey_repository.delete(db, survey)
        logger.info("Survey deleted: %s", survey_id)

    async def list_active(self, db: AsyncSession) -> list[ActiveSurveyResponse]:
        """진행 중 설문 목록 (관리자) — 응답자 수 포함."""
        surveys = await survey_repository.get_active(db, utc_now())
        counts = await survey_repository.count_respondents_many(db, [s.id for s in surveys])
        return [
            ActiveSurveyResponse(**self._base_fields(s), response_count=counts.get(s.id, 0))
            for s in surveys
        ]

    async def my_surveys(self, db: AsyncSession, client: Client) -> MySurveysResponse:
        """클라이언트 설문 목록 + 통계.

        만료 시각 기준으로 상태를 재계산하고 변경 시 저장합니다.
        Status is recomputed from expiration_time and persisted when it changed.
        """
        now: datetime = utc_now()
        surveys = await survey_repository.get_by_client(db, client.id)
        counts = await survey_repository.count_respondents_many(db, [s.id for s in surveys])

        items: list[SurveyWithStats] = []
        for survey in surveys:
            expired: bool = is_expired(survey, now)
            status: str = "expired" if expired else "active"
            if survey.status != status:
                await survey_repository.update(db, survey, {"status": status})
            count: int = counts.get(survey.id, 0)
            items.append(
                SurveyWithStats(
                    **self._base_fields(survey),
                    response_count=count,
                    is_expired=expired,
                    days_until_expiration=days_until_expiration(survey, now),
                    response_percentage=response_percentage(count, survey.response_limit),
                )
            )

        expired_total: int = sum(1 for item in items if item.is_expired)
        return MySurveysResponse(
            surveys=items,
            stats=SurveyStats(
                total=len(items),
                active=len(items) - expired_total,
                expired=expired_total,
                total_responses=sum(item.response_count for item in items),
            ),
        )

    async def client_surveys(self, db: AsyncSession) -> list[ClientSurveyResponse]:
        """클라이언트 소유 설문 전체 (관리자) — 회사명 포함."""
        surveys = await survey_repository.get_with_clients(db)
        counts = await survey_repository.count_respondents_many(db, [s.id for s in surveys])
        return [
            ClientSurveyResponse(
                **self._base_fields(s),
                response_count=counts.get(s.id, 0),
                company_name=s.client.company_name if s.client else None,
            )
            for s in surveys
        ]

    async def _get_by_access_token(self, db: AsyncSession, access_token: str | None) -> Survey:
        if not access_token:
            raise BadRequestError("Access token is required")
        survey: Survey | None = await survey_repository.get_by_access_token(db, access_token)
        if survey is None:
            raise NotFoundError("Survey not found")
        if is_expired(survey):
            raise BadRequestError("This survey has expired")
        return survey

    async def get_for_respond(self, db: AsyncSession, access_token: str | None) -> PublicSurveyResponse:
        """응답용 설문 조회 — 접근 토큰은 응답에서 제외."""
        survey: Survey = await self._get_by_access_token(db, access_token)
        return PublicSurveyResponse(
            id=str(survey.id),
            title=survey.title,
            description=survey.description or "",
            questions=normalize_questions(survey.questions),
            expiration_time=ensure_utc(survey.expiration_time),
            response_limit=survey.response_limit,
        )

    async def respond(
        self,
        db: AsyncSession,
        access_token: str | None,
        user: User,
        answers: list[dict[str, Any]],
    ) -> SubmissionResponse:
        """응답 제출.

        Pipeline: token lookup, expiry, response limit (distinct respondents),
        duplicate check, answer validation, then one bulk insert. The unique
        constraint on ``results`` turns a concurrent duplicate into 409.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            access_token: 설문 접근 토큰 (Survey access token)
            user: 응답자 (Authenticated respondent)
            answers: ``[{questionId, answer}, ...]`` 형식의 답변 목록

        Returns:
            SubmissionResponse: 저장 결과 (Saved count and survey details)

        Raises:
            BadRequestError: 토큰 누락, 만료, 응답 제한 초과, 검증 실패
            NotFoundError: 알 수 없는 토큰 (Unknown token)
            DuplicateError: 이미 응답한 사용자 (User already responded)
        """
        survey: Survey = await self._get_by_access_token(db, access_token)

        if survey.response_limit is not None:
            respondents: int = await survey_repository.count_respondents(db, survey.id)
            if respondents >= survey.response_limit:
                raise BadRequestError(RESPONSE_LIMIT_MESSAGE)

        if await survey_repository.has_responded(db, survey.id, user.id):
            raise DuplicateError(ALREADY_RESPONDED_MESSAGE)

        try:
            validated = validate_submission(normalize_questions(survey.questions), answers)
        except AnswerValidationError as exc:
            raise BadRequestError(str(exc)) from exc

        rows = [
            {
                "survey_id": survey.id,
                "user_id": user.id,
                "question_id": item.question_id,
                "question": item.question,
                "answer": item.answer,
            }
            for item in validated
        ]
        try:
            await result_repository.bulk_create(db, rows)
        except IntegrityError as exc:
            await db.rollback()
            raise DuplicateError(ALREADY_RESPONDED_MESSAGE) from exc

        logger.info("Response recorded: survey=%s user=%s answers=%d", survey.id, user.id, len(rows))
        return SubmissionResponse(
            details=SubmissionDetails(
                saved_count=len(rows),
                survey_id=str(survey.id),
                survey_title=survey.title,
                user_id=str(user.id),
            )
        )


# 싱글턴 인스턴스 — Singleton instance
survey_service: SurveyService = SurveyService()
