"""설문 라우터 — 설문 생성/삭제, 목록, 응답 제출.

Survey Router — Survey creation and deletion (admin or client), the
admin and client listings, and the tokenized respond endpoints.
Fixed paths are declared before ``/{survey_id}``.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Principal, get_admin_or_client, get_current_client, get_current_user, require_admin
from app.database import get_db
from app.models.client import Client
from app.models.user import User
from app.schemas.survey import (
    ActiveSurveyResponse,
    AnswerSubmission,
    ClientSurveyResponse,
    MySurveysResponse,
    PublicSurveyResponse,
    SubmissionResponse,
    SurveyCreate,
    SurveyResponse,
)
from app.services.survey_service import survey_service

router: APIRouter = APIRouter()


@router.post("", response_model=SurveyResponse, status_code=201)
async def create_survey(
    data: SurveyCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_admin_or_client)],
) -> SurveyResponse:
    """설문 생성 — 관리자 또는 클라이언트."""
    result: SurveyResponse = await survey_service.create_survey(db, data, principal.client)
    await db.commit()
    return result


@router.get("/active", response_model=list[ActiveSurveyResponse])
async def list_active_surveys(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
) -> list[ActiveSurveyResponse]:
    """진행 중 설문 목록 (관리자)."""
    return await survey_service.list_active(db)


@router.get("/my-surveys", response_model=MySurveysResponse)
async def my_surveys(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_client: Annotated[Client, Depends(get_current_client)],
) -> MySurveysResponse:
    """내 설문 목록 + 통계 (클라이언트) — 만료 상태 재계산."""
    result: MySurveysResponse = await survey_service.my_surveys(db, current_client)
    await db.commit()
    return result


@router.get("/client-surveys", response_model=list[ClientSurveyResponse])
async def client_surveys(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
) -> list[ClientSurveyResponse]:
    """클라이언트 소유 설문 전체 (관리자)."""
    return await survey_service.client_surveys(db)


@router.get("/respond", response_model=PublicSurveyResponse)
async def get_survey_for_response(
    db: Annotated[AsyncSession, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
    access_token: Annotated[str | None, Query(alias="accessToken")] = None,
) -> PublicSurveyResponse:
    """응답용 설문 조회 — 접근 토큰으로 조회."""
    return await survey_service.get_for_respond(db, access_token)


@router.post("/respond", response_model=SubmissionResponse, status_code=201)
async def respond_to_survey(
    answers: list[AnswerSubmission],
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    access_token: Annotated[str | None, Query(alias="accessToken")] = None,
) -> SubmissionResponse:
    """설문 응답 제출.

    Body: ``[{"questionId": "...", "answer": ...}, ...]``
    """
    result: SubmissionResponse = await survey_service.respond(
        db, access_token, current_user, [a.as_payload() for a in answers]
    )
    await db.commit()
    return result


@router.delete("/{survey_id}", status_code=204)
async def delete_survey(
    survey_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_admin_or_client)],
) -> None:
    """설문 삭제 — 관리자 또는 소유 클라이언트, 결과도 함께 삭제."""
    await survey_service.delete_survey(db, survey_id, principal.client_id)
    await db.commit()
