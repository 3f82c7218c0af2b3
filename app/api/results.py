"""결과 라우터 — 설문 결과 조회, 분석, Excel 내보내기.

Result Router — Raw results, analytics and the Excel report for a
survey (admin or owning client), and per-user results (admin).
"""

from io import BytesIO
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Principal, get_admin_or_client, require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.result import ResultResponse, ResultWithUser, UserResultResponse
from app.services.export_service import XLSX_MEDIA_TYPE, export_filename
from app.services.result_service import result_service

router: APIRouter = APIRouter()


@router.get("/survey/{survey_id}", response_model=list[ResultResponse])
async def get_survey_results(
    survey_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_admin_or_client)],
) -> list[ResultResponse]:
    """설문 원시 결과 — 최신순."""
    return await result_service.get_survey_results(db, survey_id, principal.client_id)


@router.get("/survey/{survey_id}/analytics")
async def get_survey_analytics(
    survey_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_admin_or_client)],
) -> dict[str, Any]:
    """설문 분석 — 인구통계 개요, 질문별 분석, 요약."""
    return await result_service.get_analytics(db, survey_id, principal.client_id)


@router.get("/survey/{survey_id}/question/{question_id}", response_model=list[ResultResponse])
async def get_question_results(
    survey_id: UUID,
    question_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_admin_or_client)],
) -> list[ResultResponse]:
    """질문 하나의 결과."""
    return await result_service.get_question_results(db, survey_id, question_id, principal.client_id)


@router.get("/survey/{survey_id}/with-users", response_model=list[ResultWithUser])
async def get_results_with_users(
    survey_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_admin_or_client)],
) -> list[ResultWithUser]:
    """응답자 인구통계가 포함된 결과."""
    return await result_service.get_results_with_users(db, survey_id, principal.client_id)


@router.get("/survey/{survey_id}/excel")
async def export_survey_excel(
    survey_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_admin_or_client)],
) -> StreamingResponse:
    """설문 결과 Excel 다운로드."""
    content: bytes = await result_service.export_excel(db, survey_id, principal.client_id)
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={export_filename(survey_id)}"},
    )


@router.get("/user/{user_id}", response_model=list[UserResultResponse])
async def get_user_results(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
) -> list[UserResultResponse]:
    """사용자별 전체 결과 (관리자)."""
    return await result_service.get_user_results(db, user_id)
