"""설문 결과 관련 Pydantic 응답 스키마 정의.

Survey result Pydantic response schema definitions.
The analytics document itself is a plain nested dict built by
``analytics_service`` and returned as-is.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class RespondentInfo(BaseModel):
    """응답자 인구통계 요약 (Respondent demographic summary)."""

    id: str
    email: str
    first_name: str
    last_name: str
    gender: str | None
    age: int | None
    city: str | None
    residential_area: str | None
    education_level: str | None
    purchase_responsibility: str | None
    children_count: int | None


class ResultResponse(BaseModel):
    """결과 행 응답 스키마."""

    id: str
    survey_id: str
    user_id: str
    question_id: str
    question: str
    answer: Any  # str | list[str]
    created_at: datetime


class ResultWithUser(ResultResponse):
    """응답자 정보가 포함된 결과 행."""

    user: RespondentInfo | None = None


class UserResultResponse(ResultResponse):
    """사용자별 결과 — 설문 제목 포함."""

    survey_title: str | None = None
