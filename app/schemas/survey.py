"""설문 관련 Pydantic 요청/응답 스키마 정의.

Survey-related Pydantic request/response schema definitions.
Question definitions keep their camelCase keys because they are stored
verbatim as JSON and read back by the response validator.
"""

from datetime import datetime
from typing import Any, Literal, Mapping
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.services.response_validation import normalize_question
from app.utils.datetime_utils import ensure_utc


# === 질문 정의 (Question definition) ===

class QuestionDefinition(BaseModel):
    """설문 질문 정의 스키마.

    One question of a survey. Loosely-typed input (boolean
    ``multipleSelections``, numeric-string ``selectionLimit``, ...) is
    normalized before validation.

    Attributes:
        question_id: 질문 ID, 설문 내 고유 (``questionId``, unique within the survey)
        question: 질문 문구 (Prompt text)
        type: 질문 유형 (``text`` open answer or ``multiple`` choice)
        options: 선택지 목록 (Choices, required for ``multiple``)
        multiple_selections: 복수 선택 여부 (``multipleSelections``, "yes"/"no")
        selection_limit: 최대 선택 개수 (``selectionLimit``, cap for "yes" questions)
        answer_length: 답변 길이 구간 (``answerLength``, short/medium/long/unrestricted)
        other_option: "기타" 선택지 허용 (``otherOption``)
        other_option_text: "기타" 라벨 (``otherOptionText``)
        imagem: 이미지 URL (Image URL)
        video: 동영상 URL (Video URL)
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    question_id: str = Field(alias="questionId", min_length=1)
    question: str = Field(min_length=1)
    type: Literal["text", "multiple"]
    options: list[str] | None = None
    multiple_selections: Literal["yes", "no"] | None = Field(default=None, alias="multipleSelections")
    selection_limit: int | None = Field(default=None, alias="selectionLimit", ge=1)
    answer_length: Literal["short", "medium", "long", "unrestricted"] | None = Field(default=None, alias="answerLength")
    other_option: bool = Field(default=False, alias="otherOption")
    other_option_text: str | None = Field(default=None, alias="otherOptionText")
    imagem: str | None = None  # 이미지 URL 문자열 (Image URL string)
    video: str | None = None  # 동영상 URL 문자열 (Video URL string)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return normalize_question(data)
        return data

    @model_validator(mode="after")
    def _check_choices(self) -> "QuestionDefinition":
        if self.type != "multiple":
            return self
        if self.multiple_selections is None:
            self.multiple_selections = "no"
        if self.options is None:
            raise ValueError("Multiple choice questions must have an options array")
        if self.multiple_selections == "yes" and len(self.options) < 2:
            raise ValueError("Multiple selection questions require at least two options")
        if len(set(self.options)) != len(self.options):
            raise ValueError("Options must be unique")
        return self

    def to_storage(self) -> dict[str, Any]:
        """JSON 컬럼 저장 형식 — camelCase dict for the ``questions`` column."""
        return self.model_dump(by_alias=True, exclude_none=True)


# === 설문 (Survey) 스키마 ===

class SurveyCreate(BaseModel):
    """설문 생성 요청 스키마 (관리자/클라이언트).

    Attributes:
        title: 설문 제목 (Survey title)
        description: 설문 설명 (Description)
        questions: 질문 정의 목록, 최소 1개 (At least one question, unique ids)
        expiration_time: 만료 일시, UTC로 정규화 (Expiration, normalized to UTC)
        response_limit: 최대 응답자 수 (Max respondents, optional, >= 1)
        client_id: 소유 클라이언트 — 관리자만 지정 가능 (Owning client, admin only)
    """

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    questions: list[QuestionDefinition] = Field(..., min_length=1)
    expiration_time: datetime
    response_limit: int | None = Field(default=None, ge=1)
    client_id: UUID | None = None

    @field_validator("expiration_time")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _unique_question_ids(self) -> "SurveyCreate":
        ids = [q.question_id for q in self.questions]
        if len(set(ids)) != len(ids):
            raise ValueError("questionId values must be unique within a survey")
        return self


class SurveyResponse(BaseModel):
    """설문 응답 스키마 — 소유자/관리자용 (접근 토큰 포함).

    Survey as seen by its owner or an admin, including the access token.
    """

    id: str
    title: str
    description: str
    questions: list[dict[str, Any]]  # 정규화된 질문 정의 (Normalized question definitions)
    status: str  # "active" | "expired"
    expiration_time: datetime
    response_limit: int | None
    access_token: str  # 응답 링크 토큰 (Response-link token)
    client_id: str | None
    created_at: datetime


class ActiveSurveyResponse(SurveyResponse):
    """진행 중 설문 — 응답자 수 포함."""

    response_count: int = 0  # 응답자 수 (Distinct respondents)


class ClientSurveyResponse(ActiveSurveyResponse):
    """클라이언트 소유 설문 — 회사명 포함 (Admin view of client-owned surveys)."""

    company_name: str | None = None


class SurveyWithStats(ActiveSurveyResponse):
    """내 설문 목록 항목 — 만료/진행률 계산값 포함.

    Attributes:
        is_expired: 만료 여부 (Whether the expiration time has passed)
        days_until_expiration: 만료까지 남은 일수, 올림 (Days left, ceil; 0 when expired)
        response_percentage: 응답 제한 대비 진행률 (Progress vs. limit, None when unlimited)
    """

    is_expired: bool
    days_until_expiration: int
    response_percentage: int | None


class SurveyStats(BaseModel):
    """내 설문 통계 요약."""

    total: int
    active: int
    expired: int
    total_responses: int


class MySurveysResponse(BaseModel):
    """클라이언트 설문 목록 응답 (GET /surveys/my-surveys)."""

    surveys: list[SurveyWithStats]
    stats: SurveyStats


class PublicSurveyResponse(BaseModel):
    """응답자용 설문 스키마 — 접근 토큰 제외.

    Survey as served to a respondent through its access link.
    """

    id: str
    title: str
    description: str
    questions: list[dict[str, Any]]
    expiration_time: datetime
    response_limit: int | None


# === 응답 제출 (Submission) 스키마 ===

class AnswerSubmission(BaseModel):
    """질문 하나에 대한 제출 답변.

    Attributes:
        question_id: 질문 ID (``questionId``; numbers are coerced to strings)
        answer: 답변 — 문자열, 문자열 배열, 또는 "기타" 객체
                (String, list of strings, or an "other" object)
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    question_id: str = Field(alias="questionId")
    answer: Any = None

    def as_payload(self) -> dict[str, Any]:
        return {"questionId": self.question_id, "answer": self.answer}


class SubmissionDetails(BaseModel):
    """응답 저장 결과 상세."""

    saved_count: int  # 저장된 결과 행 수 (Number of stored result rows)
    survey_id: str
    survey_title: str
    user_id: str


class SubmissionResponse(BaseModel):
    """응답 제출 결과 (POST /surveys/respond)."""

    message: str = "Response recorded successfully"
    details: SubmissionDetails
