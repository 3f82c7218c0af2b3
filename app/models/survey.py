"""설문 및 응답 결과 SQLAlchemy ORM 모델 정의.

Survey and Result SQLAlchemy ORM model definitions.

Tables:
    - surveys: 설문 정의 (Survey definitions with JSON question list)
    - results: 설문 응답 (One stored answer to one question by one user)
"""

import secrets
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def _generate_access_token() -> str:
    return secrets.token_hex(20)


class Survey(Base):
    """설문 모델 — 질문 목록, 만료, 응답 제한, 접근 토큰.

    Survey model — Question list, expiration, response limit and access token.
    Respondents reach a survey through its ``access_token`` link.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        title: 설문 제목 (Survey title)
        description: 설문 설명 (Survey description)
        questions: 질문 정의 JSON 배열 (List of question definitions)
        status: 상태 (Status, "active" or "expired")
        expiration_time: 만료 일시 UTC (Expiration timestamp)
        response_limit: 최대 응답자 수, NULL이면 무제한 (Max respondents, NULL = unlimited)
        access_token: 응답 링크 토큰, 고유 (Unique response-link token, 40 hex chars)
        client_id: 소유 클라이언트 FK, 관리자 설문은 NULL (Owning client, NULL for admin surveys)

    Relationships:
        client: 소유 클라이언트 (Owning client)
        results: 응답 결과 목록 (Stored answers, deleted with the survey)
    """

    __tablename__ = "surveys"

    # 설문 고유 식별자 — Survey unique identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 설문 제목 / 설명 — Title and description
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # 질문 정의 — Question definitions (JSON 배열, JSONB on PostgreSQL)
    questions: Mapped[list[dict[str, Any]]] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    # 상태 — "active" | "expired" (만료 시각 기준으로 재계산됨, recomputed from expiration_time)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    # 만료 일시 — Expiration timestamp (UTC)
    expiration_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 응답 제한 — Max distinct respondents (NULL = unlimited)
    response_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 접근 토큰 — Opaque token for the response link
    access_token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, default=_generate_access_token)
    # 소유 클라이언트 FK — Owning client (클라이언트 삭제 시 NULL)
    client_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    client = relationship("Client", back_populates="surveys")
    results = relationship("Result", back_populates="survey", cascade="all, delete-orphan")


class Result(Base):
    """응답 결과 모델 — 한 사용자의 한 질문에 대한 답변.

    Result model — One answer to one question by one user for one survey.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        survey_id: 설문 FK (Parent survey)
        user_id: 응답자 FK (Respondent)
        question_id: 질문 ID (Question identifier within the survey)
        question: 응답 시점의 질문 문구 (Question text snapshot)
        answer: 정규화된 답변, 문자열 또는 문자열 배열 (Normalized answer, string or list)
        created_at: 제출 일시 (Submission timestamp)

    Constraints:
        uq_result_survey_user_question: 설문·사용자·질문 조합 고유
            (One answer per question per user per survey)
    """

    __tablename__ = "results"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 설문 FK — Parent survey (CASCADE: 설문 삭제 시 결과도 삭제)
    survey_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    # 응답자 FK — Respondent (CASCADE)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # 질문 ID — Question identifier (문자열로 저장, stored as string)
    question_id: Mapped[str] = mapped_column(String(100), nullable=False)
    # 질문 문구 스냅샷 — Question text at submission time
    question: Mapped[str] = mapped_column(Text, nullable=False)
    # 답변 — Normalized answer (str | list[str])
    answer: Mapped[Any] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("survey_id", "user_id", "question_id", name="uq_result_survey_user_question"),
    )

    # 관계 — Relationships
    survey = relationship("Survey", back_populates="results")
    user = relationship("User", back_populates="results")
