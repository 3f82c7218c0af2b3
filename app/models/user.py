"""사용자(응답자/관리자) SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
A user is either a survey respondent (role "user") or a platform admin
(role "admin"). Respondents carry the demographic profile used by analytics.

Tables:
    - users: 사용자 계정 및 인구통계 정보 (Accounts with demographic profile)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# 사용자 역할 — User roles
USER_ROLES: tuple[str, ...] = ("user", "admin")


class User(Base):
    """사용자 모델 — 응답자 및 관리자 계정.

    User model — Respondent and admin accounts.
    Deletion is soft (``deleted`` flag); unconfirmed accounts are purged
    by the background cleanup after a configurable TTL.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        email: 로그인 이메일, 전역 고유 (Login email, globally unique)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        role: 역할 (Role, "user" or "admin")
        first_name / last_name: 이름 (Display names)
        deleted: 소프트 삭제 플래그 (Soft-delete flag)
        is_confirmed: 이메일 확인 여부 (Email confirmation status)
        confirmation_token: 가입 확인 토큰 (Confirmation link token)
        reset_password_token / reset_password_expires: 비밀번호 재설정 토큰과 만료
        gender ~ education_level: 인구통계 속성 (Demographic attributes)
        wallet_balance: 지갑 잔액 (Wallet balance)
        score: 누적 점수 (Accumulated score)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 이메일 — Login email (전역 고유, globally unique)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 역할 — "user" (응답자) 또는 "admin" (관리자)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    # 이름 — First / last name
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 소프트 삭제 플래그 — Soft-delete flag
    deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 이메일 확인 여부 — Whether the account email is confirmed
    is_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 가입 확인 토큰 — Confirmation link token (확인 후 NULL)
    confirmation_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    # 비밀번호 재설정 토큰 — Password reset token and its expiry
    reset_password_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    reset_password_expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # 인구통계 속성 — Demographic attributes (분석 집계에 사용, used by analytics)
    gender: Mapped[str | None] = mapped_column(String(50), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    residential_area: Mapped[str | None] = mapped_column(String(100), nullable=True)
    purchase_responsibility: Mapped[str | None] = mapped_column(String(100), nullable=True)
    children_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # 자녀 나이 목록 — Children ages (JSON 배열, JSONB on PostgreSQL)
    children_ages: Mapped[list | None] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    education_level: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # 지갑 잔액 — Wallet balance (음수 불가, never negative)
    wallet_balance: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    # 누적 점수 — Accumulated score
    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # 생성 일시 — Record creation timestamp (UTC, 확인 링크 만료 기준)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    results = relationship("Result", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
