"""클라이언트(설문 의뢰 기업) SQLAlchemy ORM 모델 정의.

Client SQLAlchemy ORM model definition.
A client is a business account that owns surveys and reads their results.
Clients authenticate with their own JWT secret, separate from users.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Client(Base):
    """클라이언트 모델 — 기업 계정.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        company_name: 회사명, 전역 고유 (Company name, globally unique)
        contact_name: 담당자 이름 (Contact person)
        contact_email: 담당자 이메일, 로그인 ID (Contact email, used for login)
        phone_number: 연락처 (Phone number)
        industry: 업종 (Industry)
        id_identification: 사업자 식별 번호 (Business identification number)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        is_confirmed: 이메일 확인 여부 (Email confirmation status)
        login_attempts: 연속 로그인 실패 횟수 (Consecutive failed logins)
        last_login: 마지막 로그인 일시 (Last successful login)

    Relationships:
        surveys: 소유한 설문 목록 (Owned surveys)
    """

    __tablename__ = "clients"

    # 클라이언트 고유 식별자 — Client unique identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 회사명 — Company name (전역 고유)
    company_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # 담당자 — Contact person name
    contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 담당자 이메일 — Contact email (로그인 ID, 전역 고유)
    contact_email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    id_identification: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # 비밀번호 해시 — bcrypt hashed password
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 이메일 확인 — Confirmation state and token
    is_confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    confirmation_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    # 비밀번호 재설정 — Password reset token and expiry
    reset_password_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    reset_password_expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 로그인 추적 — Login tracking
    login_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships (클라이언트 삭제 시 설문의 client_id는 NULL)
    surveys = relationship("Survey", back_populates="client", passive_deletes=True)
