"""리프레시 토큰 모델 — JWT 리프레시 토큰 저장.

Refresh Token model — Stores issued JWT refresh tokens for rotation.
Users and clients share this table, distinguished by ``principal_kind``.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class RefreshToken(Base):
    """리프레시 토큰 테이블.

    Attributes:
        id: 고유 식별자 (Primary key UUID)
        principal_kind: 주체 종류 (Principal kind, "user" or "client")
        principal_id: 소유 사용자/클라이언트 ID (Owner UUID)
        token: JWT 리프레시 토큰 문자열 (JWT refresh token string)
        expires_at: 만료 일시 (Expiration timestamp)
        created_at: 생성 일시 (Creation timestamp)
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 주체 종류 — "user" | "client" (FK 없이 종류+ID로 식별)
    principal_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    principal_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    token: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_refresh_tokens_principal", "principal_kind", "principal_id"),
    )
