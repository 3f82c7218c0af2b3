"""사용자 및 프로필 관련 Pydantic 요청/응답 스키마 정의.

User and profile Pydantic request/response schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """사용자 응답 스키마 — 비밀번호/토큰 필드 제외.

    User as returned by the API; password hash and account tokens are never exposed.
    """

    id: str
    email: str
    role: str  # "user" | "admin"
    first_name: str
    last_name: str
    is_confirmed: bool
    deleted: bool
    gender: str | None
    age: int | None
    phone_number: str | None
    city: str | None
    residential_area: str | None
    purchase_responsibility: str | None
    children_count: int | None
    children_ages: list[int] | None
    education_level: str | None
    wallet_balance: float
    score: int
    created_at: datetime


class ProfileUpdate(BaseModel):
    """프로필 수정 요청 스키마 (부분 업데이트).

    Whitelisted profile fields a user (or an admin on their behalf) may change.
    Only provided fields are updated.
    """

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    gender: str | None = None
    age: int | None = Field(default=None, ge=0, le=130)
    phone_number: str | None = None
    city: str | None = None
    residential_area: str | None = None
    purchase_responsibility: str | None = None
    children_count: int | None = Field(default=None, ge=0)
    children_ages: list[int] | None = None
    education_level: str | None = None


class WalletResponse(BaseModel):
    """지갑 조회 응답."""

    user_id: str
    wallet_balance: float
    score: int


class WalletAdjustRequest(BaseModel):
    """지갑 잔액 조정 요청 (관리자) — amount는 부호 있는 증감액.

    Signed adjustment; the resulting balance may not go negative.
    """

    amount: float
    score_delta: int = 0  # 점수 증감 (Optional score adjustment)
