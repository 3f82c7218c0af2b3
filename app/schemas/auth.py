"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Shared by the user (respondent/admin) and client auth flows.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Attributes:
        email: 로그인 이메일 (Login email; contact email for clients)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: str  # 로그인 이메일 (Login email)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class RegisterRequest(BaseModel):
    """응답자 회원가입 요청 스키마.

    Respondent self-registration. The account starts unconfirmed with role "user";
    demographic fields are optional and can be completed later via PATCH /users/me.
    """

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)  # 평문, 서버에서 bcrypt 해싱
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    gender: str | None = None
    age: int | None = Field(default=None, ge=0, le=130)
    phone_number: str | None = None
    city: str | None = None
    residential_area: str | None = None
    purchase_responsibility: str | None = None
    children_count: int | None = Field(default=None, ge=0)
    children_ages: list[int] | None = None
    education_level: str | None = None


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    """토큰 갱신 요청 스키마 — 기존 리프레시 토큰을 새 토큰 쌍으로 교환."""

    refresh_token: str  # 기존 리프레시 토큰 (Current refresh token)


class ForgotPasswordRequest(BaseModel):
    """비밀번호 재설정 메일 요청."""

    email: str


class ResetPasswordRequest(BaseModel):
    """비밀번호 재설정 요청 — 메일로 받은 토큰과 새 비밀번호."""

    token: str
    new_password: str = Field(..., min_length=6, max_length=128)


class MessageResponse(BaseModel):
    """단순 메시지 응답 (Generic message response)."""

    message: str
