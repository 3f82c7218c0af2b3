"""클라이언트(기업 계정) 관련 Pydantic 요청/응답 스키마 정의.

Client (business account) Pydantic request/response schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ClientRegisterRequest(BaseModel):
    """클라이언트 가입 요청 스키마.

    Attributes:
        company_name: 회사명, 전역 고유 (Company name, unique)
        contact_name: 담당자 이름 (Contact person)
        contact_email: 담당자 이메일, 로그인 ID (Contact email, login id, unique)
        password: 비밀번호 (Plain text, bcrypt-hashed server-side)
        phone_number / industry / id_identification: 선택 정보 (Optional details)
    """

    company_name: str = Field(..., min_length=1, max_length=255)
    contact_name: str = Field(..., min_length=1, max_length=255)
    contact_email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    phone_number: str | None = None
    industry: str | None = None
    id_identification: str | None = None


class ClientResponse(BaseModel):
    """클라이언트 응답 스키마 — 비밀번호/토큰 제외."""

    id: str
    company_name: str
    contact_name: str
    contact_email: str
    phone_number: str | None
    industry: str | None
    id_identification: str | None
    is_confirmed: bool
    login_attempts: int
    last_login: datetime | None
    created_at: datetime


class NewPasswordRequest(BaseModel):
    """새 비밀번호 (토큰은 경로 파라미터로 전달)."""

    new_password: str = Field(..., min_length=6, max_length=128)


class ResetTokenStatus(BaseModel):
    """재설정 토큰 유효성 응답."""

    valid: bool
    email: str | None = None


class AdminDashboardResponse(BaseModel):
    """관리자 대시보드 집계 (GET /clients/admin/dashboard).

    Attributes:
        total_clients: 전체 클라이언트 수
        confirmed_clients: 이메일 확인된 클라이언트 수
        total_surveys: 전체 설문 수
        active_surveys: 진행 중(미만료) 설문 수
        total_users: 삭제되지 않은 사용자 수
        total_results: 저장된 결과 행 수
    """

    total_clients: int
    confirmed_clients: int
    total_surveys: int
    active_surveys: int
    total_users: int
    total_results: int
