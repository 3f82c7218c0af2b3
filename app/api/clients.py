"""클라이언트 라우터 — 기업 계정 가입/로그인, 비밀번호 재설정, 관리자 조회.

Client Router — Business account registration, confirmation, login,
refresh, password reset, and the admin listing and dashboard.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_client, get_mailer, require_admin
from app.database import get_db
from app.models.client import Client
from app.models.user import User
from app.schemas.auth import ForgotPasswordRequest, LoginRequest, MessageResponse, RefreshRequest, TokenResponse
from app.schemas.client import (
    AdminDashboardResponse,
    ClientRegisterRequest,
    ClientResponse,
    NewPasswordRequest,
    ResetTokenStatus,
)
from app.services.client_service import client_service
from app.utils.email import Mailer

router: APIRouter = APIRouter()


@router.post("/register", response_model=ClientResponse, status_code=201)
async def register_client(
    data: ClientRegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> ClientResponse:
    """클라이언트 가입 — 확인 메일 발송."""
    client: Client = await client_service.register(db, data, mailer)
    await db.commit()
    return client_service.to_response(client)


@router.get("/confirm/{token}", response_model=TokenResponse)
async def confirm_client(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """가입 확인 — 확인 후 토큰 쌍 발급."""
    result: TokenResponse = await client_service.confirm(db, token)
    await db.commit()
    return result


@router.post("/login", response_model=TokenResponse)
async def login_client(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """클라이언트 로그인 — 담당자 이메일과 비밀번호."""
    result: TokenResponse = await client_service.login(db, data)
    await db.commit()
    return result


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_client_token(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    result: TokenResponse = await client_service.refresh(db, data.refresh_token)
    await db.commit()
    return result


@router.get("/me", response_model=ClientResponse)
async def get_me(
    current_client: Annotated[Client, Depends(get_current_client)],
) -> ClientResponse:
    """내 클라이언트 정보 조회."""
    return client_service.to_response(current_client)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> MessageResponse:
    message: str = await client_service.forgot_password(db, data.email, mailer)
    await db.commit()
    return MessageResponse(message=message)


@router.get("/validate-reset-token/{token}", response_model=ResetTokenStatus)
async def validate_reset_token(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ResetTokenStatus:
    """재설정 토큰 유효성 확인."""
    return await client_service.validate_reset_token(db, token)


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(
    token: str,
    data: NewPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """재설정 토큰으로 비밀번호 변경."""
    await client_service.reset_password(db, token, data.new_password)
    await db.commit()
    return MessageResponse(message="Password has been reset successfully")


@router.get("/admin/all-clients", response_model=list[ClientResponse])
async def list_clients(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
) -> list[ClientResponse]:
    """전체 클라이언트 목록 (관리자)."""
    return await client_service.list_clients(db)


@router.get("/admin/dashboard", response_model=AdminDashboardResponse)
async def admin_dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
) -> AdminDashboardResponse:
    """관리자 대시보드 집계."""
    return await client_service.dashboard(db)
