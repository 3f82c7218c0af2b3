"""사용자 인증 라우터 — 회원가입, 로그인, 토큰 갱신, 비밀번호 재설정.

User Auth Router — Respondent registration, login, refresh token rotation
and the password reset flow.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_mailer
from app.database import get_db
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from app.schemas.user import UserResponse
from app.services.auth_service import auth_service
from app.services.user_service import user_service
from app.utils.email import Mailer

router: APIRouter = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> UserResponse:
    """응답자 회원가입 — 확인 메일 발송, 계정은 미확인 상태.

    Register a respondent. The account must be confirmed before login.
    """
    user = await auth_service.register(db, data, mailer)
    await db.commit()
    return user_service.to_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """로그인 — 액세스/리프레시 토큰 쌍 발급."""
    result: TokenResponse = await auth_service.login(db, data)
    await db.commit()
    return result


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """토큰 갱신 — 리프레시 토큰으로 새 토큰 쌍 발급 (기존 토큰 폐기)."""
    result: TokenResponse = await auth_service.refresh(db, data.refresh_token)
    await db.commit()
    return result


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> MessageResponse:
    """비밀번호 재설정 메일 요청 — 항상 같은 응답."""
    message: str = await auth_service.forgot_password(db, data.email, mailer)
    await db.commit()
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """재설정 토큰으로 비밀번호 변경."""
    await auth_service.reset_password(db, data)
    await db.commit()
    return MessageResponse(message="Password has been reset successfully")
