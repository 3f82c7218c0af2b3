"""인증 서비스 — 회원가입, 로그인, 토큰 갱신, 비밀번호 재설정 비즈니스 로직.

Auth Service — Business logic for respondent registration and confirmation,
login, refresh token rotation and password reset. The token helpers are
shared with ``client_service``; the two principal kinds only differ in the
signing secret and the claims they carry.
"""

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import User
from app.repositories.auth_repository import auth_repository
from app.repositories.user_repository import user_repository
from app.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.email import Mailer
from app.utils.exceptions import (
    BadRequestError,
    DuplicateError,
    ForbiddenError,
    UnauthorizedError,
)
from app.utils.jwt import TokenKind, create_access_token, create_refresh_token, decode_token, generate_account_token
from app.utils.logger import get_logger
from app.utils.password import hash_password, verify_password

logger = get_logger(__name__)

FORGOT_PASSWORD_MESSAGE: str = "If an account with that email exists, a password reset link has been sent."


def confirmation_link(path: str, token: str) -> str:
    """프론트엔드 링크 생성 — e.g. ``/confirm?token=...``."""
    return f"{settings.FRONTEND_URL.rstrip('/')}/{path.lstrip('/')}?token={token}"


def link_expired(issued_at: datetime | None, minutes: int) -> bool:
    """발급 시각 + 유효 분 < 현재 시각이면 만료."""
    issued = ensure_utc(issued_at)
    if issued is None:
        return True
    return issued + timedelta(minutes=minutes) < utc_now()


async def send_mail_safely(kind: str, to: str, coro: Any) -> None:
    """메일 발송 — 실패는 로그만 남기고 요청은 성공 처리.

    Mail failures are logged and never fail the calling request.
    """
    try:
        await coro
    except Exception:
        logger.exception("Failed to send %s mail to %s", kind, to)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스."""

    async def issue_tokens(
        self,
        db: AsyncSession,
        kind: TokenKind,
        principal_id: UUID,
        claims: dict[str, Any] | None = None,
    ) -> TokenResponse:
        """액세스 토큰과 리프레시 토큰을 생성합니다.

        Generate an access/refresh pair and persist the refresh token.
        Older refresh tokens of the same principal are removed.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            kind: 주체 종류 (Principal kind, "user" or "client")
            principal_id: 사용자/클라이언트 ID (Principal UUID)
            claims: 추가 클레임, 예: {"role": "admin"} (Extra claims)

        Returns:
            TokenResponse: 토큰 응답 (Token response with access and refresh tokens)
        """
        payload: dict[str, Any] = {"sub": str(principal_id), **(claims or {})}
        access_token: str = create_access_token(payload, kind=kind)
        refresh_token: str = create_refresh_token(payload, kind=kind)

        # 기존 리프레시 토큰 정리 — Clean up old refresh tokens
        await auth_repository.delete_principal_tokens(db, kind, principal_id)

        expires_at: datetime = utc_now() + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
        await auth_repository.create_refresh_token(
            db, principal_kind=kind, principal_id=principal_id, token=refresh_token, expires_at=expires_at
        )
        return TokenResponse(access_token=access_token, refresh_token=refresh_token)

    async def consume_refresh_token(self, db: AsyncSession, kind: TokenKind, token: str) -> UUID:
        """리프레시 토큰을 검증하고 폐기한 뒤 주체 ID를 반환합니다.

        Verify the JWT, look it up in the store and delete it (rotation).

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 토큰 (Invalid, expired or unknown token)
        """
        try:
            payload: dict[str, Any] = decode_token(token, kind=kind)
        except jwt.PyJWTError:
            raise UnauthorizedError("Invalid or expired refresh token")

        if payload.get("type") != "refresh":
            raise UnauthorizedError("Invalid token type")

        db_token = await auth_repository.get_refresh_token(db, token, kind)
        if db_token is None:
            raise UnauthorizedError("Refresh token not found")

        await auth_repository.delete_refresh_token(db, db_token)
        if ensure_utc(db_token.expires_at) < utc_now():
            raise UnauthorizedError("Refresh token has expired")

        try:
            return UUID(str(payload.get("sub")))
        except ValueError:
            raise UnauthorizedError("Invalid token payload")

    # ------------------------------------------------------------------
    # 사용자 (응답자/관리자) — Users
    # ------------------------------------------------------------------

    def _user_claims(self, user: User) -> dict[str, Any]:
        return {"role": user.role}

    async def register(self, db: AsyncSession, data: RegisterRequest, mailer: Mailer) -> User:
        """응답자 회원가입 — 미확인 상태로 생성 후 확인 메일 발송.

        Raises:
            DuplicateError: 이메일 중복 시 (Email already registered)
        """
        email: str = data.email.strip().lower()
        if await user_repository.get_by_email(db, email) is not None:
            raise DuplicateError("Email already registered")

        fields = data.model_dump(exclude={"email", "password"})
        user: User = await user_repository.create(
            db,
            {
                **fields,
                "email": email,
                "password_hash": hash_password(data.password),
                "role": "user",
                "is_confirmed": False,
                "confirmation_token": generate_account_token(),
            },
        )
        logger.info("User registered: %s", user.id)
        await send_mail_safely(
            "confirmation",
            email,
            mailer.send_confirmation(email, confirmation_link("confirm", user.confirmation_token)),
        )
        return user

    async def confirm(self, db: AsyncSession, token: str) -> User:
        """가입 확인 — 링크는 가입 후 CONFIRMATION_TOKEN_EXPIRE_MINUTES 동안 유효.

        Raises:
            BadRequestError: 알 수 없거나 만료된 토큰 (Unknown or expired token)
        """
        user: User | None = await user_repository.get_by_confirmation_token(db, token)
        if user is None or user.deleted:
            raise BadRequestError("Invalid or expired token")
        if link_expired(user.created_at, settings.CONFIRMATION_TOKEN_EXPIRE_MINUTES):
            raise BadRequestError("Invalid or expired token")

        return await user_repository.update(db, user, {"is_confirmed": True, "confirmation_token": None})

    async def login(self, db: AsyncSession, data: LoginRequest) -> TokenResponse:
        """사용자 로그인을 처리합니다.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 또는 삭제된 계정 (Invalid credentials or deleted account)
            ForbiddenError: 이메일 미확인 계정 (Unconfirmed account)
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        if user.deleted:
            raise UnauthorizedError("Account has been deleted")
        if not user.is_confirmed:
            raise ForbiddenError("Please confirm your email before logging in")

        return await self.issue_tokens(db, "user", user.id, self._user_claims(user))

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenResponse:
        """사용자 리프레시 토큰 교체 — Rotate a user refresh token."""
        user_id: UUID = await self.consume_refresh_token(db, "user", refresh_token)
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None or user.deleted:
            raise UnauthorizedError("User not found or deleted")
        return await self.issue_tokens(db, "user", user.id, self._user_claims(user))

    async def forgot_password(self, db: AsyncSession, email: str, mailer: Mailer) -> str:
        """비밀번호 재설정 메일 — 계정 존재 여부와 무관하게 같은 메시지 반환."""
        user: User | None = await user_repository.get_by_email(db, email)
        if user is not None and not user.deleted:
            token: str = generate_account_token()
            await user_repository.update(
                db,
                user,
                {
                    "reset_password_token": token,
                    "reset_password_expires": utc_now() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
                },
            )
            await send_mail_safely(
                "password reset",
                user.email,
                mailer.send_password_reset(user.email, confirmation_link("reset-password", token)),
            )
        return FORGOT_PASSWORD_MESSAGE

    async def reset_password(self, db: AsyncSession, data: ResetPasswordRequest) -> None:
        """재설정 토큰으로 비밀번호 변경 — 기존 리프레시 토큰은 모두 폐기.

        Raises:
            BadRequestError: 유효하지 않거나 만료된 토큰 (Invalid or expired token)
        """
        user: User | None = await user_repository.get_by_reset_token(db, data.token)
        if user is None or ensure_utc(user.reset_password_expires) is None or ensure_utc(user.reset_password_expires) < utc_now():
            raise BadRequestError("Invalid or expired token")

        await user_repository.update(
            db,
            user,
            {
                "password_hash": hash_password(data.new_password),
                "reset_password_token": None,
                "reset_password_expires": None,
            },
        )
        await auth_repository.delete_principal_tokens(db, "user", user.id)


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
