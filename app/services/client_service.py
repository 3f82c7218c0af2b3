"""클라이언트 서비스 — 기업 계정 가입, 로그인, 비밀번호 재설정, 관리자 대시보드.

Client Service — Business account registration and confirmation, login
with attempt tracking, refresh rotation, password reset and the admin
listing/dashboard.
"""

from datetime import timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.client import Client
from app.models.user import User
from app.repositories.auth_repository import auth_repository
from app.repositories.client_repository import client_repository
from app.repositories.result_repository import result_repository
from app.repositories.survey_repository import survey_repository
from app.repositories.user_repository import user_repository
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.client import (
    AdminDashboardResponse,
    ClientRegisterRequest,
    ClientResponse,
    ResetTokenStatus,
)
from app.services.auth_service import (
    FORGOT_PASSWORD_MESSAGE,
    auth_service,
    confirmation_link,
    send_mail_safely,
)
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.email import Mailer
from app.utils.exceptions import BadRequestError, DuplicateError, ForbiddenError, UnauthorizedError
from app.utils.jwt import generate_account_token
from app.utils.logger import get_logger
from app.utils.password import hash_password, verify_password

logger = get_logger(__name__)


class ClientService:
    """클라이언트 관련 비즈니스 로직을 처리하는 서비스."""

    def to_response(self, client: Client) -> ClientResponse:
        return ClientResponse(
            id=str(client.id),
            company_name=client.company_name,
            contact_name=client.contact_name,
            contact_email=client.contact_email,
            phone_number=client.phone_number,
            industry=client.industry,
            id_identification=client.id_identification,
            is_confirmed=client.is_confirmed,
            login_attempts=client.login_attempts,
            last_login=ensure_utc(client.last_login),
            created_at=ensure_utc(client.created_at),
        )

    async def register(self, db: AsyncSession, data: ClientRegisterRequest, mailer: Mailer) -> Client:
        """클라이언트 가입 — 미확인 상태로 생성 후 확인 메일 발송.

        Raises:
            DuplicateError: 회사명 또는 담당자 이메일 중복 (Duplicate company name or contact email)
        """
        email: str = data.contact_email.strip().lower()
        if await client_repository.get_by_company_name(db, data.company_name) is not None:
            raise DuplicateError("Company name already registered")
        if await client_repository.get_by_email(db, email) is not None:
            raise DuplicateError("Contact email already registered")

        client: Client = await client_repository.create(
            db,
            {
                **data.model_dump(exclude={"password", "contact_email", "company_name"}),
                "company_name": data.company_name.strip(),
                "contact_email": email,
                "password_hash": hash_password(data.password),
                "is_confirmed": False,
                "confirmation_token": generate_account_token(),
            },
        )
        logger.info("Client registered: %s (%s)", client.id, client.company_name)
        await send_mail_safely(
            "client confirmation",
            email,
            mailer.send_confirmation(email, confirmation_link("client/confirm", client.confirmation_token)),
        )
        return client

    async def confirm(self, db: AsyncSession, token: str) -> TokenResponse:
        """가입 확인 후 바로 로그인 토큰 발급.

        Raises:
            BadRequestError: 알 수 없거나 만료된 토큰 (Unknown or expired token)
        """
        client: Client | None = await client_repository.get_by_confirmation_token(db, token)
        if client is None:
            raise BadRequestError("Invalid or expired token")
        created = ensure_utc(client.created_at)
        if created + timedelta(minutes=settings.CONFIRMATION_TOKEN_EXPIRE_MINUTES) < utc_now():
            raise BadRequestError("Invalid or expired token")

        client = await client_repository.update(db, client, {"is_confirmed": True, "confirmation_token": None})
        return await auth_service.issue_tokens(db, "client", client.id)

    async def login(self, db: AsyncSession, data: LoginRequest) -> TokenResponse:
        """클라이언트 로그인 — 실패 시 login_attempts 증가.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 (Invalid credentials)
            ForbiddenError: 이메일 미확인 (Unconfirmed client)
        """
        client: Client | None = await client_repository.get_by_email(db, data.email)
        if client is None:
            raise UnauthorizedError("Invalid email or password")
        if not verify_password(data.password, client.password_hash):
            await client_repository.update(db, client, {"login_attempts": client.login_attempts + 1})
            # 실패 횟수는 요청 실패와 무관하게 저장
            await db.commit()
            raise UnauthorizedError("Invalid email or password")
        if not client.is_confirmed:
            raise ForbiddenError("Please confirm your email before logging in")

        await client_repository.update(db, client, {"login_attempts": 0, "last_login": utc_now()})
        return await auth_service.issue_tokens(db, "client", client.id)

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenResponse:
        client_id: UUID = await auth_service.consume_refresh_token(db, "client", refresh_token)
        client: Client | None = await client_repository.get_by_id(db, client_id)
        if client is None:
            raise UnauthorizedError("Client not found")
        return await auth_service.issue_tokens(db, "client", client.id)

    async def forgot_password(self, db: AsyncSession, email: str, mailer: Mailer) -> str:
        client: Client | None = await client_repository.get_by_email(db, email)
        if client is not None:
            token: str = generate_account_token()
            await client_repository.update(
                db,
                client,
                {
                    "reset_password_token": token,
                    "reset_password_expires": utc_now() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
                },
            )
            await send_mail_safely(
                "client password reset",
                client.contact_email,
                mailer.send_password_reset(client.contact_email, confirmation_link("client/reset-password", token)),
            )
        return FORGOT_PASSWORD_MESSAGE

    async def _get_by_valid_reset_token(self, db: AsyncSession, token: str) -> Client | None:
        client: Client | None = await client_repository.get_by_reset_token(db, token)
        if client is None:
            return None
        expires = ensure_utc(client.reset_password_expires)
        if expires is None or expires < utc_now():
            return None
        return client

    async def validate_reset_token(self, db: AsyncSession, token: str) -> ResetTokenStatus:
        """재설정 토큰 유효성 — 프론트엔드가 폼 표시 전에 확인."""
        client: Client | None = await self._get_by_valid_reset_token(db, token)
        if client is None:
            return ResetTokenStatus(valid=False)
        return ResetTokenStatus(valid=True, email=client.contact_email)

    async def reset_password(self, db: AsyncSession, token: str, new_password: str) -> None:
        """재설정 토큰으로 비밀번호 변경.

        Raises:
            BadRequestError: 유효하지 않거나 만료된 토큰 (Invalid or expired token)
        """
        client: Client | None = await self._get_by_valid_reset_token(db, token)
        if client is None:
            raise BadRequestError("Invalid or expired token")

        await client_repository.update(
            db,
            client,
            {
                "password_hash": hash_password(new_password),
                "reset_password_token": None,
                "reset_password_expires": None,
                "login_attempts": 0,
            },
        )
        await auth_repository.delete_principal_tokens(db, "client", client.id)

    async def list_clients(self, db: AsyncSession) -> list[ClientResponse]:
        return [self.to_response(c) for c in await client_repository.get_all_ordered(db)]

    async def dashboard(self, db: AsyncSession) -> AdminDashboardResponse:
        """관리자 대시보드 집계."""
        return AdminDashboardResponse(
            total_clients=await client_repository.count(db),
            confirmed_clients=await client_repository.count(db, Client.is_confirmed.is_(True)),
            total_surveys=await survey_repository.count(db),
            active_surveys=await survey_repository.count_active(db, utc_now()),
            total_users=await user_repository.count(db, User.deleted.is_(False)),
            total_results=await result_repository.count(db),
        )


# 싱글턴 인스턴스 — Singleton instance
client_service: ClientService = ClientService()
