"""사용자 서비스 — 프로필, 사용자 관리, 지갑 비즈니스 로직.

User Service — Profile read/update, admin user management (list, soft
delete), wallet balance and the purge of stale unconfirmed accounts.
"""

from datetime import timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import User
from app.repositories.auth_repository import auth_repository
from app.repositories.user_repository import user_repository
from app.schemas.user import (
    ProfileUpdate,
    UserResponse,
    WalletAdjustRequest,
    WalletResponse,
)
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.utils.logger import get_logger
from app.utils.pagination import Page

logger = get_logger(__name__)


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스."""

    def to_response(self, user: User) -> UserResponse:
        """사용자 모델을 응답 스키마로 변환합니다.

        Convert a User model instance to a UserResponse schema.
        Password hash and account tokens are never copied.
        """
        return UserResponse(
            id=str(user.id),
            email=user.email,
            role=user.role,
            first_name=user.first_name,
            last_name=user.last_name,
            is_confirmed=user.is_confirmed,
            deleted=user.deleted,
            gender=user.gender,
            age=user.age,
            phone_number=user.phone_number,
            city=user.city,
            residential_area=user.residential_area,
            purchase_responsibility=user.purchase_responsibility,
            children_count=user.children_count,
            children_ages=user.children_ages,
            education_level=user.education_level,
            wallet_balance=user.wallet_balance or 0.0,
            score=user.score or 0,
            created_at=ensure_utc(user.created_at),
        )

    def _ensure_self_or_admin(self, current_user: User, user_id: UUID) -> None:
        if not current_user.is_admin and current_user.id != user_id:
            raise ForbiddenError("You can only access your own account")

    async def _get_active_user(self, db: AsyncSession, user_id: UUID) -> User:
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None or user.deleted:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, db: AsyncSession, user: User, data: ProfileUpdate) -> UserResponse:
        """프로필 부분 업데이트 — 전달된 화이트리스트 필드만 반영."""
        update_data = data.model_dump(exclude_unset=True)
        updated: User = await user_repository.update(db, user, update_data)
        return self.to_response(updated)

    async def list_users(
        self,
        db: AsyncSession,
        page: int = 1,
        per_page: int = 20,
        role: str | None = None,
        city: str | None = None,
        search: str | None = None,
    ) -> Page[UserResponse]:
        """삭제되지 않은 사용자 목록 (관리자) — Paginated, newest first."""
        users, total = await user_repository.get_list(db, page, per_page, role=role, city=city, search=search)
        return Page[UserResponse].build([self.to_response(u) for u in users], total, page, per_page)

    async def get_user(self, db: AsyncSession, current_user: User, user_id: UUID) -> UserResponse:
        """사용자 상세 (관리자 또는 본인).

        Raises:
            ForbiddenError: 본인이 아닌 일반 사용자 (Not self and not admin)
            NotFoundError: 존재하지 않거나 삭제된 사용자 (Unknown or deleted user)
        """
        self._ensure_self_or_admin(current_user, user_id)
        return self.to_response(await self._get_active_user(db, user_id))

    async def update_user(
        self,
        db: AsyncSession,
        current_user: User,
        user_id: UUID,
        data: ProfileUpdate,
    ) -> UserResponse:
        self._ensure_self_or_admin(current_user, user_id)
        user: User = await self._get_active_user(db, user_id)
        return await self.update_profile(db, user, data)

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> None:
        """사용자 소프트 삭제 (관리자) — 결과는 유지하고 로그인/토큰 갱신만 차단."""
        user: User = await self._get_active_user(db, user_id)
        await user_repository.update(db, user, {"deleted": True})
        await auth_repository.delete_principal_tokens(db, "user", user.id)
        logger.info("User soft-deleted: %s", user.id)

    async def get_wallet(self, db: AsyncSession, current_user: User, user_id: UUID) -> WalletResponse:
        self._ensure_self_or_admin(current_user, user_id)
        user: User = await self._get_active_user(db, user_id)
        return WalletResponse(user_id=str(user.id), wallet_balance=user.wallet_balance, score=user.score)

    async def adjust_wallet(self, db: AsyncSession, user_id: UUID, data: WalletAdjustRequest) -> WalletResponse:
        """지갑 잔액 조정 (관리자).

        Raises:
            BadRequestError: 잔액 또는 점수가 음수가 되는 경우 (Result would be negative)
        """
        user: User = await self._get_active_user(db, user_id)
        new_balance: float = round((user.wallet_balance or 0.0) + data.amount, 2)
        new_score: int = (user.score or 0) + data.score_delta
        if new_balance < 0:
            raise BadRequestError("Insufficient wallet balance")
        if new_score < 0:
            raise BadRequestError("Score cannot be negative")

        user = await user_repository.update(db, user, {"wallet_balance": new_balance, "score": new_score})
        logger.info("Wallet adjusted for %s: amount=%s score_delta=%s", user.id, data.amount, data.score_delta)
        return WalletResponse(user_id=str(user.id), wallet_balance=user.wallet_balance, score=user.score)

    async def purge_unconfirmed(self, db: AsyncSession) -> int:
        """오래된 미확인 사용자 삭제.

        Deletes unconfirmed users older than ``UNCONFIRMED_USER_TTL_MINUTES``.
        The retention never drops below ``CONFIRMATION_TOKEN_EXPIRE_MINUTES``,
        so an account is kept while its confirmation link is still valid.

        Returns:
            int: 삭제된 사용자 수 (Number of deleted users)
        """
        ttl_minutes = max(settings.UNCONFIRMED_USER_TTL_MINUTES, settings.CONFIRMATION_TOKEN_EXPIRE_MINUTES)
        cutoff = utc_now() - timedelta(minutes=ttl_minutes)
        deleted: int = await user_repository.delete_unconfirmed_before(db, cutoff)
        if deleted:
            logger.info("Purged %d unconfirmed users", deleted)
        return deleted


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
