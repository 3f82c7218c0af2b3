"""사용자 라우터 — 가입 확인, 내 프로필, 사용자 관리, 지갑.

User Router — Account confirmation, own profile, admin user management
and wallet endpoints. Fixed paths are declared before ``/{user_id}``.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserResponse, WalletAdjustRequest, WalletResponse
from app.services.auth_service import auth_service
from app.services.user_service import user_service
from app.utils.pagination import Page

router: APIRouter = APIRouter()


@router.get("/confirm/{token}", response_model=UserResponse)
async def confirm_account(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    """이메일 가입 확인 — 링크의 토큰으로 계정 활성화."""
    user: User = await auth_service.confirm(db, token)
    await db.commit()
    return user_service.to_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """내 프로필 조회."""
    return user_service.to_response(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    data: ProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """내 프로필 수정 — 전달된 필드만 반영."""
    result: UserResponse = await user_service.update_profile(db, current_user, data)
    await db.commit()
    return result


@router.get("", response_model=Page[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
    role: Annotated[str | None, Query(description="역할 필터")] = None,
    city: Annotated[str | None, Query(description="도시 필터")] = None,
    search: Annotated[str | None, Query(description="이메일/이름 검색")] = None,
) -> Page[UserResponse]:
    """사용자 목록 (관리자) — 삭제된 사용자 제외."""
    return await user_service.list_users(db, page, per_page, role=role, city=city, search=search)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """사용자 상세 (관리자 또는 본인)."""
    return await user_service.get_user(db, current_user, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: ProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """사용자 프로필 수정 (관리자 또는 본인)."""
    result: UserResponse = await user_service.update_user(db, current_user, user_id, data)
    await db.commit()
    return result


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
) -> None:
    """사용자 소프트 삭제 (관리자)."""
    await user_service.delete_user(db, user_id)
    await db.commit()


@router.get("/{user_id}/wallet", response_model=WalletResponse)
async def get_wallet(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> WalletResponse:
    """지갑 잔액/점수 조회 (관리자 또는 본인)."""
    return await user_service.get_wallet(db, current_user, user_id)


@router.patch("/{user_id}/wallet", response_model=WalletResponse)
async def adjust_wallet(
    user_id: UUID,
    data: WalletAdjustRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[User, Depends(require_admin)],
) -> WalletResponse:
    """지갑 잔액 조정 (관리자) — 음수 잔액 불가."""
    result: WalletResponse = await user_service.adjust_wallet(db, user_id, data)
    await db.commit()
    return result

