"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.

Authentication Flow:
    1. 요청이 Authorization: Bearer <token> 헤더를 전송
       (Request carries an Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 (HTTPBearer extracts the token)
    3. decode_token()이 주체 종류별 서명 키로 JWT를 검증
       (decode_token verifies the JWT with the secret of the expected kind)
    4. 페이로드의 "sub" 필드로 DB에서 사용자/클라이언트를 조회
       (User or client is fetched from DB using payload "sub" field)

Access levels:
    - get_current_user: 확인된, 삭제되지 않은 사용자 (Any user token)
    - require_admin: role == "admin"
    - get_current_client: 클라이언트 토큰 (Client token)
    - get_admin_or_client: 관리자 또는 클라이언트 — 설문 소유권 검사는 서비스에서
      (Admin or client; survey ownership is checked by the services)
"""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.client import Client
from app.models.user import User
from app.repositories.client_repository import client_repository
from app.repositories.user_repository import user_repository
from app.utils.email import Mailer
from app.utils.jwt import TokenKind, decode_token

# HTTP Bearer 토큰 추출기 — Authorization 헤더에서 JWT 토큰 추출
security: HTTPBearer = HTTPBearer()


@dataclass
class Principal:
    """인증된 주체 — 관리자 사용자 또는 클라이언트.

    Attributes:
        user: 관리자 사용자 (Admin user, None for clients)
        client: 클라이언트 (Client, None for admins)
    """

    user: User | None = None
    client: Client | None = None

    @property
    def client_id(self) -> UUID | None:
        """소유권 검사용 클라이언트 ID — 관리자는 None (no restriction)."""
        return self.client.id if self.client is not None else None


def _principal_id(token: str, kind: TokenKind) -> UUID:
    """액세스 토큰을 검증하고 sub를 UUID로 반환합니다.

    Raises:
        HTTPException(401): 토큰이 유효하지 않거나 만료됨 (Invalid or expired token)
    """
    try:
        payload: dict = decode_token(token, kind=kind)
        # 토큰 타입 검증 — Reject refresh tokens used as access tokens
        if payload.get("type") != "access":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
        return UUID(str(payload["sub"]))
    except HTTPException:
        raise
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Args:
        credentials: HTTP Bearer 토큰 자격 증명 (Bearer token credentials from header)
        db: 비동기 DB 세션 (Async database session)

    Returns:
        User: 인증된 사용자 ORM 인스턴스 (Authenticated user ORM instance)

    Raises:
        HTTPException(401): 토큰이 유효하지 않거나 사용자가 없음/삭제됨
                            (Invalid token, unknown or deleted user)
    """
    user_id: UUID = _principal_id(credentials.credentials, "user")
    user: User | None = await user_repository.get_by_id(db, user_id)
    if user is None or user.deleted:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or deleted")
    return user


async def require_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """관리자 전용 — role이 admin이 아니면 403."""
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


async def get_current_client(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Client:
    """클라이언트 토큰에서 현재 클라이언트를 추출합니다 (CLIENT_JWT_SECRET_KEY로 검증)."""
    client_id: UUID = _principal_id(credentials.credentials, "client")
    client: Client | None = await client_repository.get_by_id(db, client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Client not found")
    return client


async def get_admin_or_client(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Principal:
    """관리자 사용자 토큰 또는 클라이언트 토큰을 허용합니다.

    The token is tried as a user token first, then as a client token;
    the two kinds are signed with different secrets, so at most one verifies.

    Raises:
        HTTPException(401): 어느 쪽으로도 검증되지 않음 (Neither kind verifies)
        HTTPException(403): 관리자가 아닌 사용자 토큰 (User token without admin role)
    """
    token: str = credentials.credentials
    try:
        decode_token(token, kind="user")
    except jwt.InvalidTokenError:
        return Principal(client=await get_current_client(credentials, db))

    user: User = await get_current_user(credentials, db)
    return Principal(user=await require_admin(user))


def get_mailer(request: Request) -> Mailer:
    """lifespan에서 생성된 Mailer — Mailer created in the application lifespan."""
    return request.app.state.mailer
