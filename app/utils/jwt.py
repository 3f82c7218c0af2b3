"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token creation and verification utility module.
Respondents/admins ("user") and business accounts ("client") are signed
with different secrets, so a token of one kind never verifies as the other.

JWT Payload Structure:
    {
        "sub": "principal_uuid",    # 사용자 또는 클라이언트 ID (Principal identifier)
        "kind": "user"|"client",    # 주체 종류 (Principal kind)
        "role": "user"|"admin",     # 사용자 역할, 사용자 토큰에만 존재 (User tokens only)
        "exp": 1234567890,          # 만료 시간 UNIX timestamp (Expiration)
        "type": "access"|"refresh", # 토큰 유형 (Token type discriminator)
        "jti": "..."                # 리프레시 토큰 고유값 (Refresh tokens only)
    }
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

import jwt

from app.config import settings

TokenKind = Literal["user", "client"]


def _secret_for(kind: TokenKind) -> str:
    """주체 종류별 서명 키 — Signing secret for the principal kind."""
    if kind == "client":
        return settings.CLIENT_JWT_SECRET_KEY
    return settings.JWT_SECRET_KEY


def create_access_token(data: dict[str, Any], kind: TokenKind = "user") -> str:
    """JWT 액세스 토큰을 생성합니다.

    Generate a JWT access token with the given payload data.
    Token expires after JWT_ACCESS_TOKEN_EXPIRE_MINUTES.

    Args:
        data: JWT 페이로드 데이터, 일반적으로 {"sub": id, "role": role}
              (JWT payload data)
        kind: 주체 종류 — 서명 키 선택 (Principal kind, selects the signing secret)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)

    Example:
        token = create_access_token({"sub": str(client.id)}, kind="client")
    """
    to_encode: dict[str, Any] = data.copy()
    # 만료 시간 설정 — 현재 UTC 시간 + 설정된 분 수 (Set expiration from current UTC + configured minutes)
    expire: datetime = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access", "kind": kind})
    return jwt.encode(to_encode, _secret_for(kind), algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(data: dict[str, Any], kind: TokenKind = "user") -> str:
    """JWT 리프레시 토큰을 생성합니다.

    Generate a JWT refresh token with the given payload data.
    Token expires after JWT_REFRESH_TOKEN_EXPIRE_DAYS.
    A random ``jti`` keeps tokens issued within the same second distinct.

    Args:
        data: JWT 페이로드 데이터 (JWT payload data, same structure as access token)
        kind: 주체 종류 (Principal kind)

    Returns:
        str: 인코딩된 JWT 리프레시 토큰 문자열 (Encoded JWT refresh token string)
    """
    to_encode: dict[str, Any] = data.copy()
    # 만료 시간 설정 — 현재 UTC 시간 + 설정된 일 수 (Set expiration from current UTC + configured days)
    expire: datetime = datetime.now(timezone.utc) + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode.update({
        "exp": expire,
        "type": "refresh",
        "kind": kind,
        "jti": secrets.token_hex(8),
    })
    return jwt.encode(to_encode, _secret_for(kind), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, kind: TokenKind = "user") -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Decode and verify a JWT token string against the secret for ``kind``.

    Args:
        token: JWT 토큰 문자열 (Encoded JWT token string)
        kind: 기대하는 주체 종류 (Expected principal kind)

    Returns:
        dict[str, Any]: 디코딩된 페이로드 딕셔너리 (Decoded payload dictionary)

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 또는 종류 불일치
                               (When token is invalid or issued for another kind)
    """
    payload: dict[str, Any] = jwt.decode(token, _secret_for(kind), algorithms=[settings.JWT_ALGORITHM])
    if payload.get("kind") != kind:
        raise jwt.InvalidTokenError("Token kind mismatch")
    return payload


def generate_account_token() -> str:
    """가입 확인/비밀번호 재설정용 불투명 토큰 — 40자 hex.

    Opaque token for confirmation and password-reset links (40 hex chars).
    """
    return secrets.token_hex(20)
