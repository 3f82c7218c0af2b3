"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification with bcrypt.
Users and clients share these helpers; plaintext passwords are never stored.
"""

import bcrypt

# bcrypt는 72바이트까지만 사용하며, bcrypt>=5는 초과 입력에 ValueError 발생
# bcrypt only consumes 72 bytes; bcrypt>=5 raises ValueError beyond that
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다.

    Args:
        password: 평문 비밀번호 (Plain text password to hash)

    Returns:
        str: bcrypt 해시 문자열 (Bcrypt hash string, ~60 chars)
    """
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 bcrypt 해시를 비교 검증합니다.

    Returns False for malformed hashes instead of raising.

    Args:
        plain_password: 검증할 평문 비밀번호 (Plain text password to verify)
        hashed_password: 저장된 bcrypt 해시 (Stored bcrypt hash)

    Returns:
        bool: 일치하면 True (True if password matches hash)
    """
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False
