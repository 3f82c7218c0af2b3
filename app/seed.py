"""초기 데이터 시드 스크립트 — 관리자 계정 생성.

Seed script — Creates the initial admin user. Registration always creates
role "user", so this is how the first admin comes to exist.

Usage:
    python -m app.seed

Creates:
    - 1개 관리자 계정: SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD (확인 완료 상태)
      (1 confirmed admin user)
"""

import asyncio

from app.config import settings
from app.database import async_session, engine
from app.models import User
from app.repositories.user_repository import user_repository
from app.utils.logger import get_logger
from app.utils.password import hash_password

logger = get_logger(__name__)


async def seed() -> None:
    """관리자 계정을 생성합니다.

    Idempotent: 같은 이메일의 계정이 있으면 건너뜁니다 (Skips if the admin email exists).
    Tables are expected to exist already (``alembic upgrade head``).
    """
    async with async_session() as db:
        existing: User | None = await user_repository.get_by_email(db, settings.SEED_ADMIN_EMAIL)
        if existing is not None:
            logger.info("Admin %s already exists. Skipping.", existing.email)
        else:
            admin: User = await user_repository.create(
                db,
                {
                    "email": settings.SEED_ADMIN_EMAIL.strip().lower(),
                    "password_hash": hash_password(settings.SEED_ADMIN_PASSWORD),
                    "role": "admin",
                    "first_name": "System",
                    "last_name": "Admin",
                    "is_confirmed": True,
                },
            )
            await db.commit()
            logger.info("Seeded admin user %s (%s)", admin.email, admin.id)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
