"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 라우터, lifespan 등록.

FastAPI application entry point — Middleware, router and lifespan setup.
The lifespan owns the Mailer, the optional unconfirmed-user purge task
and the database engine.
"""

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import api_router
from app.config import settings
from app.database import async_session, engine
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.services.user_service import user_service
from app.utils.email import Mailer
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def purge_unconfirmed_loop(interval_seconds: int) -> None:
    """미확인 사용자 정리 루프 — interval_seconds마다 실행."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with async_session() as db:
                await user_service.purge_unconfirmed(db)
                await db.commit()
        except Exception:
            logger.exception("Unconfirmed user purge failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.mailer = Mailer(settings)

    purge_task: asyncio.Task | None = None
    if settings.UNCONFIRMED_CLEANUP_INTERVAL_SECONDS > 0:
        purge_task = asyncio.create_task(purge_unconfirmed_loop(settings.UNCONFIRMED_CLEANUP_INTERVAL_SECONDS))
        logger.info("Unconfirmed user purge every %ss", settings.UNCONFIRMED_CLEANUP_INTERVAL_SECONDS)

    yield

    if purge_task is not None:
        purge_task.cancel()
        with suppress(asyncio.CancelledError):
            await purge_task
    await engine.dispose()


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Axiom API 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


app.include_router(api_router, prefix="/api")
