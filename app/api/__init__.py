"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every router into ``api_router``,
mounted under the ``/api`` prefix by ``app.main``.

Included routers:
    - auth: 응답자 인증 (Respondent registration, login, password reset)
    - users: 사용자/프로필/지갑 (Users, profile, wallet)
    - clients: 기업 계정 (Business accounts)
    - surveys: 설문 및 응답 제출 (Surveys and response submission)
    - results: 결과, 분석, Excel (Results, analytics, Excel export)
"""

from fastapi import APIRouter

from app.api.auth import router as auth_router
from app.api.clients import router as clients_router
from app.api.results import router as results_router
from app.api.surveys import router as surveys_router
from app.api.users import router as users_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(clients_router, prefix="/clients", tags=["Clients"])
api_router.include_router(surveys_router, prefix="/surveys", tags=["Surveys"])
api_router.include_router(results_router, prefix="/results", tags=["Results"])
