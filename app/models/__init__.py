"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package registers every model with the metadata,
which Alembic and relationship resolution both rely on.

Modules:
    user: 응답자 및 관리자 (Respondents and admins with demographics)
    client: 설문 의뢰 기업 (Business accounts)
    survey: 설문 및 응답 결과 (Surveys and per-question results)
    token: 리프레시 토큰 (Refresh tokens for users and clients)
"""

from app.models.user import User
from app.models.client import Client
from app.models.survey import Survey, Result
from app.models.token import RefreshToken

__all__ = [
    "User",
    "Client",
    "Survey", "Result",
    "RefreshToken",
]
