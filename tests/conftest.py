"""테스트 인프라 — 임시 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Per-test SQLite (aiosqlite) database, session,
httpx client and account/survey fixtures. DATABASE_URL is pointed at SQLite
before the application is imported.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_bootstrap.db")

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.api.deps import get_mailer  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import *  # noqa: E402,F401,F403
from app.utils.jwt import create_access_token  # noqa: E402
from app.utils.password import hash_password  # noqa: E402


# ---------------------------------------------------------------------------
# 메일 대역 — Recording mailer
# ---------------------------------------------------------------------------
class FakeMailer:
    """발송 대신 기록만 하는 Mailer 대역."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail: bool = False

    async def _record(self, kind: str, to: str, link: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP unavailable")
        self.sent.append({"kind": kind, "to": to, "link": link})

    async def send_confirmation(self, to: str, link: str) -> None:
        await self._record("confirmation", to, link)

    async def send_password_reset(self, to: str, link: str) -> None:
        await self._record("reset", to, link)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """테스트마다 새 SQLite 파일에 스키마를 생성합니다."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest_asyncio.fixture
async def client(db: AsyncSession, mailer: FakeMailer) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션과 Mailer를 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def create_user(db: AsyncSession, email: str, role: str = "user", **fields):
    """확인 완료된 사용자를 생성합니다."""
    from app.models.user import User
    data = {
        "first_name": "Test",
        "last_name": "User",
        "password_hash": hash_password("secret123"),
        "is_confirmed": True,
        **fields,
    }
    user = User(email=email, role=role, **data)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession):
    """관리자 사용자를 생성합니다."""
    return await create_user(db, "admin@test.com", role="admin", first_name="Admin")


@pytest_asyncio.fixture
async def respondent(db: AsyncSession):
    """인구통계가 입력된 응답자를 생성합니다."""
    return await create_user(
        db,
        "ana@test.com",
        first_name="Ana",
        last_name="Silva",
        gender="female",
        age=29,
        city="Lisbon",
        education_level="university",
        purchase_responsibility="primary",
        children_count=1,
    )


@pytest_asyncio.fixture
async def other_respondent(db: AsyncSession):
    return await create_user(db, "bruno@test.com", first_name="Bruno", gender="male", age=41, city="Porto")


async def create_client_account(db: AsyncSession, company: str, email: str, confirmed: bool = True):
    from app.models.client import Client
    c = Client(
        company_name=company,
        contact_name="Contact",
        contact_email=email,
        password_hash=hash_password("client123"),
        is_confirmed=confirmed,
    )
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


@pytest_asyncio.fixture
async def client_account(db: AsyncSession):
    """확인 완료된 클라이언트를 생성합니다."""
    return await create_client_account(db, "Acme", "owner@acme.com")


@pytest_asyncio.fixture
async def other_client_account(db: AsyncSession):
    return await create_client_account(db, "Globex", "owner@globex.com")


SAMPLE_QUESTIONS: list[dict] = [
    {"questionId": "1", "question": "What do you think?", "type": "text", "answerLength": "short"},
    {
        "questionId": "2",
        "question": "Favorite color?",
        "type": "multiple",
        "options": ["Red", "Blue"],
        "multipleSelections": "no",
        "otherOption": True,
        "otherOptionText": "Other",
    },
    {
        "questionId": "3",
        "question": "Which fruits?",
        "type": "multiple",
        "options": ["Apple", "Banana", "Cherry"],
        "multipleSelections": "yes",
        "selectionLimit": 2,
    },
]


async def create_survey(db: AsyncSession, client=None, **fields):
    from app.models.survey import Survey
    data = {
        "title": "Customer survey",
        "description": "Tell us",
        "questions": SAMPLE_QUESTIONS,
        "expiration_time": datetime.now(timezone.utc) + timedelta(days=3),
        "status": "active",
        **fields,
    }
    survey = Survey(client_id=client.id if client is not None else None, **data)
    db.add(survey)
    await db.flush()
    await db.refresh(survey)
    return survey


@pytest_asyncio.fixture
async def survey(db: AsyncSession, client_account):
    """클라이언트 소유의 진행 중 설문을 생성합니다."""
    return await create_survey(db, client_account)


def make_token(user) -> str:
    """테스트용 사용자 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role})


def make_client_token(client_obj) -> str:
    """테스트용 클라이언트 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(client_obj.id)}, kind="client")


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user)


@pytest.fixture
def user_token(respondent) -> str:
    return make_token(respondent)


@pytest.fixture
def client_token(client_account) -> str:
    return make_client_token(client_account)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


VALID_ANSWERS: list[dict] = [
    {"questionId": "1", "answer": "Great service"},
    {"questionId": "2", "answer": "Blue"},
    {"questionId": "3", "answer": ["Apple", "Cherry"]},
]
