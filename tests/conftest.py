"""테스트 인프라 — 임시 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Temporary SQLite (aiosqlite) DB per test, session,
and httpx client fixtures. Each test gets its own application built by
create_app() with local-only classification and local file storage.
"""

from collections.abc import AsyncGenerator
from datetime import datetime

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.main import create_app
from app.models.error_report import ErrorReport
from app.models.user import User
from app.utils.jwt import create_access_token
from app.utils.password import hash_password

ERRORS_URL = "/api/v1/errors"
STATS_URL = "/api/v1/stats"
CLASSIFY_URL = "/api/v1/classify"
AUTH_URL = "/api/v1/auth"


# ---------------------------------------------------------------------------
# 설정 및 애플리케이션
# ---------------------------------------------------------------------------
@pytest.fixture
def settings(tmp_path) -> Settings:
    """테스트 설정 — 환경 변수/.env 무시, 외부 서비스 비활성."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET_KEY="test-secret-key",
        CLASSIFIER_PROVIDER="local",
        GEMINI_API_KEY="",
        HUGGINGFACE_API_KEY="",
        AXIOM_API_TOKEN="",
        AXIOM_DATASET="",
        LOCAL_UPLOADS_DIR=str(tmp_path / "uploads"),
        AWS_ACCESS_KEY_ID="",
        AWS_S3_BUCKET="",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """테이블이 생성된 테스트용 애플리케이션."""
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.http_client.aclose()
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def db(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with app.state.database.session() as session:
        yield session


@pytest_asyncio.fixture
async def client(app: FastAPI, db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def reporter(db: AsyncSession) -> User:
    """신고자 사용자를 생성합니다."""
    user = User(
        id="reporter-1",
        username="reporter",
        password_hash=hash_password("reporter123!"),
        email="reporter@test.com",
        first_name="철수",
        last_name="김",
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


def make_token(user_id: str, settings: Settings) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": user_id}, settings)


@pytest.fixture
def reporter_token(reporter: User, settings: Settings) -> str:
    return make_token(reporter.id, settings)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def make_report(
    reporter_id: str,
    created_at: datetime,
    updated_at: datetime | None = None,
    **fields,
) -> ErrorReport:
    """타임스탬프를 직접 지정한 오류 신고 ORM 객체 (Report with explicit timestamps)."""
    values = {
        "title": "승차권 발매기 오류",
        "content": "1번 플랫폼 승차권 발매기가 작동하지 않습니다.",
        "system": "역무지원",
        "priority": "보통",
        "status": "접수됨",
        **fields,
    }
    return ErrorReport(
        reporter_id=reporter_id,
        created_at=created_at,
        updated_at=updated_at or created_at,
        **values,
    )
