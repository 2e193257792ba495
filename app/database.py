"""데이터베이스 엔진 및 세션 설정 모듈.

Database engine and session configuration module.
Wraps the async SQLAlchemy engine and session factory in a `Database`
service object that is constructed once per application and handed to
route handlers through FastAPI dependencies.
"""

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all ORM models.
    All models inherit from this class to register with the metadata.
    """

    pass


class Database:
    """비동기 엔진과 세션 팩토리를 소유하는 서비스 객체.

    Owns the async engine and session factory.
    PostgreSQL (asyncpg) is the production backend; SQLite (aiosqlite)
    is accepted for local development and tests.
    """

    def __init__(self, settings: Settings) -> None:
        url: str = settings.DATABASE_URL
        engine_kwargs: dict[str, Any] = {"echo": settings.DEBUG}

        if url.startswith("sqlite"):
            # SQLite — 로컬 개발/테스트용 (Local development and tests)
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            # pool_pre_ping=True: 커넥션 풀에서 꺼낸 연결의 유효성을 사전 확인 (Validates connections before use)
            engine_kwargs.update(
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                # prepared statement 비활성화 + 명령 타임아웃 (Disable statement cache, bound every command)
                connect_args={
                    "statement_cache_size": 0,
                    "command_timeout": settings.DB_COMMAND_TIMEOUT,
                },
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: 커밋 후에도 객체 속성 접근 가능 (Allows attribute access after commit without refresh)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        """새 세션을 생성합니다 (Create a new session)."""
        return self.session_factory()

    async def create_all(self) -> None:
        """ORM 메타데이터로 테이블을 생성합니다 (Create tables from ORM metadata)."""
        # 모든 모델을 메타데이터에 등록 — Register every model before DDL
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """비동기 데이터베이스 세션을 생성하고 요청 종료 시 닫습니다.

    FastAPI dependency that yields an async database session from the
    application's `Database`. The session is automatically closed after
    the request completes, ensuring no connection leaks.

    Yields:
        AsyncSession: SQLAlchemy 비동기 세션 인스턴스 (Async session instance)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
