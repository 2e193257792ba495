"""Alembic 마이그레이션 환경 — 비동기 엔진으로 실행.

Alembic environment running migrations through the async engine built
from app settings (DATABASE_URL).
"""

import asyncio

from alembic import context
from sqlalchemy.engine import Connection

from app.config import settings
from app.database import Base, Database
import app.models  # noqa: F401 — 메타데이터 등록 (Registers every model)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    database = Database(settings)
    async with database.engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await database.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
