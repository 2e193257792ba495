"""사용자 레포지토리 — 사용자 조회 및 upsert 쿼리.

User Repository — Lookup and upsert queries for users.
Extends BaseRepository with username lookup and an INSERT ... ON CONFLICT
upsert keyed on the user id (PostgreSQL and SQLite dialects).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, _new_user_id
from app.repositories.base import BaseRepository
from app.utils.datetime_utils import utcnow

# upsert 시 갱신하지 않는 컬럼 — Columns never overwritten by an upsert
_IMMUTABLE_COLUMNS: frozenset[str] = frozenset({"id", "created_at"})


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        """UserRepository를 초기화합니다.

        Initialize the UserRepository with the User model.
        """
        super().__init__(User)

    async def get_by_username(
        self,
        db: AsyncSession,
        username: str,
    ) -> User | None:
        """로그인 아이디로 사용자를 조회합니다.

        Retrieve a user by login username (local-credential mode).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            username: 로그인 아이디 (Login username)

        Returns:
            User | None: 사용자 또는 None (User or None)
        """
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def upsert(
        self,
        db: AsyncSession,
        user_data: dict[str, Any],
    ) -> User:
        """사용자를 삽입하거나, 같은 id가 있으면 갱신합니다.

        Insert the user, or update every supplied mutable field of the
        existing row with the same id and refresh updated_at.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_data: 사용자 데이터 (User fields; id generated when absent)

        Returns:
            User: 저장 결과 레코드 (The resulting persisted row)
        """
        now: datetime = utcnow()
        values: dict[str, Any] = {"id": _new_user_id(), "created_at": now, **user_data, "updated_at": now}

        dialect: str = db.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = insert(User).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[User.id],
            set_={
                key: stmt.excluded[key]
                for key in values
                if key not in _IMMUTABLE_COLUMNS
            },
        )
        result = await db.scalars(
            stmt.returning(User),
            execution_options={"populate_existing": True},
        )
        return result.one()


user_repository: UserRepository = UserRepository()
