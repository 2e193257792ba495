"""사용자 서비스 — 사용자 조회 및 upsert 비즈니스 로직.

User Service — Lookup and insert-or-update of user records.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import UserRepository, user_repository

logger = logging.getLogger(__name__)


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user lookup and upsert. Users are never deleted in
    normal operation.
    """

    def __init__(self, users: UserRepository = user_repository) -> None:
        self.users = users

    async def get_user(self, db: AsyncSession, user_id: str) -> User | None:
        return await self.users.get_by_id(db, user_id)

    async def get_user_by_username(self, db: AsyncSession, username: str) -> User | None:
        return await self.users.get_by_username(db, username)

    async def upsert_user(self, db: AsyncSession, user_data: dict[str, Any]) -> User:
        """id 기준 insert-or-update.

        Insert the user if the id is unseen, otherwise overwrite the
        supplied mutable fields and refresh updated_at.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_data: 사용자 필드 (User fields; id is the conflict key)

        Returns:
            User: 저장된 사용자 (Resulting persisted user)
        """
        user = await self.users.upsert(db, user_data)
        logger.info("user upserted id=%s", user.id)
        return user
