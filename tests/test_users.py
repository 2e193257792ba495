"""사용자 서비스 테스트 — 조회 및 upsert.

User service tests — lookup and insert-or-update keyed by id.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.services.user_service import UserService


class TestUpsertUser:
    """사용자 upsert 테스트."""

    async def test_insert_new_user(self, db: AsyncSession):
        user = await UserService().upsert_user(db, {"id": "u-1", "email": "a@test.com", "first_name": "민수"})
        assert user.id == "u-1"
        assert user.email == "a@test.com"
        assert user.created_at is not None
        assert user.updated_at is not None

    async def test_generates_id_when_absent(self, db: AsyncSession):
        user = await UserService().upsert_user(db, {"email": "b@test.com"})
        assert user.id
        assert await UserService().get_user(db, user.id) is not None

    async def test_update_existing_user(self, db: AsyncSession):
        """같은 id로 upsert하면 전달된 필드만 갱신하고 created_at은 유지."""
        service = UserService()
        first = await service.upsert_user(db, {"id": "u-2", "email": "c@test.com", "first_name": "수진"})
        created_at = first.created_at
        updated_at = first.updated_at

        second = await service.upsert_user(db, {"id": "u-2", "first_name": "준호"})
        assert second.id == "u-2"
        assert second.first_name == "준호"
        assert second.email == "c@test.com"
        assert second.created_at == created_at
        assert second.updated_at >= updated_at


class TestGetUser:
    """사용자 조회 테스트."""

    async def test_get_missing_user(self, db: AsyncSession):
        assert await UserService().get_user(db, "missing") is None

    async def test_get_by_username(self, db: AsyncSession, reporter):
        user = await UserService().get_user_by_username(db, "reporter")
        assert user is not None
        assert user.id == reporter.id
