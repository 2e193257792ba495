"""인증 서비스 — 로그인, 회원가입, 기본 관리자 생성 비즈니스 로직.

Auth Service — Business logic for local-credential login, registration,
and the default administrator account created on first startup.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserMeResponse
from app.services.user_service import UserService
from app.utils.exceptions import DuplicateError, UnauthorizedError
from app.utils.jwt import create_access_token
from app.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)

# 기본 관리자 고정 ID — Fixed id of the default administrator
DEFAULT_ADMIN_ID = "offline-admin"


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    def __init__(self, settings: Settings, users: UserService) -> None:
        self.settings = settings
        self.users = users

    def issue_token(self, user: User) -> TokenResponse:
        """사용자에 대한 액세스 토큰을 발급합니다 (Issue an access token for the user)."""
        token: str = create_access_token({"sub": user.id, "username": user.username}, self.settings)
        return TokenResponse(access_token=token)

    async def login(self, db: AsyncSession, data: LoginRequest) -> TokenResponse:
        """아이디/비밀번호 로그인.

        Verify username/password against the stored bcrypt hash.

        Raises:
            UnauthorizedError: 아이디 또는 비밀번호 불일치 (Bad credentials)
        """
        user: User | None = await self.users.get_user_by_username(db, data.username)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("잘못된 사용자명 또는 비밀번호입니다 (Invalid username or password)")
        return self.issue_token(user)

    async def register(self, db: AsyncSession, data: RegisterRequest) -> User:
        """로컬 계정 회원가입.

        Create a local-credential user.

        Raises:
            DuplicateError: 아이디 또는 이메일 중복 (Username or email already taken)
        """
        if await self.users.get_user_by_username(db, data.username) is not None:
            raise DuplicateError("이미 사용 중인 사용자명입니다 (Username already exists)")
        if data.email and await self.users.users.get_by_email(db, data.email) is not None:
            raise DuplicateError("이미 사용 중인 이메일입니다 (Email already exists)")

        return await self.users.upsert_user(
            db,
            {
                "username": data.username,
                "password_hash": hash_password(data.password),
                "email": data.email,
                "first_name": data.first_name,
                "last_name": data.last_name,
            },
        )

    async def ensure_default_admin(self, db: AsyncSession) -> User | None:
        """기본 관리자 계정이 없으면 생성합니다.

        Create the default administrator when no user holds the configured
        admin username. Returns the created user, or None when it already exists.
        """
        username: str = self.settings.DEFAULT_ADMIN_USERNAME
        if await self.users.get_user_by_username(db, username) is not None:
            return None

        user = await self.users.upsert_user(
            db,
            {
                "id": DEFAULT_ADMIN_ID,
                "username": username,
                "password_hash": hash_password(self.settings.DEFAULT_ADMIN_PASSWORD),
                "email": self.settings.DEFAULT_ADMIN_EMAIL,
                "first_name": "관리자",
                "last_name": "시스템",
                "profile_image_url": None,
            },
        )
        logger.info("default admin account created username=%s", username)
        return user

    @staticmethod
    def build_me(user: User) -> UserMeResponse:
        return UserMeResponse(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_image_url=user.profile_image_url,
            display_name=user.display_name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
