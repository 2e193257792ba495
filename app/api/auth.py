"""인증 라우터 — 로그인, 회원가입, 프로필 조회.

Auth Router — Login, registration, and current-user endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_auth_service, get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserMeResponse
from app.services.auth_service import AuthService

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """아이디/비밀번호 로그인 — 액세스 토큰 발급.

    Username/password login. Returns a bearer access token.
    """
    return await auth_service.login(db, data)


@router.post("/register", response_model=UserMeResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserMeResponse:
    """로컬 계정 회원가입. 아이디/이메일 중복 시 409."""
    user: User = await auth_service.register(db, data)
    await db.commit()
    return auth_service.build_me(user)


@router.get("/me", response_model=UserMeResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserMeResponse:
    """현재 사용자 프로필 조회.

    Get the profile of the currently authenticated user.
    """
    return auth_service.build_me(current_user)
