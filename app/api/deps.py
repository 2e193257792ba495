"""FastAPI 의존성 주입 모듈 — 인증 및 서비스 객체 주입.

FastAPI dependency injection module — Authentication and service lookup.
Service objects are built once in create_app() and stored on app.state;
these dependencies hand them to route handlers.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 (HTTPBearer extracts the token)
    3. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies JWT and returns payload)
    4. 페이로드의 "sub" 필드로 DB에서 사용자를 조회
       (User is fetched from DB using payload "sub" field)
    5. 어느 단계든 실패하면 401 (Any failure answers 401, never 404/400)
"""

from typing import Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.classification.service import ClassificationService
from app.config import Settings
from app.database import get_db
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.error_report_service import ErrorReportService
from app.services.stats_service import StatsService
from app.services.storage_service import StorageService
from app.services.user_service import UserService
from app.utils.exceptions import UnauthorizedError
from app.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 헤더가 없어도 403 대신 직접 401을 반환하기 위해 auto_error 비활성
# (Missing header is reported as 401 by get_current_user)
security: HTTPBearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_error_report_service(request: Request) -> ErrorReportService:
    return request.app.state.error_report_service


def get_stats_service(request: Request) -> StatsService:
    return request.app.state.stats_service


def get_classification_service(request: Request) -> ClassificationService:
    return request.app.state.classification_service


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage_service


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode JWT from the Authorization header and return the authenticated user.

    Raises:
        UnauthorizedError: 토큰 없음, 유효하지 않음, 만료, 사용자 없음
                           (Missing, invalid or expired token, or unknown user)
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")

    try:
        payload: dict = decode_token(credentials.credentials, settings)
    except jwt.InvalidTokenError:
        # ExpiredSignatureError는 InvalidTokenError의 하위 클래스
        raise UnauthorizedError("Invalid or expired token")

    # 토큰 타입 검증 — Reject tokens that are not access tokens
    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise UnauthorizedError("Invalid token")

    user: User | None = await users.get_user(db, user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    return user
