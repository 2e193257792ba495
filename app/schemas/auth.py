"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers local-credential login, registration, token issuance, and current user info.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Login request schema for the local-credential auth mode.

    Attributes:
        username: 사용자 로그인 아이디 (User login identifier)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    username: str  # 사용자 로그인 아이디 (User login identifier)
    password: str  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class RegisterRequest(BaseModel):
    """회원가입 요청 스키마.

    Self-registration request schema. Creates a local-credential user.

    Attributes:
        username: 사용자 아이디 (Desired login username, globally unique)
        password: 비밀번호 (Plain text, will be bcrypt-hashed on server)
        email: 이메일 (Email address, optional, globally unique)
        first_name: 이름 (First name, optional)
        last_name: 성 (Last name, optional)
    """

    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=8)
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema, returned after successful login.

    Attributes:
        access_token: JWT 액세스 토큰 (Access token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str  # JWT 액세스 토큰 (Access token)
    token_type: str = "bearer"  # 토큰 유형 — 항상 "bearer" (Token type for Authorization header)


class UserMeResponse(BaseModel):
    """현재 사용자 정보 응답 스키마 (GET /me).

    Current user info response schema for the /me endpoint.
    The password hash is never exposed.
    """

    id: str
    username: str | None
    email: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None
    display_name: str
    created_at: datetime
    updated_at: datetime
