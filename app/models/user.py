"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
Users are identified by an opaque string id and are upserted on
registration/login; the optional username/password_hash pair backs the
local-credential login mode.

Tables:
    - users: 사용자 계정 (User accounts)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — System user account information.

    Attributes:
        id: 불투명 문자열 식별자 (Opaque string identifier)
        email: 이메일 (Email address, unique, optional)
        first_name: 이름 (First name, optional)
        last_name: 성 (Last name, optional)
        profile_image_url: 프로필 이미지 경로 (Profile image reference, optional)
        username: 로그인 아이디 (Login username, unique, local-credential mode only)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password, local-credential mode only)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — Opaque string identifier (uuid4 hex when not supplied)
    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=_new_user_id)
    # 이메일 — Email address (전역 고유, globally unique)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    # 로그인 아이디 — 로컬 인증 모드에서만 사용 (Local-credential mode only)
    username: Mapped[str | None] = mapped_column(String(100), unique=True, nullable=True)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.last_name, self.first_name) if p]
        return " ".join(parts) or self.username or self.email or self.id
