"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
`Database.create_all()`.

Modules:
    user: 사용자 (User accounts)
    error_report: 오류 신고 (Error reports)
"""

from app.models.user import User
from app.models.error_report import ErrorReport

__all__ = [
    "User",
    "ErrorReport",
]
