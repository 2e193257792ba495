"""create_users_and_error_reports

Revision ID: a0b1c2d3e4f5
Revises:
Create Date: 2026-10-18 09:00:00.000000

사용자(users) 및 오류 신고(error_reports) 테이블 생성.
reporter_id는 FK 없이 인덱스만 생성 (existence is checked by the service).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "a0b1c2d3e4f5"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("profile_image_url", sa.String(1024), nullable=True),
        sa.Column("username", sa.String(100), nullable=True, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "error_reports",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(50), server_default="보통", nullable=False),
        sa.Column("system", sa.String(100), nullable=False),
        sa.Column("status", sa.String(50), server_default="접수됨", nullable=False),
        sa.Column("browser", sa.String(255), nullable=True),
        sa.Column("os", sa.String(255), nullable=True),
        sa.Column("attachments", JSONB(), nullable=True),
        sa.Column("processing_note", sa.Text(), nullable=True),
        sa.Column("reporter_id", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_error_reports_status", "error_reports", ["status"])
    op.create_index("ix_error_reports_reporter_id", "error_reports", ["reporter_id"])
    op.create_index("ix_error_reports_created_at", "error_reports", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_error_reports_created_at")
    op.drop_index("ix_error_reports_reporter_id")
    op.drop_index("ix_error_reports_status")
    op.drop_table("error_reports")
    op.drop_table("users")
