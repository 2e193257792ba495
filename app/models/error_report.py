"""오류 신고 SQLAlchemy ORM 모델 정의.

Error report SQLAlchemy ORM model definition.
An error report is a ticket filed against one of the railway information
subsystems. Its status field is the lifecycle field; any status may move
to any other.

Tables:
    - error_reports: 오류 신고 (Error reports with status lifecycle)
"""

from datetime import datetime
from sqlalchemy import JSON, String, DateTime, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 우선순위 — Priority enumeration (낮음=low, 보통=normal, 높음=high, 긴급=urgent)
PRIORITY_LOW = "낮음"
PRIORITY_NORMAL = "보통"
PRIORITY_HIGH = "높음"
PRIORITY_URGENT = "긴급"
PRIORITIES: tuple[str, ...] = (PRIORITY_LOW, PRIORITY_NORMAL, PRIORITY_HIGH, PRIORITY_URGENT)

# 처리 상태 — Status enumeration (접수됨=received, 처리중=in-progress, 완료=done, 보류=on-hold)
STATUS_RECEIVED = "접수됨"
STATUS_IN_PROGRESS = "처리중"
STATUS_DONE = "완료"
STATUS_ON_HOLD = "보류"
STATUSES: tuple[str, ...] = (STATUS_RECEIVED, STATUS_IN_PROGRESS, STATUS_DONE, STATUS_ON_HOLD)

# 목록 필터에서 상태 필터를 끄는 값 — Sentinel that disables the status filter
ALL_STATUSES = "모든 상태"

# 시스템 분류 — AI 분류 대상 카테고리 (system 컬럼 자체는 자유 문자열)
SYSTEM_TICKETING = "역무지원"
SYSTEM_SAFETY = "안전관리"
SYSTEM_FACILITY = "시설물관리"
SYSTEM_CATEGORIES: tuple[str, ...] = (SYSTEM_TICKETING, SYSTEM_SAFETY, SYSTEM_FACILITY)

# PostgreSQL에서는 JSONB, 그 외(SQLite)에서는 JSON — JSONB on PostgreSQL, JSON elsewhere
_JSONList = JSON().with_variant(JSONB(), "postgresql")


class ErrorReport(Base):
    """오류 신고 모델.

    Error report model — a single filed issue with a lifecycle status.
    created_at/updated_at are assigned by the repository so that both carry
    the same instant at insert time.

    Attributes:
        id: 자동 증가 정수 PK (Auto-increment integer primary key)
        title: 제목 (Short title, max 255 chars)
        content: 내용 (Free-text description)
        priority: 우선순위 (낮음 | 보통 | 높음 | 긴급)
        system: 시스템 분류 (Affected subsystem, free-form short string)
        status: 처리 상태 (접수됨 | 처리중 | 완료 | 보류)
        browser: 브라우저 (Reporter's browser, optional)
        os: 운영체제 (Reporter's OS, optional)
        attachments: 첨부파일 경로 목록 (Ordered list of stored file paths, nullable)
        processing_note: 처리 메모 (Administrator triage note, optional)
        reporter_id: 신고자 ID (users.id of the reporter, immutable)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last mutation timestamp)
    """

    __tablename__ = "error_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(50), nullable=False, default=PRIORITY_NORMAL)
    system: Mapped[str] = mapped_column(String(100), nullable=False)
    # 처리 상태 — 상태 간 전이는 제한 없음 (Unrestricted transitions)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=STATUS_RECEIVED, index=True)
    browser: Mapped[str | None] = mapped_column(String(255), nullable=True)
    os: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attachments: Mapped[list[str] | None] = mapped_column(_JSONList, nullable=True)
    processing_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 신고자 ID — FK 제약 없음, 서비스 계층에서 존재 확인 (No hard FK; checked by the service)
    reporter_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
