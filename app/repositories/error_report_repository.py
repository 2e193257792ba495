"""오류 신고 레포지토리.

Error report repository — Handles error_reports DB queries, including the
filtered listing and the raw aggregates behind the dashboard statistics.
"""

from datetime import datetime, timedelta
from typing import Any, Sequence

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.error_report import ALL_STATUSES, STATUS_DONE, ErrorReport
from app.repositories.base import BaseRepository
from app.utils.datetime_utils import as_utc, utcnow


def _like_pattern(term: str) -> str:
    """LIKE 와일드카드를 이스케이프한 부분 일치 패턴 (Substring pattern with wildcards escaped)."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ErrorReportRepository(BaseRepository[ErrorReport]):

    def __init__(self) -> None:
        super().__init__(ErrorReport)

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ErrorReport:
        # created_at == updated_at at insert time
        now: datetime = utcnow()
        return await super().create(db, {**obj_data, "created_at": now, "updated_at": now})

    async def get_filtered(
        self,
        db: AsyncSession,
        search: str | None = None,
        status: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[ErrorReport], int]:
        """검색/상태 필터 + 최신순 정렬 목록.

        List reports newest first. `search` matches title OR content
        case-insensitively; `status` is an exact match unless it is empty or
        the "모든 상태" sentinel. The returned total ignores limit/offset.
        """
        query: Select = select(ErrorReport).order_by(
            ErrorReport.created_at.desc(), ErrorReport.id.desc()
        )
        if search:
            pattern = _like_pattern(search)
            query = query.where(
                or_(
                    ErrorReport.title.ilike(pattern, escape="\\"),
                    ErrorReport.content.ilike(pattern, escape="\\"),
                )
            )
        if status and status != ALL_STATUSES:
            query = query.where(ErrorReport.status == status)
        return await self.get_page(db, query, limit, offset)

    async def update(
        self,
        db: AsyncSession,
        record_id: Any,
        update_data: dict[str, Any],
    ) -> ErrorReport | None:
        report: ErrorReport | None = await self.get_by_id(db, record_id)
        if report is None:
            return None

        for field, value in update_data.items():
            if hasattr(report, field):
                setattr(report, field, value)

        # updated_at은 항상 이전 값보다 커야 함 — updated_at strictly increases
        now: datetime = utcnow()
        previous: datetime = as_utc(report.updated_at)
        report.updated_at = now if now > previous else previous + timedelta(microseconds=1)

        await db.flush()
        await db.refresh(report)
        return report

    # --- 통계용 집계 (Aggregates for statistics) ---

    async def count_by_status(self, db: AsyncSession) -> dict[str, int]:
        result = await db.execute(
            select(ErrorReport.status, func.count(ErrorReport.id)).group_by(ErrorReport.status)
        )
        return {status: count for status, count in result.all()}

    async def count_by_system(self, db: AsyncSession) -> list[tuple[str, int]]:
        result = await db.execute(
            select(ErrorReport.system, func.count(ErrorReport.id).label("count"))
            .group_by(ErrorReport.system)
            .order_by(func.count(ErrorReport.id).desc(), ErrorReport.system)
        )
        return [(system, count) for system, count in result.all()]

    async def created_since(self, db: AsyncSession, since: datetime) -> list[datetime]:
        result = await db.execute(
            select(ErrorReport.created_at).where(ErrorReport.created_at >= as_utc(since))
        )
        return [as_utc(value) for value in result.scalars().all()]

    async def completed_since(self, db: AsyncSession, since: datetime) -> list[datetime]:
        """완료 상태이며 updated_at이 since 이후인 신고들의 updated_at."""
        result = await db.execute(
            select(ErrorReport.updated_at).where(
                ErrorReport.status == STATUS_DONE,
                ErrorReport.updated_at >= as_utc(since),
            )
        )
        return [as_utc(value) for value in result.scalars().all()]


error_report_repository: ErrorReportRepository = ErrorReportRepository()
