"""대시보드 통계 서비스 — 상태별/주간/분류별 집계.

Dashboard statistics service. Statistics are recomputed on every read;
they are a point-in-time snapshot and are not isolated from concurrent writes.
"""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.error_report import STATUS_DONE, STATUS_IN_PROGRESS, STATUS_ON_HOLD, STATUS_RECEIVED
from app.repositories.error_report_repository import ErrorReportRepository, error_report_repository
from app.schemas.stats import CategoryStatsEntry, ErrorStatsResponse, WeeklyStatsEntry
from app.utils.datetime_utils import utcnow, week_start

WEEKS = 7

# 상태 → 응답 필드 매핑 (알 수 없는 상태는 무시) — Unknown statuses are ignored
_STATUS_BUCKETS: dict[str, str] = {
    STATUS_RECEIVED: "new_errors",
    STATUS_IN_PROGRESS: "in_progress",
    STATUS_DONE: "completed",
    STATUS_ON_HOLD: "on_hold",
}


class StatsService:
    """대시보드 통계 서비스.

    Dashboard aggregation service. Week buckets are Monday-aligned in the
    configured timezone.
    """

    def __init__(
        self,
        timezone_name: str = "Asia/Seoul",
        reports: ErrorReportRepository = error_report_repository,
    ) -> None:
        self.tz: ZoneInfo = ZoneInfo(timezone_name)
        self.reports = reports

    async def get_error_stats(self, db: AsyncSession) -> ErrorStatsResponse:
        """상태별 건수 — 빈 버킷도 0으로 채움."""
        counts = await self.reports.count_by_status(db)
        buckets: dict[str, int] = {field: 0 for field in _STATUS_BUCKETS.values()}
        for status, count in counts.items():
            field = _STATUS_BUCKETS.get(status)
            if field is not None:
                buckets[field] = count
        return ErrorStatsResponse(**buckets)

    async def get_weekly_stats(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> list[WeeklyStatsEntry]:
        """최근 7주 주간 통계 (오래된 주 → 최신 주).

        Exactly seven consecutive Monday-aligned weeks ending with the
        current one, in chronological order, zero-filled. `errors` counts
        reports created in the week; `resolved` counts reports currently
        completed whose updated_at falls in the week.
        """
        current: date = week_start(now or utcnow(), self.tz)
        mondays: list[date] = [current - timedelta(weeks=i) for i in range(WEEKS - 1, -1, -1)]
        since: datetime = datetime.combine(mondays[0], time.min, tzinfo=self.tz)

        created: dict[date, int] = {monday: 0 for monday in mondays}
        for created_at in await self.reports.created_since(db, since):
            bucket = week_start(created_at, self.tz)
            if bucket in created:
                created[bucket] += 1

        resolved: dict[date, int] = {monday: 0 for monday in mondays}
        for updated_at in await self.reports.completed_since(db, since):
            bucket = week_start(updated_at, self.tz)
            if bucket in resolved:
                resolved[bucket] += 1

        return [
            WeeklyStatsEntry(week=monday.strftime("%m/%d"), errors=created[monday], resolved=resolved[monday])
            for monday in mondays
        ]

    async def get_category_stats(self, db: AsyncSession) -> list[CategoryStatsEntry]:
        rows = await self.reports.count_by_system(db)
        return [CategoryStatsEntry(category=system, count=count) for system, count in rows]
