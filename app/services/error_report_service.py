"""오류 신고 서비스.

Error report service — Business logic for error report CRUD.
Validation happens before these calls (app.schemas.error_report); the
service only sees typed, validated payloads.
"""

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.error_report import ErrorReport
from app.repositories.error_report_repository import ErrorReportRepository, error_report_repository
from app.repositories.user_repository import UserRepository, user_repository
from app.schemas.error_report import ErrorReportInsert, ErrorReportUpdate
from app.utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "오류 신고를 찾을 수 없습니다 (Error report not found)"


class ErrorReportService:

    def __init__(
        self,
        reports: ErrorReportRepository = error_report_repository,
        users: UserRepository = user_repository,
    ) -> None:
        self.reports = reports
        self.users = users

    async def create_error(
        self,
        db: AsyncSession,
        data: ErrorReportInsert,
    ) -> ErrorReport:
        """오류 신고를 생성합니다.

        Insert a new report. The reporter must be an existing user; the
        persisted row (with server-assigned id and timestamps) is returned.

        Raises:
            ValidationError: 신고자가 존재하지 않을 때 (Unknown reporter id)
        """
        reporter = await self.users.get_by_id(db, data.reporter_id)
        if reporter is None:
            raise ValidationError(["reporterId"], "reporter does not exist")

        report = await self.reports.create(db, data.model_dump())
        logger.info("error report created id=%s reporter=%s system=%s", report.id, report.reporter_id, report.system)
        return report

    async def get_errors(
        self,
        db: AsyncSession,
        search: str | None = None,
        status: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[ErrorReport], int]:
        return await self.reports.get_filtered(db, search, status, limit, offset)

    async def get_error(self, db: AsyncSession, report_id: int) -> ErrorReport | None:
        return await self.reports.get_by_id(db, report_id)

    async def get_detail(self, db: AsyncSession, report_id: int) -> ErrorReport:
        report = await self.reports.get_by_id(db, report_id)
        if report is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return report

    async def update_error(
        self,
        db: AsyncSession,
        report_id: int,
        data: ErrorReportUpdate,
    ) -> ErrorReport | None:
        """전달된 필드만 반영하고 updated_at을 갱신합니다. 없으면 None.

        Apply only the supplied fields and refresh updated_at.
        Concurrent updates are last-writer-wins.
        """
        update_data = data.model_dump(exclude_unset=True)
        report = await self.reports.update(db, report_id, update_data)
        if report is not None:
            logger.info("error report updated id=%s fields=%s", report_id, sorted(update_data))
        return report

    async def delete_error(self, db: AsyncSession, report_id: int) -> bool:
        deleted = await self.reports.delete(db, report_id)
        if deleted:
            logger.info("error report deleted id=%s", report_id)
        return deleted
