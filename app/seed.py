"""초기 데이터 시드 스크립트 — 관리자 계정 및 샘플 오류 신고 생성.

Seed script — Creates the default admin user and sample railway error reports.
Run this script once to bootstrap a development database.

Usage:
    python -m app.seed

Creates:
    - 1개 관리자 계정: DEFAULT_ADMIN_USERNAME / DEFAULT_ADMIN_PASSWORD (1 admin user)
    - 6개 샘플 오류 신고 — 최근 2주 내 날짜 (6 sample reports dated within the last 14 days)
"""

import asyncio
import logging
from datetime import timedelta

from sqlalchemy import select

from app.config import Settings, settings
from app.database import Database
from app.models.error_report import (
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    PRIORITY_URGENT,
    STATUS_DONE,
    STATUS_IN_PROGRESS,
    STATUS_ON_HOLD,
    STATUS_RECEIVED,
    SYSTEM_FACILITY,
    SYSTEM_SAFETY,
    SYSTEM_TICKETING,
    ErrorReport,
)
from app.services.auth_service import AuthService
from app.services.user_service import UserService
from app.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

# (제목, 내용, 분류, 우선순위, 상태, 며칠 전)
SAMPLE_REPORTS: list[tuple[str, str, str, str, str, int]] = [
    (
        "승차권 발매기 오류",
        "1번 플랫폼 승차권 발매기가 작동하지 않습니다. 화면이 검은색으로 나오고 터치가 되지 않습니다.",
        SYSTEM_TICKETING, PRIORITY_NORMAL, STATUS_RECEIVED, 0,
    ),
    (
        "화장실 조명 고장",
        "2층 남자화장실 조명이 깜빡거리고 있습니다. 안전상 문제가 있을 수 있습니다.",
        SYSTEM_FACILITY, PRIORITY_HIGH, STATUS_IN_PROGRESS, 2,
    ),
    (
        "비상벨 작동 불량",
        "3번 승강장 비상벨을 눌러도 신호가 가지 않습니다. 안전 문제로 즉시 수리가 필요합니다.",
        SYSTEM_SAFETY, PRIORITY_URGENT, STATUS_DONE, 4,
    ),
    (
        "에스컬레이터 소음",
        "상행 에스컬레이터에서 이상한 소음이 발생합니다. 기계적 문제가 있는 것 같습니다.",
        SYSTEM_FACILITY, PRIORITY_NORMAL, STATUS_ON_HOLD, 6,
    ),
    (
        "예약 시스템 오류",
        "온라인 예약 시스템에서 결제 완료 후 예약 확인이 되지 않는 문제가 발생했습니다.",
        SYSTEM_TICKETING, PRIORITY_HIGH, STATUS_IN_PROGRESS, 9,
    ),
    (
        "CCTV 화질 불량",
        "지하 2층 CCTV 카메라의 화질이 흐릿하여 모니터링에 어려움이 있습니다.",
        SYSTEM_SAFETY, PRIORITY_NORMAL, STATUS_RECEIVED, 13,
    ),
]


async def seed(app_settings: Settings = settings) -> int:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data.
    Creates tables if they don't exist, ensures the default admin, then
    inserts the sample reports filed by that admin.

    Idempotent: 오류 신고가 이미 있으면 건너뜁니다 (Skips when any report exists).

    Returns:
        int: 생성된 오류 신고 수 (Number of reports inserted)
    """
    database = Database(app_settings)
    try:
        await database.create_all()

        async with database.session() as db:
            auth_service = AuthService(app_settings, UserService())
            await auth_service.ensure_default_admin(db)
            admin = await auth_service.users.get_user_by_username(db, app_settings.DEFAULT_ADMIN_USERNAME)

            result = await db.execute(select(ErrorReport.id).limit(1))
            if result.scalar_one_or_none() is not None:
                await db.commit()
                logger.info("error reports already present, skipping sample data")
                return 0

            now = utcnow()
            for title, content, system, priority, status, days_ago in SAMPLE_REPORTS:
                created_at = now - timedelta(days=days_ago)
                db.add(
                    ErrorReport(
                        title=title,
                        content=content,
                        system=system,
                        priority=priority,
                        status=status,
                        reporter_id=admin.id,
                        created_at=created_at,
                        updated_at=created_at,
                    )
                )
            await db.commit()
            logger.info("seeded %d sample error reports", len(SAMPLE_REPORTS))
            return len(SAMPLE_REPORTS)
    finally:
        await database.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(name)s | %(levelname)s | %(message)s")
    asyncio.run(seed())
