"""대시보드 통계 라우터.

Dashboard statistics router — status summary, weekly trend, and
per-category counts. Recomputed on every request.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_stats_service
from app.database import get_db
from app.models.user import User
from app.schemas.stats import CategoryStatsEntry, ErrorStatsResponse, WeeklyStatsEntry
from app.services.stats_service import StatsService

router: APIRouter = APIRouter()


@router.get("/summary", response_model=ErrorStatsResponse)
async def get_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    stats_service: Annotated[StatsService, Depends(get_stats_service)],
) -> ErrorStatsResponse:
    """상태별 건수 (접수됨/처리중/완료/보류)."""
    return await stats_service.get_error_stats(db)


@router.get("/weekly", response_model=list[WeeklyStatsEntry])
async def get_weekly(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    stats_service: Annotated[StatsService, Depends(get_stats_service)],
) -> list[WeeklyStatsEntry]:
    """최근 7주 주간 접수/해결 건수 (오래된 주부터)."""
    return await stats_service.get_weekly_stats(db)


@router.get("/categories", response_model=list[CategoryStatsEntry])
async def get_categories(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    stats_service: Annotated[StatsService, Depends(get_stats_service)],
) -> list[CategoryStatsEntry]:
    return await stats_service.get_category_stats(db)
