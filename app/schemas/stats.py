"""대시보드 통계 응답 스키마.

Dashboard statistics response schemas (camelCase on the wire).
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ErrorStatsResponse(BaseModel):
    """상태별 건수 — 모든 버킷은 0으로 기본 설정됩니다.

    Count-by-status buckets; every bucket defaults to zero.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    new_errors: int = 0  # 접수됨
    in_progress: int = 0  # 처리중
    completed: int = 0  # 완료
    on_hold: int = 0  # 보류


class WeeklyStatsEntry(BaseModel):
    """주간 버킷 — 월요일 기준 (Monday-aligned week bucket)."""

    week: str  # 주 시작일 라벨 MM/DD (Week label, Monday date)
    errors: int  # 해당 주에 접수된 건수 (Reports created that week)
    resolved: int  # 해당 주에 완료 처리된 건수 (Reports completed that week)


class CategoryStatsEntry(BaseModel):
    category: str
    count: int
