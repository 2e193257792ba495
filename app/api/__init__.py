"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every /api/v1 endpoint into a single
router for inclusion in the FastAPI application.

Included routers:
    - auth: 로그인/회원가입/내 정보 (Login, registration, current user)
    - errors: 오류 신고 CRUD (Error report CRUD)
    - stats: 대시보드 통계 (Dashboard statistics)
    - classify: AI 분류 보조 (Classification assist)
"""

from fastapi import APIRouter

from app.api.auth import router as auth_router
from app.api.classify import router as classify_router
from app.api.errors import router as errors_router
from app.api.stats import router as stats_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(errors_router, prefix="/errors", tags=["Errors"])
api_router.include_router(stats_router, prefix="/stats", tags=["Stats"])
api_router.include_router(classify_router, prefix="/classify", tags=["Classify"])
