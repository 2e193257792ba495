"""FastAPI 애플리케이션 엔트리포인트 — 서비스 구성, 미들웨어 및 라우터 등록.

FastAPI application entry point.
create_app() builds every service object once (database, storage,
classification assist, domain services), attaches them to app.state,
and registers middleware, exception handlers and routers.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api import api_router
from app.api.uploads import router as uploads_router
from app.classification.service import build_classifier
from app.config import Settings, settings
from app.database import Database
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.services.auth_service import AuthService
from app.services.error_report_service import ErrorReportService
from app.services.stats_service import StatsService
from app.services.storage_service import StorageService
from app.services.user_service import UserService
from app.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

# 요청 위치 접두어 — Location prefixes stripped from validation error field names
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)  # 외부 API 요청 로그 숨김


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 형식 오류 → 400 + 위반 필드 목록 (Malformed request → 400 with field list)."""
    fields: list[str] = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        name = loc[1] if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES else (loc[0] if loc else "body")
        if name not in fields:
            fields.append(name)
    return JSONResponse(
        status_code=400,
        content={"detail": {"message": "Invalid input", "fields": fields}},
    )


async def storage_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """DB 장애/타임아웃 → 503 (내부 정보는 로그에만 기록).

    Database failures are logged with traceback and answered generically.
    """
    logger.error("storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    error = StorageError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


def create_app(app_settings: Settings = settings) -> FastAPI:
    """애플리케이션을 생성합니다.

    Build the FastAPI application and its service objects.

    Args:
        app_settings: 애플리케이션 설정 (Settings; tests pass their own)

    Returns:
        FastAPI: 구성된 애플리케이션 (Configured application)
    """
    configure_logging(app_settings.LOG_LEVEL)

    database = Database(app_settings)
    http_client = httpx.AsyncClient(timeout=app_settings.CLASSIFIER_TIMEOUT_SECONDS)
    user_service = UserService()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            if app_settings.DATABASE_URL.startswith("sqlite"):
                # SQLite 개발 DB는 마이그레이션 없이 테이블 생성 (PostgreSQL uses alembic)
                await database.create_all()
            async with database.session() as db:
                await app.state.auth_service.ensure_default_admin(db)
                await db.commit()
        except (SQLAlchemyError, OSError):
            logger.exception("default admin bootstrap failed; continuing without it")
        yield
        await http_client.aclose()
        await database.dispose()

    app: FastAPI = FastAPI(
        title=app_settings.APP_NAME,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # 서비스 객체 — Service objects shared by every request
    app.state.settings = app_settings
    app.state.database = database
    app.state.http_client = http_client
    app.state.user_service = user_service
    app.state.auth_service = AuthService(app_settings, user_service)
    app.state.error_report_service = ErrorReportService()
    app.state.stats_service = StatsService(app_settings.TIMEZONE)
    app.state.storage_service = StorageService(app_settings)
    app.state.classification_service = build_classifier(app_settings, http_client)

    # Axiom API 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
    app.add_middleware(
        AxiomLoggingMiddleware,
        token=app_settings.AXIOM_API_TOKEN,
        dataset=app_settings.AXIOM_DATASET,
    )

    # CORS 미들웨어 — Cross-Origin Resource Sharing middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
    app.add_exception_handler(TimeoutError, storage_exception_handler)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """서버 상태 확인 엔드포인트.

        Health check endpoint for load balancers and monitoring.
        """
        return {"status": "ok"}

    app.include_router(api_router, prefix="/api/v1")
    app.include_router(uploads_router, tags=["Uploads"])
    return app


app: FastAPI = create_app(settings)
