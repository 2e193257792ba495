"""오류 신고 라우터 — 오류 신고 CRUD API.

Error Report Router — CRUD endpoints for railway error reports.
Every endpoint requires an authenticated user. Submissions accept either
a JSON body or multipart form fields with up to five image attachments.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from app.api.deps import get_current_user, get_error_report_service, get_settings, get_storage_service
from app.config import Settings
from app.database import get_db
from app.models.error_report import ErrorReport
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.error_report import (
    ErrorReportListResponse,
    ErrorReportResponse,
    validate_create,
    validate_update,
)
from app.services.error_report_service import NOT_FOUND_MESSAGE, ErrorReportService
from app.services.storage_service import StorageService
from app.utils.exceptions import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter()

ATTACHMENTS_FIELD = "attachments"


async def _read_json_object(request: Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError(["body"], "request body must be a JSON object")
    if not isinstance(data, dict):
        raise ValidationError(["body"], "request body must be a JSON object")
    return data


async def _store_attachments(
    files: list[UploadFile],
    storage: StorageService,
    settings: Settings,
) -> list[str]:
    """이미지 첨부파일을 저장하고 경로 목록을 반환합니다.

    Non-image parts are ignored. More than MAX_ATTACHMENTS images, or an
    image over MAX_ATTACHMENT_BYTES, is rejected before anything is stored.
    """
    images = [f for f in files if (f.content_type or "").startswith("image/")]
    if len(images) > settings.MAX_ATTACHMENTS:
        raise ValidationError([ATTACHMENTS_FIELD], f"at most {settings.MAX_ATTACHMENTS} attachments are allowed")

    contents: list[tuple[UploadFile, bytes]] = []
    for upload in images:
        # 제한 + 1 바이트까지만 읽어 초과 여부 판단
        data = await upload.read(settings.MAX_ATTACHMENT_BYTES + 1)
        if len(data) > settings.MAX_ATTACHMENT_BYTES:
            raise ValidationError([ATTACHMENTS_FIELD], f"{upload.filename} exceeds the attachment size limit")
        contents.append((upload, data))

    paths: list[str] = []
    try:
        for upload, data in contents:
            paths.append(
                await run_in_threadpool(
                    storage.save,
                    data,
                    upload.filename or "image",
                    upload.content_type or "application/octet-stream",
                )
            )
    except Exception:
        await _discard_attachments(paths, storage)
        raise
    return paths


async def _discard_attachments(paths: list[str], storage: StorageService) -> None:
    """저장되지 않은 신고의 첨부파일을 정리합니다 (Remove files of a report that was never stored)."""
    for path in paths:
        try:
            await run_in_threadpool(storage.delete, path)
        except StorageError:
            logger.warning("orphan attachment left behind path=%s", path)


@router.post("", response_model=ErrorReportResponse, status_code=201)
async def create_error(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ErrorReportService, Depends(get_error_report_service)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ErrorReport:
    """오류 신고 접수. JSON 또는 multipart(첨부 이미지 최대 5개) 입력.

    Submit a report. The reporter is always the authenticated user;
    status defaults to 접수됨.
    """
    if request.headers.get("content-type", "").startswith("multipart/form-data"):
        form = await request.form()
        fields = {key: value for key, value in form.multi_items() if isinstance(value, str) and key != ATTACHMENTS_FIELD}
        files = [value for value in form.getlist(ATTACHMENTS_FIELD) if isinstance(value, UploadFile)]
        # 필드 검증을 먼저 수행하여 잘못된 요청의 파일이 저장되지 않게 함
        data = validate_create(fields, current_user.id)
        paths = await _store_attachments(files, storage, settings)
        if paths:
            data = data.model_copy(update={"attachments": paths})
    else:
        data = validate_create(await _read_json_object(request), current_user.id)
        paths = []

    try:
        report = await service.create_error(db, data)
        await db.commit()
    except Exception:
        await _discard_attachments(paths, storage)
        raise
    return report


@router.get("", response_model=ErrorReportListResponse)
async def list_errors(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ErrorReportService, Depends(get_error_report_service)],
    search: str | None = Query(None),
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ErrorReportListResponse:
    """오류 신고 목록 조회 — 검색어(제목/내용), 상태 필터, 최신순.

    List reports newest first. `status=모든 상태` disables the status filter.
    """
    reports, total = await service.get_errors(db, search, status, limit, (page - 1) * limit)
    return ErrorReportListResponse(
        items=[ErrorReportResponse.model_validate(report) for report in reports],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/{report_id}", response_model=ErrorReportResponse)
async def get_error(
    report_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ErrorReportService, Depends(get_error_report_service)],
) -> ErrorReport:
    """오류 신고 상세 조회."""
    return await service.get_detail(db, report_id)


@router.patch("/{report_id}", response_model=ErrorReportResponse)
async def update_error(
    report_id: int,
    data: Annotated[dict[str, Any], Body()],
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ErrorReportService, Depends(get_error_report_service)],
) -> ErrorReport:
    """오류 신고 부분 수정 — 상태, 처리 메모 등 전달된 필드만 반영.

    Partial update; updatedAt always advances.
    """
    report = await service.update_error(db, report_id, validate_update(data))
    if report is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    await db.commit()
    return report


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_error(
    report_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ErrorReportService, Depends(get_error_report_service)],
) -> dict:
    """오류 신고 삭제."""
    if not await service.delete_error(db, report_id):
        raise NotFoundError(NOT_FOUND_MESSAGE)
    await db.commit()
    return {"message": "오류 신고가 삭제되었습니다 (Error report deleted)"}
