"""업로드 파일 서빙 라우터 (로컬 저장 모드).

Serves locally stored attachments under /uploads/<key>.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.api.deps import get_storage_service
from app.services.storage_service import StorageService

router: APIRouter = APIRouter()


@router.get("/uploads/{file_path:path}")
async def get_upload(
    file_path: str,
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> FileResponse:
    """로컬 첨부파일 다운로드. 없거나 업로드 폴더 밖의 경로는 404."""
    return FileResponse(storage.resolve_local(file_path))
