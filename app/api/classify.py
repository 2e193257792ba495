"""AI 분류 보조 라우터.

Classification assist router. Suggestions are best-effort: provider
failures are answered from the local keyword rules, so these endpoints
only fail on too-short content or a missing image.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from app.api.deps import get_classification_service, get_current_user, get_storage_service
from app.classification.service import ClassificationService
from app.models.user import User
from app.schemas.classification import (
    CategorySuggestion,
    ContentRequest,
    ImageAnalysis,
    ImagePathRequest,
    TitleSuggestion,
)
from app.services.storage_service import StorageService
from app.utils.exceptions import ValidationError

router: APIRouter = APIRouter()


@router.post("/title", response_model=TitleSuggestion)
async def suggest_title(
    data: ContentRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    classifier: Annotated[ClassificationService, Depends(get_classification_service)],
) -> TitleSuggestion:
    """내용 기반 제목 제안 (10자 이상, 결과 50자 이하)."""
    return TitleSuggestion(title=await classifier.suggest_title(data.content))


@router.post("/category", response_model=CategorySuggestion)
async def suggest_category(
    data: ContentRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    classifier: Annotated[ClassificationService, Depends(get_classification_service)],
) -> CategorySuggestion:
    """내용 기반 시스템 분류 제안 (역무지원 | 안전관리 | 시설물관리)."""
    return CategorySuggestion(system=await classifier.suggest_category(data.content))


@router.post("/image", response_model=ImageAnalysis)
async def analyze_image(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    classifier: Annotated[ClassificationService, Depends(get_classification_service)],
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> ImageAnalysis:
    """이미지 분석 — multipart `image` 파일 또는 JSON `{imagePath}` (저장된 첨부파일).

    Analyze an uploaded image, or a previously stored attachment by path.
    """
    if request.headers.get("content-type", "").startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("image")
        if not isinstance(upload, UploadFile):
            raise ValidationError(["image"], "image file is required")
        image_bytes = await upload.read()
        content_type = upload.content_type or "image/jpeg"
    else:
        try:
            body = ImagePathRequest.model_validate(await request.json())
        except (ValueError, PydanticValidationError):
            raise ValidationError(["imagePath"], "image file or imagePath is required")
        image_bytes, content_type = await run_in_threadpool(storage.read, body.image_path)

    return ImageAnalysis(analysis=await classifier.analyze_image(image_bytes, content_type))
