"""AI 분류 보조 서비스.

Classification assist service — input checks, output normalisation and
provider selection. Suggestions are advisory: provider failures are
absorbed by the fallback chain, only too-short input is rejected.
"""

import logging
import re

import httpx

from app.classification.base import ClassificationProvider
from app.classification.fallback import FallbackProvider
from app.classification.gemini import GeminiProvider
from app.classification.huggingface import HuggingFaceProvider
from app.classification.keyword import (
    DEFAULT_CATEGORY,
    DEFAULT_TITLE,
    IMAGE_GUIDE_MESSAGE,
    KeywordProvider,
    truncate_title,
)
from app.config import Settings
from app.models.error_report import SYSTEM_CATEGORIES
from app.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

MIN_TITLE_CONTENT_LENGTH = 10
MIN_CATEGORY_CONTENT_LENGTH = 5

_TITLE_PREFIX = re.compile(r"^(제목|title)\s*:\s*", re.IGNORECASE)
_NUMBERING = re.compile(r"^\d+\.\s*")


def clean_title(raw: str) -> str:
    """모델 응답에서 제목만 추출 (Strip label prefixes, numbering, quotes and extra lines)."""
    lines = raw.strip().splitlines()
    title = lines[0] if lines else ""
    title = _TITLE_PREFIX.sub("", title.strip())
    title = _NUMBERING.sub("", title)
    return title.strip().strip("\"'").strip()


class ClassificationService:
    """제목/분류 제안 및 이미지 분석 서비스.

    Wraps a provider (usually a FallbackProvider chain) and guarantees
    non-empty, bounded answers.
    """

    def __init__(self, provider: ClassificationProvider) -> None:
        self.provider = provider

    async def suggest_title(self, content: str) -> str:
        """내용으로 제목을 제안합니다 (≤50자).

        Raises:
            ValidationError: 내용이 10자 미만일 때 (Content shorter than 10 characters)
        """
        content = (content or "").strip()
        if len(content) < MIN_TITLE_CONTENT_LENGTH:
            raise ValidationError(["content"], f"content must be at least {MIN_TITLE_CONTENT_LENGTH} characters")

        title = truncate_title(clean_title(await self.provider.suggest_title(content)))
        return title or DEFAULT_TITLE

    async def suggest_category(self, content: str) -> str:
        """내용으로 시스템 분류를 제안합니다.

        Raises:
            ValidationError: 내용이 5자 미만일 때 (Content shorter than 5 characters)
        """
        content = (content or "").strip()
        if len(content) < MIN_CATEGORY_CONTENT_LENGTH:
            raise ValidationError(
                ["content"], f"content must be at least {MIN_CATEGORY_CONTENT_LENGTH} characters"
            )

        category = await self.provider.suggest_category(content)
        if category not in SYSTEM_CATEGORIES:
            logger.warning("provider %s answered unknown category %r", self.provider.name, category)
            return DEFAULT_CATEGORY
        return category

    async def analyze_image(self, image_bytes: bytes, content_type: str = "image/jpeg") -> str:
        if not image_bytes:
            raise ValidationError(["image"], "image is required")
        analysis = (await self.provider.analyze_image(image_bytes, content_type)).strip()
        return analysis or IMAGE_GUIDE_MESSAGE


def build_classifier(settings: Settings, client: httpx.AsyncClient) -> ClassificationService:
    """설정에 따라 제공자 체인을 구성합니다.

    CLASSIFIER_PROVIDER selects the remote provider (gemini | huggingface);
    without its API key, or with "local", only the keyword rules are used.
    """
    local = KeywordProvider()
    choice = settings.CLASSIFIER_PROVIDER.strip().lower()

    remote: ClassificationProvider | None = None
    if choice == "gemini" and settings.GEMINI_API_KEY:
        remote = GeminiProvider(client, settings.GEMINI_API_KEY, settings.GEMINI_MODEL, settings.GEMINI_BASE_URL)
    elif choice == "huggingface" and settings.HUGGINGFACE_API_KEY:
        remote = HuggingFaceProvider(
            client, settings.HUGGINGFACE_API_KEY, settings.HUGGINGFACE_MODEL, settings.HUGGINGFACE_BASE_URL
        )
    elif choice not in ("gemini", "huggingface", "local"):
        logger.warning("unknown CLASSIFIER_PROVIDER %r, using local keyword rules", settings.CLASSIFIER_PROVIDER)

    if remote is None:
        logger.info("classification assist uses local keyword rules only")
        return ClassificationService(local)

    logger.info("classification assist uses %s with local fallback", remote.name)
    return ClassificationService(FallbackProvider(remote, local))
