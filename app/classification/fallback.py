"""제공자 폴백 데코레이터.

Provider decorator: try the primary provider, and on ClassificationError
log a warning and answer from the fallback provider instead.
"""

import logging

from app.classification.base import ClassificationError, ClassificationProvider

logger = logging.getLogger(__name__)


class FallbackProvider(ClassificationProvider):
    """원격 제공자 실패 시 로컬 제공자로 위임.

    Only ClassificationError is absorbed; any other exception is a bug and
    propagates unchanged.
    """

    def __init__(self, primary: ClassificationProvider, fallback: ClassificationProvider) -> None:
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}+{fallback.name}"

    async def suggest_title(self, content: str) -> str:
        try:
            return await self.primary.suggest_title(content)
        except ClassificationError as exc:
            logger.warning("title suggestion via %s failed, using %s: %s", self.primary.name, self.fallback.name, exc)
        return await self.fallback.suggest_title(content)

    async def suggest_category(self, content: str) -> str:
        try:
            return await self.primary.suggest_category(content)
        except ClassificationError as exc:
            logger.warning("category suggestion via %s failed, using %s: %s", self.primary.name, self.fallback.name, exc)
        return await self.fallback.suggest_category(content)

    async def analyze_image(self, image_bytes: bytes, content_type: str) -> str:
        try:
            return await self.primary.analyze_image(image_bytes, content_type)
        except ClassificationError as exc:
            logger.warning("image analysis via %s failed, using %s: %s", self.primary.name, self.fallback.name, exc)
        return await self.fallback.analyze_image(image_bytes, content_type)
