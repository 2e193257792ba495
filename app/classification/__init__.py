"""AI 분류 보조 패키지.

Classification assist package — title/category suggestion and image
analysis through a remote provider with a local keyword fallback.
"""

from app.classification.base import ClassificationError, ClassificationProvider
from app.classification.fallback import FallbackProvider
from app.classification.keyword import KeywordProvider
from app.classification.service import ClassificationService, build_classifier

__all__ = [
    "ClassificationError",
    "ClassificationProvider",
    "ClassificationService",
    "FallbackProvider",
    "KeywordProvider",
    "build_classifier",
]
