"""분류 제공자 인터페이스.

Classification provider interface and the provider-failure exception.
"""

from abc import ABC, abstractmethod


class ClassificationError(Exception):
    """제공자 호출 실패 (Provider transport, HTTP, parse or out-of-set failure).

    Only this exception triggers the local fallback; it never reaches clients.
    """


class ClassificationProvider(ABC):
    """제목/분류 제안 및 이미지 분석 제공자.

    A provider either answers or raises ClassificationError.
    """

    name: str = "provider"

    @abstractmethod
    async def suggest_title(self, content: str) -> str: ...

    @abstractmethod
    async def suggest_category(self, content: str) -> str: ...

    @abstractmethod
    async def analyze_image(self, image_bytes: bytes, content_type: str) -> str: ...
