"""Hugging Face Inference API 제공자 (텍스트 전용).

Text-generation provider over the Hugging Face Inference API. The model is
text-only, so image analysis always raises ClassificationError.
"""

import re
from typing import Any

import httpx

from app.classification.base import ClassificationError, ClassificationProvider
from app.models.error_report import SYSTEM_CATEGORIES

_CATEGORY_PREFIX = re.compile(r"^(category|카테고리)\s*:\s*", re.IGNORECASE)

TITLE_PROMPT = """Create a concise Korean error title (max 30 characters) based on the content below. Only respond with the title.

Content: {content}

Title:"""

CATEGORY_PROMPT = """Classify this Korean error content into one of three categories. Respond only with the exact category name:

Categories:
- 역무지원 (for tickets, reservations, customer service)
- 안전관리 (for security, safety, risk management)
- 시설물관리 (for buildings, facilities, infrastructure)

Content: {content}

Category:"""


class HuggingFaceProvider(ClassificationProvider):
    """HF textGeneration 호출 제공자 (Hugging Face text-generation provider)."""

    name = "huggingface"

    def __init__(self, client: httpx.AsyncClient, api_key: str, model: str, base_url: str) -> None:
        self.client = client
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    async def _generate(self, prompt: str, max_new_tokens: int, temperature: float) -> str:
        body: dict[str, Any] = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": max_new_tokens,
                "temperature": temperature,
                "do_sample": True,
                "return_full_text": False,
            },
        }
        try:
            response = await self.client.post(
                f"{self.base_url}/{self.model}",
                json=body,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise ClassificationError(f"huggingface request failed: {exc}") from exc
        except ValueError as exc:
            raise ClassificationError("huggingface returned a non-JSON response") from exc

        # 응답 형식: [{"generated_text": "..."}] 또는 {"generated_text": "..."}
        if isinstance(payload, list) and payload:
            payload = payload[0]
        text = payload.get("generated_text") if isinstance(payload, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise ClassificationError("huggingface returned an empty answer")
        return text.strip()

    async def suggest_title(self, content: str) -> str:
        return await self._generate(TITLE_PROMPT.format(content=content[:200]), max_new_tokens=30, temperature=0.5)

    async def suggest_category(self, content: str) -> str:
        answer = await self._generate(CATEGORY_PROMPT.format(content=content[:150]), max_new_tokens=10, temperature=0.2)
        first_line = _CATEGORY_PREFIX.sub("", answer).split("\n")[0]
        for category in SYSTEM_CATEGORIES:
            if category in first_line:
                return category
        raise ClassificationError(f"huggingface answered an unknown category: {first_line!r}")

    async def analyze_image(self, image_bytes: bytes, content_type: str) -> str:
        raise ClassificationError(f"{self.model} is a text-only model")
