"""Google Gemini 제공자 — Generative Language REST API.

Gemini provider over the Generative Language REST API using httpx.
Answers are requested as JSON constrained by a response schema.
"""

import base64
import json
from typing import Any

import httpx

from app.classification.base import ClassificationError, ClassificationProvider
from app.models.error_report import SYSTEM_CATEGORIES

TITLE_INSTRUCTION = (
    "You are a helpful assistant that generates concise, descriptive titles for error reports. "
    "Generate a title in Korean that summarizes the main issue described in the error content. "
    "The title should be brief (under 50 characters) and clearly indicate the problem."
)

CATEGORY_INSTRUCTION = (
    "Classify the Korean railway error report into exactly one category:\n"
    "- 역무지원 (tickets, reservations, payment, customer service)\n"
    "- 안전관리 (security, safety, accidents, risk management)\n"
    "- 시설물관리 (buildings, facilities, equipment, infrastructure)"
)

IMAGE_INSTRUCTION = (
    "이 이미지는 철도 역사 또는 시스템 오류 신고에 첨부된 사진입니다. "
    "보이는 오류 메시지, 손상 부위, 위험 요소를 한국어로 간결하게 설명하고 "
    "가능한 원인과 조치 방향을 제시해 주세요."
)


class GeminiProvider(ClassificationProvider):
    """Gemini generateContent 호출 제공자.

    Args:
        client: 공유 httpx 클라이언트 (Shared client; its timeout bounds every call)
        api_key: Gemini API 키
        model: 모델 이름 (e.g. gemini-2.5-flash)
        base_url: API 기본 URL
    """

    name = "gemini"

    def __init__(self, client: httpx.AsyncClient, api_key: str, model: str, base_url: str) -> None:
        self.client = client
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    async def _generate(self, body: dict[str, Any]) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = await self.client.post(url, json=body, headers={"x-goog-api-key": self.api_key})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise ClassificationError(f"gemini request failed: {exc}") from exc
        except ValueError as exc:
            raise ClassificationError("gemini returned a non-JSON response") from exc

        candidates = payload.get("candidates") if isinstance(payload, dict) else None
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise ClassificationError("gemini returned no candidates")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()
        if not text:
            raise ClassificationError("gemini returned an empty answer")
        return text

    async def _generate_json(self, instruction: str, prompt: str, schema: dict[str, Any]) -> dict[str, Any]:
        text = await self._generate(
            {
                "systemInstruction": {"parts": [{"text": instruction}]},
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {
                    "responseMimeType": "application/json",
                    "responseSchema": schema,
                },
            }
        )
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ClassificationError("gemini answer is not valid JSON") from exc
        if not isinstance(data, dict):
            raise ClassificationError("gemini answer is not a JSON object")
        return data

    async def suggest_title(self, content: str) -> str:
        data = await self._generate_json(
            TITLE_INSTRUCTION,
            f"다음 오류 내용에 대한 적절한 제목을 생성해 주세요:\n\n{content}",
            {"type": "OBJECT", "properties": {"title": {"type": "STRING"}}, "required": ["title"]},
        )
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ClassificationError("gemini answer has no title")
        return title.strip()

    async def suggest_category(self, content: str) -> str:
        data = await self._generate_json(
            CATEGORY_INSTRUCTION,
            f"다음 오류 내용의 분류를 선택해 주세요:\n\n{content}",
            {
                "type": "OBJECT",
                "properties": {"system": {"type": "STRING", "enum": list(SYSTEM_CATEGORIES)}},
                "required": ["system"],
            },
        )
        category = data.get("system")
        if category not in SYSTEM_CATEGORIES:
            raise ClassificationError(f"gemini answered an unknown category: {category!r}")
        return category

    async def analyze_image(self, image_bytes: bytes, content_type: str) -> str:
        return await self._generate(
            {
                "contents": [
                    {
                        "role": "user",
                        "parts": [
                            {
                                "inline_data": {
                                    "mime_type": content_type,
                                    "data": base64.b64encode(image_bytes).decode("ascii"),
                                }
                            },
                            {"text": IMAGE_INSTRUCTION},
                        ],
                    }
                ]
            }
        )
