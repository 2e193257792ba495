"""AI 분류 보조 요청/응답 스키마.

Classification assist request/response schemas.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContentRequest(BaseModel):
    content: str = ""


class TitleSuggestion(BaseModel):
    title: str


class CategorySuggestion(BaseModel):
    system: str  # 역무지원 | 안전관리 | 시설물관리


class ImagePathRequest(BaseModel):
    """저장된 첨부파일 경로로 이미지 분석을 요청 (Analyze an already stored attachment)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    image_path: str = Field(min_length=1)


class ImageAnalysis(BaseModel):
    analysis: str
