"""오류 신고 Pydantic 스키마 및 검증 함수.

Error report request/response schemas and the create/update validators.
Requests accept both camelCase (`processingNote`) and snake_case keys;
responses are serialized in camelCase.

Validation rules (create and update share the per-field rules):
    - title: 공백 제외 1자 이상, 255자 이하 (non-empty, <= 255 chars)
    - content: 10자 이상 (at least 10 chars)
    - priority: 낮음 | 보통 | 높음 | 긴급
    - system: 1자 이상, 100자 이하 (non-empty, <= 100 chars)
    - status: 접수됨 | 처리중 | 완료 | 보류
    - attachments: 최대 5개 (at most 5 paths)
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.models.error_report import PRIORITIES, PRIORITY_NORMAL, STATUSES, STATUS_RECEIVED
from app.utils.datetime_utils import as_utc
from app.utils.exceptions import ValidationError

# 서버가 부여하는 필드 — 클라이언트 입력에서 제거 (Server-assigned fields, stripped from input)
_SERVER_FIELDS: frozenset[str] = frozenset(
    {"id", "createdAt", "created_at", "updatedAt", "updated_at", "reporterId", "reporter_id"}
)

MIN_CONTENT_LENGTH = 10
MAX_ATTACHMENTS = 5


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


def _check_priority(value: str | None) -> str | None:
    if value is not None and value not in PRIORITIES:
        raise ValueError(f"priority must be one of {', '.join(PRIORITIES)}")
    return value


def _check_status(value: str | None) -> str | None:
    if value is not None and value not in STATUSES:
        raise ValueError(f"status must be one of {', '.join(STATUSES)}")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


Priority = Annotated[str, AfterValidator(_check_priority)]
Status = Annotated[str, AfterValidator(_check_status)]
Title = Annotated[str, Field(min_length=1, max_length=255)]
Content = Annotated[str, Field(min_length=MIN_CONTENT_LENGTH)]
System = Annotated[str, Field(min_length=1, max_length=100)]
# 길이 제한은 문자열에만 적용 (max_length applies to the str branch only)
OptionalText = Annotated[Annotated[str, Field(max_length=255)] | None, BeforeValidator(_blank_to_none)]
Attachments = Annotated[list[str], Field(max_length=MAX_ATTACHMENTS)] | None


class ErrorReportInsert(_CamelModel):
    """검증을 통과한 생성 데이터 — 저장소에 그대로 전달됩니다.

    Validated creation payload, handed to the repository as-is.
    reporter_id always comes from the authenticated caller.
    """

    title: Title
    content: Content
    priority: Priority = PRIORITY_NORMAL
    system: System
    status: Status = STATUS_RECEIVED
    browser: OptionalText = None
    os: OptionalText = None
    attachments: Attachments = None
    reporter_id: str = Field(min_length=1)

    @field_validator("attachments", mode="after")
    @classmethod
    def empty_list_to_none(cls, value: list[str] | None) -> list[str] | None:
        return value or None


class ErrorReportUpdate(_CamelModel):
    """부분 업데이트 스키마 — 전달된 필드만 검증/반영합니다.

    Partial update schema. Only fields present in the input are validated
    and applied (`model_dump(exclude_unset=True)`). reporter_id is not
    updatable and is silently dropped.
    """

    title: Title | None = None
    content: Content | None = None
    priority: Priority | None = None
    system: System | None = None
    status: Status | None = None
    browser: OptionalText = None
    os: OptionalText = None
    attachments: Attachments = None
    processing_note: str | None = None

    @field_validator("title", "content", "priority", "system", "status", mode="after")
    @classmethod
    def reject_null(cls, value: str | None) -> str:
        # 기본값(None)에는 실행되지 않음 — only runs when the key was supplied
        if value is None:
            raise ValueError("may not be null")
        return value


class ErrorReportResponse(_CamelModel):
    """오류 신고 응답 스키마 (camelCase)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    priority: str
    system: str
    status: str
    browser: str | None = None
    os: str | None = None
    attachments: list[str] | None = None
    processing_note: str | None = None
    reporter_id: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def normalise_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class ErrorReportListResponse(_CamelModel):
    """오류 신고 목록 응답 — items + 필터 기준 전체 개수."""

    items: list[ErrorReportResponse]
    total: int  # 페이지네이션 적용 전 필터 일치 개수 (Count matching the filter before pagination)
    page: int
    limit: int


def _to_validation_error(exc: PydanticValidationError) -> ValidationError:
    fields: list[str] = []
    messages: list[str] = []
    for error in exc.errors():
        loc = error.get("loc") or ("__root__",)
        name = str(loc[0])
        if name not in fields:
            fields.append(name)
        messages.append(f"{name}: {error.get('msg')}")
    return ValidationError(fields, "; ".join(messages) or "Invalid input")


def validate_create(data: Mapping[str, Any], reporter_id: str) -> ErrorReportInsert:
    """생성 입력을 검증합니다.

    Validate a creation payload. Server-assigned fields supplied by the
    client are dropped and reporter_id is injected from the caller.

    Args:
        data: 클라이언트 입력 (Raw client input, JSON body or form fields)
        reporter_id: 인증된 사용자 ID (Authenticated caller's user id)

    Returns:
        ErrorReportInsert: 검증된 생성 데이터 (Validated payload)

    Raises:
        ValidationError: 필수 조건 위반 시 위반 필드 목록과 함께 (Lists offending fields)
    """
    payload: dict[str, Any] = {k: v for k, v in data.items() if k not in _SERVER_FIELDS}
    payload["reporter_id"] = reporter_id
    try:
        return ErrorReportInsert.model_validate(payload)
    except PydanticValidationError as exc:
        raise _to_validation_error(exc) from exc


def validate_update(data: Mapping[str, Any]) -> ErrorReportUpdate:
    """부분 업데이트 입력을 검증합니다 (Validate a partial update payload)."""
    payload: dict[str, Any] = {k: v for k, v in data.items() if k not in _SERVER_FIELDS}
    try:
        return ErrorReportUpdate.model_validate(payload)
    except PydanticValidationError as exc:
        raise _to_validation_error(exc) from exc
