"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error taxonomy
of the service. These simplify error raising across services and routes
by eliminating the need to specify status codes at each call site.

Usage:
    from app.utils.exceptions import NotFoundError, ValidationError
    raise NotFoundError("오류 신고를 찾을 수 없습니다 (Error report not found)")
    raise ValidationError(["content"], "content must be at least 10 characters")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a requested resource (error report, user, upload) does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when attempting to create a resource that violates a uniqueness constraint
    (e.g. duplicate username or email on registration).

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired
    (e.g. missing JWT token, expired token, invalid credentials).
    Clients redirect to the login screen on this status.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ValidationError(HTTPException):
    """400 Bad Request 예외 — 입력값 검증 실패 시 사용.

    400 Bad Request exception for malformed or missing input.
    The detail carries the offending field names so that the client can
    highlight them.

    Args:
        fields: 문제가 된 필드 목록 (Offending field names)
        message: 오류 메시지 (Human-readable summary)
    """

    def __init__(self, fields: list[str], message: str = "Invalid input") -> None:
        self.fields: list[str] = fields
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": message, "fields": fields},
        )


class StorageError(HTTPException):
    """503 Service Unavailable 예외 — 저장소 장애 시 사용.

    Raised (by the exception handlers in app.main) when the database is
    unreachable, times out, or rejects a statement. The detail is always
    generic; the underlying error is only logged.

    Args:
        detail: 오류 메시지 (Generic error message)
    """

    def __init__(self, detail: str = "Storage unavailable") -> None:
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
