"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API and CLI."""

    # Configuration errors (500)
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Selection errors (404)
    NO_MATCHING_TARGETS = "NO_MATCHING_TARGETS"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CLEANUP_SCOPE = "INVALID_CLEANUP_SCOPE"

    # Collaborator API errors
    EXTERNAL_API_ERROR = "EXTERNAL_API_ERROR"
    EXTERNAL_CONFLICT = "EXTERNAL_CONFLICT"
    EXTERNAL_NOT_FOUND = "EXTERNAL_NOT_FOUND"
    EXTERNAL_TIMEOUT = "EXTERNAL_TIMEOUT"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STATE_STORE_ERROR = "STATE_STORE_ERROR"
    ORPHAN_SOURCE = "ORPHAN_SOURCE"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ConfigurationError(AppException):
    """A required credential or configuration file is missing or malformed."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            status_code=500,
            details=details,
        )


class NoMatchingTargetsError(AppException):
    """An explicit id subset matched none of the known users."""

    def __init__(self, group_ids: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.NO_MATCHING_TARGETS,
            message=f"No users found for group IDs: {', '.join(group_ids)}",
            status_code=404,
            details={"group_ids": group_ids},
        )


class InvalidCleanupScopeError(AppException):
    """Cleanup was asked to keep both groups and sources."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_CLEANUP_SCOPE,
            message="Cannot use both sources_only and groups_only",
            status_code=400,
        )


class ExternalAPIError(AppException):
    """A collaborator API call failed (non-2xx or network error)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: Any | None = None,
        error_code: ErrorCode = ErrorCode.EXTERNAL_API_ERROR,
        http_status: int = 502,
    ) -> None:
        self.upstream_status = status_code
        self.response_body = response_body
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=http_status,
            details={"upstream_status": status_code, "response_body": response_body},
        )


class ConflictError(ExternalAPIError):
    """The collaborator reported a duplicate resource."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 409,
        response_body: Any | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            response_body=response_body,
            error_code=ErrorCode.EXTERNAL_CONFLICT,
            http_status=409,
        )


class NotFoundError(ExternalAPIError):
    """The collaborator answered 404."""

    def __init__(self, message: str, response_body: Any | None = None) -> None:
        super().__init__(
            message=message,
            status_code=404,
            response_body=response_body,
            error_code=ErrorCode.EXTERNAL_NOT_FOUND,
            http_status=404,
        )


class ExternalTimeoutError(ExternalAPIError):
    """A collaborator call exceeded the configured timeout."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.EXTERNAL_TIMEOUT,
            http_status=504,
        )


class StateStoreError(AppException):
    """Reading or writing the state store failed."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.STATE_STORE_ERROR,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=500,
            details=details,
        )


class OrphanSourceError(StateStoreError):
    """A source was recorded for a user/environment without a group record."""

    def __init__(self, user_id: str, environment: str) -> None:
        super().__init__(
            message=f"No group recorded for {user_id} in {environment}; refusing to record source",
            error_code=ErrorCode.ORPHAN_SOURCE,
            details={"user_id": user_id, "environment": environment},
        )
