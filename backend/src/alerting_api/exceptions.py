"""Domain-specific exceptions for the notification rule API.

These exceptions provide a clean separation between service-layer errors
and HTTP responses. Every error carries a machine readable ``code`` that is
rendered unchanged in the error body, and the HTTP status it maps to.
"""

from typing import Any


class AlertingAPIError(Exception):
    """Base exception for all notification rule API errors."""

    code: str = "internal error"
    status_code: int = 500

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Invalid Argument Errors (400)
# =============================================================================


class InvalidArgumentError(AlertingAPIError):
    """Raised when client supplied data cannot be decoded or fails validation."""

    code = "invalid"
    status_code = 400


class InvalidIDError(InvalidArgumentError):
    """Raised when an identifier is missing or malformed."""

    def __init__(self, value: str | None = None, field: str = "id") -> None:
        if not value:
            message = f"url missing {field}" if field == "id" else f"{field} is required"
        else:
            message = f"{field} is invalid"
        super().__init__(message, {"field": field})


class QueryRenderError(InvalidArgumentError):
    """Raised when a rule cannot be rendered against its endpoint."""


# =============================================================================
# Authentication Errors (401 / 403)
# =============================================================================


class UnauthorizedError(AlertingAPIError):
    """Raised when the request carries no valid authenticated principal."""

    code = "unauthorized"
    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ForbiddenError(AlertingAPIError):
    """Raised when the principal may not act on a resource."""

    code = "forbidden"
    status_code = 403


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(AlertingAPIError):
    """Base class for resource not found errors."""

    code = "not found"
    status_code = 404


class NotificationRuleNotFoundError(NotFoundError):
    """Raised when a notification rule cannot be found."""

    def __init__(self, rule_id: str | None = None) -> None:
        details = {"id": rule_id} if rule_id else {}
        super().__init__("notification rule not found", details)


class NotificationEndpointNotFoundError(NotFoundError):
    """Raised when a notification endpoint cannot be found."""

    def __init__(self, endpoint_id: str | None = None) -> None:
        details = {"id": endpoint_id} if endpoint_id else {}
        super().__init__("notification endpoint not found", details)


class TaskNotFoundError(NotFoundError):
    """Raised when a task cannot be found."""

    def __init__(self, task_id: str | None = None) -> None:
        details = {"id": task_id} if task_id else {}
        super().__init__("task not found", details)


class LabelNotFoundError(NotFoundError):
    """Raised when a label cannot be found."""

    def __init__(self, label_id: str | None = None) -> None:
        details = {"id": label_id} if label_id else {}
        super().__init__("label not found", details)


class OrganizationNotFoundError(NotFoundError):
    """Raised when an organization cannot be found."""

    def __init__(self, org_id: str | None = None, name: str | None = None) -> None:
        details: dict[str, Any] = {}
        if org_id:
            details["id"] = org_id
        if name:
            details["name"] = name
        super().__init__("organization not found", details)


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""

    def __init__(self, user_id: str | None = None) -> None:
        details = {"id": user_id} if user_id else {}
        super().__init__("user not found", details)


class MappingNotFoundError(NotFoundError):
    """Raised when a label or user mapping does not exist."""


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(AlertingAPIError):
    """Raised when a resource already exists."""

    code = "conflict"
    status_code = 409


# =============================================================================
# Internal / Upstream Errors (5xx)
# =============================================================================


class InternalError(AlertingAPIError):
    """Raised when a collaborator fails for reasons not attributable to the caller."""

    code = "internal error"
    status_code = 500


class UpstreamUnavailableError(AlertingAPIError):
    """Raised when a platform collaborator cannot be reached or fails."""

    code = "unavailable"
    status_code = 502

    def __init__(self, service_name: str, status_code: int | None = None) -> None:
        details: dict[str, Any] = {"service": service_name}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"{service_name} is unavailable", details)


ERRORS_BY_CODE: dict[str, type[AlertingAPIError]] = {
    InvalidArgumentError.code: InvalidArgumentError,
    UnauthorizedError.code: UnauthorizedError,
    ForbiddenError.code: ForbiddenError,
    NotFoundError.code: NotFoundError,
    ConflictError.code: ConflictError,
    InternalError.code: InternalError,
}


def error_from_code(code: str | None, message: str) -> AlertingAPIError:
    """Rebuild a local error from a remote ``{code, message}`` body."""
    error_class = ERRORS_BY_CODE.get(code or "", InternalError)
    return error_class(message)
