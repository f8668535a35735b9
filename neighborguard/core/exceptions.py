"""Consolidated exception hierarchy for the NeighborGuard service.

This module provides an exception hierarchy that:
1. Categorizes errors by taxonomy (not found, forbidden, bad request, internal)
2. Supports automatic HTTP status code mapping
3. Enables structured error responses

Every validation or authorization failure is raised before any mutation is
made, so no partial state is ever persisted for a failed precondition.
"""

from __future__ import annotations

from typing import Any


class NeighborGuardError(Exception):
    """Base exception for all application-specific errors."""

    default_message: str = "An unexpected error occurred"
    default_error_code: str = "INTERNAL_ERROR"
    default_status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.default_error_code
        self.status_code = status_code or self.default_status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# Validation Errors (400)
class ValidationError(NeighborGuardError):
    default_message = "Validation failed"
    default_error_code = "VALIDATION_ERROR"
    default_status_code = 400


class InvalidInputError(ValidationError):
    default_message = "Invalid input provided"
    default_error_code = "INVALID_INPUT"

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        if field:
            details["field"] = field
        if value is not None:
            str_value = str(value)
            details["value"] = str_value[:100] if len(str_value) > 100 else str_value
        if constraint:
            details["constraint"] = constraint
        super().__init__(message, details=details, **kwargs)


class EventLockedError(ValidationError):
    """Raised on any modification attempt of a resolved event."""

    default_message = "Resolved events cannot be modified"
    default_error_code = "EVENT_LOCKED"

    def __init__(self, event_id: str, message: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {}) or {}
        details["event_id"] = event_id
        super().__init__(message, details=details, **kwargs)


class ResolutionRequiredError(ValidationError):
    default_message = "resolution is required when resolving an event"
    default_error_code = "RESOLUTION_REQUIRED"


class OwnerRemovalError(ValidationError):
    default_message = "Cannot remove circle owner"
    default_error_code = "OWNER_REMOVAL_NOT_ALLOWED"


# Auth Errors
class AuthorizationError(NeighborGuardError):
    default_message = "Access denied"
    default_error_code = "ACCESS_DENIED"
    default_status_code = 403


class CircleAccessDeniedError(AuthorizationError):
    default_message = "User is not a member of this circle"
    default_error_code = "NOT_A_CIRCLE_MEMBER"

    def __init__(
        self, circle_id: str, user_id: str | None, message: str | None = None, **kwargs: Any
    ) -> None:
        details = kwargs.pop("details", {}) or {}
        details["circle_id"] = circle_id
        if user_id is not None:
            details["user_id"] = user_id
        super().__init__(message, details=details, **kwargs)


class ObserverCannotCreateError(AuthorizationError):
    default_message = "Observer cannot create events"
    default_error_code = "OBSERVER_CANNOT_CREATE"


class EventModificationDeniedError(AuthorizationError):
    default_message = "Only event creator or circle owner can change status"
    default_error_code = "EVENT_MODIFICATION_DENIED"


class OwnerRequiredError(AuthorizationError):
    default_message = "Only circle owner can manage members"
    default_error_code = "OWNER_REQUIRED"


# Not Found Errors (404)
class NotFoundError(NeighborGuardError):
    default_message = "Resource not found"
    default_error_code = "NOT_FOUND"
    default_status_code = 404


class ResourceNotFoundError(NotFoundError):
    resource_type: str = "resource"

    def __init__(
        self,
        resource_id: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        if message is None:
            message = f"{self.resource_type.replace('_', ' ').capitalize()} with id '{resource_id}' not found"
        details = kwargs.pop("details", {}) or {}
        details["resource_type"] = self.resource_type
        details["resource_id"] = str(resource_id)
        super().__init__(message, details=details, **kwargs)


class CircleNotFoundError(ResourceNotFoundError):
    default_error_code = "CIRCLE_NOT_FOUND"
    resource_type = "circle"


class EventNotFoundError(ResourceNotFoundError):
    default_error_code = "EVENT_NOT_FOUND"
    resource_type = "event"


class VideoAssetNotFoundError(ResourceNotFoundError):
    default_error_code = "VIDEO_ASSET_NOT_FOUND"
    resource_type = "video_asset"


class UserNotFoundError(ResourceNotFoundError):
    default_error_code = "USER_NOT_FOUND"
    resource_type = "user"


class NotificationNotFoundError(ResourceNotFoundError):
    default_error_code = "NOTIFICATION_NOT_FOUND"
    resource_type = "notification"


class MemberNotFoundError(ResourceNotFoundError):
    default_error_code = "CIRCLE_MEMBER_NOT_FOUND"
    resource_type = "circle_member"


# Internal Errors (500)
class InternalError(NeighborGuardError):
    default_message = "An internal error occurred"
    default_error_code = "INTERNAL_ERROR"
    default_status_code = 500


def get_exception_status_code(exc: Exception) -> int:
    if isinstance(exc, NeighborGuardError):
        return exc.status_code
    return 500


def get_exception_error_code(exc: Exception) -> str:
    if isinstance(exc, NeighborGuardError):
        return exc.error_code
    return "INTERNAL_ERROR"
