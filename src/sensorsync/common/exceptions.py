"""Exception hierarchy for the SensorSync backend.

Every error raised by the registry, the user store or the notification
channel derives from SensorSyncError and names the HTTP status the API
answers with. Failures are terminal for the request that hit them.

Exception Hierarchy:
    SensorSyncError (base)
    ├── ConfigurationError      (500)
    ├── ValidationError         (400)
    ├── UnauthorizedError       (401)
    ├── NotFoundError           (404)
    ├── ConflictError           (409)
    ├── DatabaseError           (500)
    │   ├── ConnectionPoolError
    │   ├── TransactionError
    │   └── IntegrityError
    └── NotificationError       (500)
"""
from typing import Any, Optional


class SensorSyncError(Exception):
    """Base exception for all SensorSync errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "NOT_FOUND")
        details: Additional context for logs
        cause: The driver or library exception behind this error
        status_code: HTTP status the API layer answers with
    """

    status_code: int = 500
    default_code: str = "SENSORSYNC_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.cause = cause

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            text = f"{text} ({detail_str})"
        return text


def _with(details: Optional[dict[str, Any]], **extra: Any) -> dict[str, Any]:
    merged = dict(details or {})
    merged.update({k: v for k, v in extra.items() if v is not None})
    return merged


class ConfigurationError(SensorSyncError):
    """Raised when required settings (e.g. DATABASE_URL) are missing."""

    default_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, missing_keys: Optional[list[str]] = None, **kwargs):
        details = _with(kwargs.pop("details", None), missing_keys=missing_keys)
        super().__init__(message, details=details, **kwargs)


# ========== Request Errors ==========


class ValidationError(SensorSyncError):
    """Raised when a request is missing required fields."""

    status_code = 400
    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        details = _with(kwargs.pop("details", None), field=field)
        super().__init__(message, details=details, **kwargs)


class UnauthorizedError(SensorSyncError):
    """Raised when a password does not match the stored hash."""

    status_code = 401
    default_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Invalid credentials", **kwargs):
        super().__init__(message, **kwargs)


class _ResourceError(SensorSyncError):
    """Error about one user or device, identified by type and optional id."""

    suffix = ""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None, **kwargs):
        if resource_id:
            message = f"{resource_type} '{resource_id}' {self.suffix}"
        else:
            message = f"{resource_type} {self.suffix}"
        details = _with(
            kwargs.pop("details", None),
            resource_type=resource_type,
            resource_id=resource_id,
        )
        super().__init__(message, details=details, **kwargs)
        self.resource_type = resource_type
        self.resource_id = resource_id


class NotFoundError(_ResourceError):
    """Raised when a user or device does not exist."""

    status_code = 404
    default_code = "NOT_FOUND"
    suffix = "not found"


class ConflictError(_ResourceError):
    """Raised when a username or a device id is already taken."""

    status_code = 409
    default_code = "CONFLICT"
    suffix = "already exists"


# ========== Store Errors ==========


class DatabaseError(SensorSyncError):
    """Base class for user store failures."""

    default_code = "DATABASE_ERROR"


class ConnectionPoolError(DatabaseError):
    """Raised when no pooled connection can be obtained."""

    default_code = "CONNECTION_POOL_ERROR"

    def __init__(self, message: str = "Database connection pool error", **kwargs):
        super().__init__(message, **kwargs)


class TransactionError(DatabaseError):
    """Raised when a transaction cannot start or is aborted by the server."""

    default_code = "TRANSACTION_ERROR"

    def __init__(
        self,
        message: str = "Database transaction failed",
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = _with(kwargs.pop("details", None), operation=operation)
        super().__init__(message, details=details, **kwargs)


class IntegrityError(DatabaseError):
    """Raised when a constraint not mapped to a domain conflict is violated."""

    default_code = "INTEGRITY_ERROR"

    def __init__(
        self,
        message: str = "Database integrity error",
        constraint: Optional[str] = None,
        **kwargs,
    ):
        details = _with(kwargs.pop("details", None), constraint=constraint)
        super().__init__(message, details=details, **kwargs)


# ========== Notification Errors ==========


class NotificationError(SensorSyncError):
    """Raised when a publish that the caller asked for explicitly fails.

    Registry mutations never raise this: their notifications are best effort.
    """

    default_code = "NOTIFICATION_ERROR"

    def __init__(
        self,
        message: str = "Failed to publish notification",
        topic: Optional[str] = None,
        **kwargs,
    ):
        details = _with(kwargs.pop("details", None), topic=topic)
        super().__init__(message, details=details, **kwargs)


__all__ = [
    "SensorSyncError",
    "ConfigurationError",
    "ValidationError",
    "UnauthorizedError",
    "NotFoundError",
    "ConflictError",
    "DatabaseError",
    "ConnectionPoolError",
    "TransactionError",
    "IntegrityError",
    "NotificationError",
]
