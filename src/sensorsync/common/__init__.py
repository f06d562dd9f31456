"""Shared infrastructure for SensorSync.

Modules:
    exceptions: SensorSyncError hierarchy with HTTP status mapping
    database: asyncpg pool, transaction helpers and schema bootstrap
    error_sanitizer: Redaction of sensitive data in client-facing errors
"""
from .database import (
    check_database_health,
    close_pool,
    create_pool,
    database_connection,
    database_transaction,
    ensure_schema,
)
from .error_sanitizer import ErrorSanitizer, sanitize_error_message
from .exceptions import (
    ConfigurationError,
    ConflictError,
    ConnectionPoolError,
    DatabaseError,
    IntegrityError,
    NotFoundError,
    NotificationError,
    SensorSyncError,
    TransactionError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    # Database
    "check_database_health",
    "close_pool",
    "create_pool",
    "database_connection",
    "database_transaction",
    "ensure_schema",
    # Sanitization
    "ErrorSanitizer",
    "sanitize_error_message",
    # Exceptions
    "ConfigurationError",
    "ConflictError",
    "ConnectionPoolError",
    "DatabaseError",
    "IntegrityError",
    "NotFoundError",
    "NotificationError",
    "SensorSyncError",
    "TransactionError",
    "UnauthorizedError",
    "ValidationError",
]
