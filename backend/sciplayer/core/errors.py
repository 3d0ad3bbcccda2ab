"""Error Hierarchy: the closed set of failures the playlist store can raise.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Store failures are matched by type, never by message text
    - to_response() never carries internal detail for 5xx errors

Design Decisions:
    - Single hierarchy rooted at SciplayerError: one global handler maps all of them
    - StoreTimeoutError and StoreClosedError subclass StoreIOError so callers that
      only care about "storage failed" catch one type
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

INTERNAL_ERROR_MESSAGE = "internal server error"


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Observability context attached to an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    device_id: str | None = None
    operation: str | None = None


class SciplayerError(Exception):
    """Base exception for all SciPlayer errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.http_status < 500

    def to_response(self) -> dict:
        """Convert to the REST error body."""
        if self.is_client_error:
            return {"error": self.message}
        return {"error": INTERNAL_ERROR_MESSAGE}


# ─── Domain Errors (400-level) ──────────────────────────────────

class DeviceNotFoundError(SciplayerError):
    """Referenced device is not registered."""
    def __init__(self, device_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.device_id = device_id
        super().__init__(
            "device not found", "DEVICE_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.WARNING, ctx, 404,
        )
        self.device_id = device_id


# ─── Storage Errors (500-level) ─────────────────────────────────

class StoreIOError(SciplayerError):
    """Durable storage could not be read or written."""
    def __init__(
        self,
        message: str,
        operation: str,
        context: ErrorContext | None = None,
        code: str = "STORE_IO_ERROR",
        category: ErrorCategory = ErrorCategory.DATABASE,
    ):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            f"Store {operation} failed: {message}", code, category,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.operation = operation


class StoreTimeoutError(StoreIOError):
    """Store operation exceeded its deadline before COMMIT and was rolled back."""
    def __init__(self, operation: str, timeout_seconds: float, context: ErrorContext | None = None):
        super().__init__(
            f"timed out after {timeout_seconds:g}s", operation, context,
            code="STORE_TIMEOUT", category=ErrorCategory.TIMEOUT,
        )
        self.timeout_seconds = timeout_seconds


class StoreClosedError(StoreIOError):
    """Operation attempted after the store was closed."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__("store is closed", operation, context, code="STORE_CLOSED")


class SchemaInitError(SciplayerError):
    """Schema could not be created at startup. Fatal."""
    def __init__(self, message: str, location: str, context: ErrorContext | None = None):
        super().__init__(
            f"Schema initialisation failed for {location}: {message}",
            "SCHEMA_INIT_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.location = location
