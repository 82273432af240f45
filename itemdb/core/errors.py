"""Error Hierarchy: typed, categorized exceptions for all itemdb failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Record-level errors are recoverable; storage errors are critical
    - to_dict() produces the structured envelope used in logs
    - A not-found update/remove is NOT an error (operations return False instead)

Design Decisions:
    - Single hierarchy with ItemDBError base: callers can catch everything at one seam
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    DECODE = "decode"
    STORAGE = "storage"
    CONFLICT = "conflict"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    collection: str | None = None
    operation: str | None = None
    item_id: str | None = None
    debug_info: dict[str, Any] | None = None


class ItemDBError(Exception):
    """Base exception for all itemdb errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def recoverable(self) -> bool:
        return self.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING, ErrorSeverity.ERROR)

    def to_dict(self) -> dict:
        """Convert to a structured error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "recoverable": self.recoverable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "collection": self.context.collection,
                    "operation": self.context.operation,
                    "item_id": self.context.item_id,
                },
            }
        }


# ─── Record Errors (recoverable) ────────────────────────────────

class InvalidRecordError(ItemDBError):
    """Record is not an object, or carries an unusable identifier."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_RECORD", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )


class DuplicateIdentifierError(ItemDBError):
    """Identifier already present in the collection."""
    def __init__(self, item_id: str, collection: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.collection = ctx.collection or collection
        ctx.item_id = item_id
        super().__init__(
            f"Item '{item_id}' already exists in collection '{collection}'",
            "DUPLICATE_IDENTIFIER", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx,
        )
        self.item_id = item_id


class ConfigurationError(ItemDBError):
    """Settings name an unsupported option."""
    def __init__(self, message: str, setting: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.ERROR, context,
        )
        self.setting = setting


# ─── Storage Errors (critical) ──────────────────────────────────

class DecodeError(ItemDBError):
    """Durable slot does not hold a valid encoded sequence."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot decode collection: {message}",
            "DECODE_ERROR", ErrorCategory.DECODE,
            ErrorSeverity.CRITICAL, context,
        )


class StorageError(ItemDBError):
    """Key-value engine operation failed."""
    def __init__(
        self,
        message: str,
        operation: str,
        code: str = "STORAGE_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Storage {operation} failed: {message}",
            code, ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation


class StorageReadError(StorageError):
    """Key-value engine read failed."""
    def __init__(self, message: str, operation: str = "get", context: ErrorContext | None = None):
        super().__init__(message, operation, "STORAGE_READ_ERROR", context)


class StorageWriteError(StorageError):
    """Key-value engine write or erase failed."""
    def __init__(self, message: str, operation: str = "set", context: ErrorContext | None = None):
        super().__init__(message, operation, "STORAGE_WRITE_ERROR", context)
