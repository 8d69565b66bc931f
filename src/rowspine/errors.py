"""
Structured error types for rowspine.

Every failure raised by the connection, result and active-record layers is a
:class:`RowSpineError`. Errors carry a category for routing, an
:class:`ErrorContext` naming the connection/table/query involved, and an
optional chained cause so the original driver exception is never lost.

Nothing in rowspine retries or recovers locally: each of these errors is
either a programming error or a data-integrity violation and propagates to
the caller.

Architecture:
    ::

        RowSpineError
        ├── ConfigError                      (CONFIG)
        ├── DatabaseError                    (DATABASE)
        │   ├── DatabaseConnectionError
        │   ├── ConnectionNotFoundError
        │   ├── ConnectionHandleUnavailableError
        │   ├── QueryError                   (message, code, query)
        │   ├── ResultExpiredError
        │   └── DuplicateKeyViolationError
        └── RecordError                      (VALIDATION)
            ├── CardinalityMismatchError
            ├── FieldNotAllowedError         (fields)
            ├── MissingFieldsError           (fields)
            ├── UndefinedFieldError          (field)
            └── InvalidStateError

Examples:
    >>> error = QueryError("Unknown column 'nme'", code=1054)
    >>> error.code
    1054
    >>> error.to_dict()["category"]
    'DATABASE'

Tags:
    error-handling, exception-hierarchy, error-context, rowspine
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    DATABASE = "DATABASE"  # Driver, connection, query, integrity
    VALIDATION = "VALIDATION"  # Record binding and field checks
    CONFIG = "CONFIG"  # Settings, URLs, adapters, drivers
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that were set are emitted by :meth:`to_dict`, so the
    context can be merged straight into a structured log event.
    """

    connection: str | None = None
    table: str | None = None
    query: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["connection", "table", "query"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RowSpineError(Exception):
    """
    Base exception for all rowspine errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` is chained as ``__cause__`` so tracebacks show the
    driver exception underneath.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RowSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("failed").with_context(connection="default", table="users")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigError(RowSpineError):
    """Invalid settings, URL, adapter name or missing driver."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(RowSpineError):
    """Database connection, query or integrity error."""

    default_category = ErrorCategory.DATABASE


class DatabaseConnectionError(DatabaseError):
    """The driver refused to open a connection."""


class ConnectionNotFoundError(DatabaseError):
    """No connection is registered under the requested name."""

    def __init__(self, name: str, **kwargs: Any):
        super().__init__(f'DB connection "{name}" does not exist.', **kwargs)
        self.name = name


class ConnectionHandleUnavailableError(DatabaseError):
    """The connection has no live driver handle (never connected or closed)."""


class QueryError(DatabaseError):
    """
    A statement failed inside the driver.

    ``code`` is the driver's native error number (MySQL errno, SQLite
    extended result code) when one is available.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        query: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.code = code
        self.query = query
        if query is not None and self.context.query is None:
            self.context.query = query

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.code is not None:
            result["code"] = self.code
        return result


class ResultExpiredError(DatabaseError):
    """A result set was accessed after it was freed."""


class DuplicateKeyViolationError(DatabaseError):
    """More than one row matched a binding that is supposed to be unique."""


# =============================================================================
# ACTIVE RECORD ERRORS
# =============================================================================


class RecordError(RowSpineError):
    """Base class for active-record binding and field errors."""

    default_category = ErrorCategory.VALIDATION


class CardinalityMismatchError(RecordError):
    """Key tuple and key column tuple differ in length, or no key column exists."""


class FieldNotAllowedError(RecordError):
    """Fields were written or loaded that are not part of the table."""

    def __init__(self, message: str, *, fields: Iterable[str] = (), **kwargs: Any):
        super().__init__(message, **kwargs)
        self.fields = list(fields)
        if self.fields:
            self.context.metadata.setdefault("fields", self.fields)


class MissingFieldsError(RecordError):
    """A load was missing fields that were declared as required."""

    def __init__(self, message: str, *, fields: Iterable[str] = (), **kwargs: Any):
        super().__init__(message, **kwargs)
        self.fields = list(fields)
        if self.fields:
            self.context.metadata.setdefault("fields", self.fields)


class UndefinedFieldError(RecordError):
    """A field is in neither the buffer, the stored row, nor the key binding."""

    def __init__(self, field: str, **kwargs: Any):
        super().__init__(f'Attempting to access undefined field "{field}" on active record.', **kwargs)
        self.field = field


class InvalidStateError(RecordError):
    """An operation was called from a record state that does not allow it."""


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "RowSpineError",
    "ConfigError",
    "DatabaseError",
    "DatabaseConnectionError",
    "ConnectionNotFoundError",
    "ConnectionHandleUnavailableError",
    "QueryError",
    "ResultExpiredError",
    "DuplicateKeyViolationError",
    "RecordError",
    "CardinalityMismatchError",
    "FieldNotAllowedError",
    "MissingFieldsError",
    "UndefinedFieldError",
    "InvalidStateError",
]
