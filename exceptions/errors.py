"""
Custom exception classes for the application.

Every error raised by the ingestion and search pipelines is an AppError,
so routes can render it with to_dict() and the right status code.
"""

from typing import Optional, Any
from datetime import datetime, timezone
from enum import Enum


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "MALFORMED_ROW")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# FILE PARSER ERRORS
# ===================

class ParseErrorReason(str, Enum):
    """Why an uploaded file could not be turned into rows."""
    AMBIGUOUS_DELIMITER = "AMBIGUOUS_DELIMITER"
    MALFORMED_ROW = "MALFORMED_ROW"
    EMPTY_FILE = "EMPTY_FILE"
    INVALID_HEADER = "INVALID_HEADER"
    UNREADABLE_FILE = "UNREADABLE_FILE"


class ParseError(ValidationError):
    """Uploaded file is not a well-formed table."""

    def __init__(
        self,
        reason: ParseErrorReason,
        message: str,
        line: Optional[int] = None,
        details: Optional[dict] = None
    ):
        self.reason = reason
        self.line = line
        extra = {"line": line} if line is not None else {}
        super().__init__(
            code=reason.value,
            message=message,
            details={**extra, **(details or {})}
        )


# ===================
# MEASUREMENT ERRORS
# ===================

class MeasurementErrorReason(str, Enum):
    """Why a measurement string could not be parsed."""
    NO_NUMERIC_VALUE = "NO_NUMERIC_VALUE"
    NO_UNIT_CODE = "NO_UNIT_CODE"
    UNKNOWN_UNIT = "UNKNOWN_UNIT"


class MeasurementError(ValidationError):
    """Measurement string is unparseable or uses an unsupported unit."""

    def __init__(
        self,
        reason: MeasurementErrorReason,
        raw: str,
        unit_code: Optional[str] = None
    ):
        self.reason = reason
        self.raw = raw
        self.unit_code = unit_code

        if reason == MeasurementErrorReason.UNKNOWN_UNIT:
            message = f"Unsupported unit of measure provided: {unit_code}"
        elif reason == MeasurementErrorReason.NO_UNIT_CODE:
            message = "Unable to parse unit of measure."
        else:
            message = "Unable to parse measurement value."

        details = {"raw": raw}
        if unit_code is not None:
            details["unit_code"] = unit_code

        super().__init__(
            code=reason.value,
            message=message,
            details=details
        )


# ===================
# ROW VALIDATION ERRORS
# ===================

class RecordValidationReason(str, Enum):
    """Why a parsed row does not satisfy its import schema."""
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_MEASUREMENT = "INVALID_MEASUREMENT"
    INVALID_VALUE = "INVALID_VALUE"


class RecordValidationError(ValidationError):
    """A single import row violates the target schema."""

    def __init__(
        self,
        reason: RecordValidationReason,
        field: str,
        row: Optional[int] = None,
        value: Optional[str] = None,
        cause: Optional[AppError] = None
    ):
        self.reason = reason
        self.field = field
        self.row = row
        self.value = value
        self.cause = cause

        if reason == RecordValidationReason.MISSING_FIELD:
            message = f"Missing required field: {field}"
        elif reason == RecordValidationReason.INVALID_MEASUREMENT:
            message = f"Invalid measurement in {field}: {cause.message if cause else value}"
        else:
            message = f"Invalid value in {field}: {value}"

        details: dict[str, Any] = {"field": field, "row": row, "value": value}
        if cause is not None:
            details["cause"] = {"code": cause.code, "message": cause.message}

        super().__init__(
            code=reason.value,
            message=message,
            details=details
        )


class ImportTooLargeError(AppError):
    """Upload exceeds configured size limits (413)."""

    def __init__(self, limit: str, actual: int, maximum: int):
        super().__init__(
            code="IMPORT_TOO_LARGE",
            message=f"Upload exceeds the {limit} limit ({actual} > {maximum})",
            status_code=413,
            details={"limit": limit, "actual": actual, "maximum": maximum}
        )


class UnknownImportTargetError(ValidationError):
    """Requested import target does not exist."""

    def __init__(self, target: str, valid: list[str]):
        super().__init__(
            code="UNKNOWN_IMPORT_TARGET",
            message=f"Unknown import target: {target}",
            details={"provided": target, "valid": valid}
        )


# ===================
# BATCH / SEARCH ERRORS
# ===================

class BatchError(AppError):
    """
    Atomic import batch was rejected by the store (409).

    Nothing from the batch was persisted.
    """

    def __init__(
        self,
        row_count: int,
        cause: Exception,
        table: Optional[str] = None
    ):
        self.row_count = row_count
        self.cause = cause
        details: dict[str, Any] = {
            "row_count": row_count,
            "cause": str(cause),
            "cause_type": type(cause).__name__,
        }
        if table:
            details["table"] = table
        super().__init__(
            code="BATCH_FAILED",
            message=f"Import of {row_count} rows was rolled back",
            status_code=409,
            details=details
        )


class SearchErrorReason(str, Enum):
    """Why a search could not be completed."""
    BACKEND_FAILURE = "BACKEND_FAILURE"


class SearchError(ExternalServiceError):
    """Full-text search backend failed (503)."""

    def __init__(
        self,
        cause: Exception,
        field: Optional[str] = None,
        reason: SearchErrorReason = SearchErrorReason.BACKEND_FAILURE
    ):
        self.reason = reason
        self.cause = cause
        self.field = field
        super().__init__(
            service="search",
            message=f"Search failed: {cause}",
            details={"reason": reason.value, "field": field}
        )
