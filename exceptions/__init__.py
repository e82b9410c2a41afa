"""
Custom exceptions module.

Error codes double as the reason names callers match on.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # File parser
    ParseError,
    ParseErrorReason,

    # Measurements
    MeasurementError,
    MeasurementErrorReason,

    # Row validation
    RecordValidationError,
    RecordValidationReason,
    ImportTooLargeError,
    UnknownImportTargetError,

    # Batch / search
    BatchError,
    SearchError,
    SearchErrorReason,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # File parser
    "ParseError",
    "ParseErrorReason",

    # Measurements
    "MeasurementError",
    "MeasurementErrorReason",

    # Row validation
    "RecordValidationError",
    "RecordValidationReason",
    "ImportTooLargeError",
    "UnknownImportTargetError",

    # Batch / search
    "BatchError",
    "SearchError",
    "SearchErrorReason",
]
