"""
Pydantic models and record types for the import and search pipelines.
"""

from models.base import BaseSchema, FrozenSchema
from models.measurement import UnitOfMeasure, Measurement, Dimensions
from models.imports import (
    ImportRow,
    FieldTransform,
    FieldSpec,
    ImportSchema,
    NormalizedRecord,
    UpsertOutcome,
    ImportTarget,
    ImportResult,
    ImportResponse,
)
from models.catalog import (
    RETAILER_PRODUCTS,
    VENDOR_PRODUCTS,
    SAMPLES,
    WriteMode,
    Link,
    WriteOperation,
)
from models.search import SearchField, SearchQuery, SearchResult

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",

    # Measurements
    "UnitOfMeasure",
    "Measurement",
    "Dimensions",

    # Imports
    "ImportRow",
    "FieldTransform",
    "FieldSpec",
    "ImportSchema",
    "NormalizedRecord",
    "UpsertOutcome",
    "ImportTarget",
    "ImportResult",
    "ImportResponse",

    # Catalog writes
    "RETAILER_PRODUCTS",
    "VENDOR_PRODUCTS",
    "SAMPLES",
    "WriteMode",
    "Link",
    "WriteOperation",

    # Search
    "SearchField",
    "SearchQuery",
    "SearchResult",
]
