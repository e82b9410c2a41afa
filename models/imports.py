"""
Import pipeline records and schemas.

Rows flow through three shapes:
    ImportRow         raw header -> text mapping from the uploaded file
    NormalizedRecord  schema-checked, typed values for one target entity
    UpsertOutcome     persisted entity for that record after commit
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import Field

from models.base import BaseSchema


@dataclass
class ImportRow:
    """One data line of an uploaded file, keyed by header name."""
    line: int
    cells: dict[str, str] = field(default_factory=dict)

    def get(self, column: str, default: Optional[str] = None) -> Optional[str]:
        return self.cells.get(column, default)

    def __getitem__(self, column: str) -> str:
        return self.cells[column]

    def __contains__(self, column: object) -> bool:
        return column in self.cells

    def keys(self):
        return self.cells.keys()


class FieldTransform(str, Enum):
    """How a raw cell is converted into a record value."""
    IDENTITY = "IDENTITY"
    MEASUREMENT = "MEASUREMENT"
    UPPERCASE = "UPPERCASE"
    CAPITAL_CASE = "CAPITAL_CASE"
    DECIMAL = "DECIMAL"


@dataclass(frozen=True)
class FieldSpec:
    """A column accepted by an import schema."""
    column: str
    attribute: str
    required: bool = False
    transform: FieldTransform = FieldTransform.IDENTITY


@dataclass(frozen=True)
class ImportSchema:
    """
    Columns accepted for one import target.

    key_column names the natural key (SKU, item number, material number).
    Columns not listed are dropped during normalization.
    """
    name: str
    entity: str
    key_column: str
    fields: tuple[FieldSpec, ...]

    @property
    def key_attribute(self) -> str:
        for spec in self.fields:
            if spec.column == self.key_column:
                return spec.attribute
        raise KeyError(self.key_column)


@dataclass
class NormalizedRecord:
    """Typed, validated values for one row of one target entity."""
    entity: str
    key_field: str
    key: str
    values: dict[str, Any]
    index: int = 0
    line: Optional[int] = None

    def get(self, attribute: str, default: Any = None) -> Any:
        return self.values.get(attribute, default)


@dataclass
class UpsertOutcome:
    """Persisted entity for records[index], keyed by its natural key."""
    index: int
    key: str
    entity: dict[str, Any]

    def to_dict(self) -> dict:
        return {"index": self.index, "key": self.key, "entity": self.entity}


class ImportTarget(str, Enum):
    """Upload endpoints, one per supported file layout."""
    RETAILER_PRODUCTS = "retailer-products"
    RETAILER_PRODUCT_UPDATES = "retailer-product-updates"
    VENDOR_PRODUCTS = "vendor-products"
    SAMPLES = "samples"
    PRODUCT_SPECS = "product-specs"


@dataclass
class ImportResult:
    """Result of one upload."""
    target: ImportTarget
    row_count: int
    outcomes: list[UpsertOutcome] = field(default_factory=list)
    preview: list[dict[str, Any]] = field(default_factory=list)
    committed: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "target": self.target.value,
            "row_count": self.row_count,
            "committed": self.committed,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "preview": self.preview,
        }


class ImportResponse(BaseSchema):
    """Upload response body."""

    target: ImportTarget
    row_count: int = Field(..., ge=0, description="Data rows read from the file")
    committed: bool = Field(..., description="Whether the batch was written")
    outcomes: list[dict[str, Any]] = Field(default_factory=list)
    preview: list[dict[str, Any]] = Field(default_factory=list)
