"""
Catalog write operations.

An import batch is a list of WriteOperation objects that the catalog
store applies in one transaction. Foreign keys are expressed as Link
objects holding the target's natural key; the store resolves them to ids
at write time.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


RETAILER_PRODUCTS = "retailer_products"
VENDOR_PRODUCTS = "vendor_products"
SAMPLES = "samples"


class WriteMode(str, Enum):
    """How a write treats an existing row with the same natural key."""
    CREATE = "create"                        # fails if the key exists
    UPSERT = "upsert"                        # insert, else update values
    UPDATE = "update"                        # fails if the key is absent
    CONNECT_OR_CREATE = "connect_or_create"  # insert if absent, else only relink


@dataclass(frozen=True)
class Link:
    """
    Foreign key to another row, addressed by natural key.

    With create values the target is inserted when absent
    (connect-or-create); without them it must already exist.
    """
    column: str
    table: str
    key_field: str
    key_value: str
    create: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict:
        payload = {
            "column": self.column,
            "table": self.table,
            "key_field": self.key_field,
            "key_value": self.key_value,
        }
        if self.create is not None:
            payload["create"] = self.create
        return payload


@dataclass
class WriteOperation:
    """A single row write inside an import batch."""
    table: str
    mode: WriteMode
    key_field: str
    key_value: str
    values: dict[str, Any] = field(default_factory=dict)
    links: list[Link] = field(default_factory=list)

    def row_values(self) -> dict[str, Any]:
        """Values including the natural key."""
        return {self.key_field: self.key_value, **self.values}

    def to_dict(self) -> dict:
        """Payload shape accepted by the apply_catalog_batch function."""
        return {
            "table": self.table,
            "mode": self.mode.value,
            "key_field": self.key_field,
            "key_value": self.key_value,
            "values": self.values,
            "links": [link.to_dict() for link in self.links],
        }
