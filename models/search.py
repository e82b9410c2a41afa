"""
Search schemas.
"""

from enum import Enum
from typing import Any

from pydantic import Field

from models.base import BaseSchema, FrozenSchema


class SearchField(str, Enum):
    """Searchable catalog fields. Every search returns retailer products."""
    MATERIAL_NO = "material_no"
    SKU = "sku"
    ITEM_NO = "item_no"
    TITLE = "title"

    @property
    def column(self) -> str:
        """Column path relative to retailer_products."""
        return _FIELD_COLUMNS[self]


_FIELD_COLUMNS = {
    SearchField.MATERIAL_NO: "vendor_products.samples.material_no",
    SearchField.SKU: "sku",
    SearchField.ITEM_NO: "vendor_products.item_no",
    SearchField.TITLE: "title",
}


class SearchQuery(FrozenSchema):
    """The three forms of one user search string."""

    original_text: str = Field(..., description="Text as typed")
    normalized_text: str = Field(..., description="Whitespace and comma spacing cleaned up")
    engine_syntax: str = Field(..., description="to_tsquery form: '|' = OR, '&' = AND")

    @property
    def is_blank(self) -> bool:
        return not self.engine_syntax


class SearchResult(BaseSchema):
    """
    Search response.

    Results are concatenated per field in search order. A product matched
    by two fields is listed twice.
    """

    queries: SearchQuery
    results: list[dict[str, Any]] = Field(default_factory=list)
    fields: list[SearchField] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.results) == 0
