"""
Test data factories.

Build upload rows (header -> cell text) for each import target and turn
them into CSV or .xlsx bytes.
"""

from io import BytesIO
from typing import Optional

import pandas as pd


class RetailerProductRowFactory:
    """
    Factory for retailer product upload rows.

    Usage:
        row = RetailerProductRowFactory.create()
        row = RetailerProductRowFactory.create(sku="EM-12", item_no="V-100")
        rows = RetailerProductRowFactory.create_batch(3)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        sku: Optional[str] = None,
        title: Optional[str] = None,
        item_no: Optional[str] = None,
    ) -> dict:
        n = cls._next_counter()
        row = {
            "sku": sku or f"SKU-{n:04d}",
            "title": title or f"Porcelain Tile {n}",
        }
        if item_no is not None:
            row["itemNo"] = item_no
        return row

    @classmethod
    def create_batch(cls, count: int, **kwargs) -> list[dict]:
        return [cls.create(**kwargs) for _ in range(count)]


class VendorProductRowFactory:
    """
    Factory for vendor price list rows.

    Usage:
        row = VendorProductRowFactory.create(material_no="MAT-1", sku="EM-1")
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        item_no: Optional[str] = None,
        series_name: str = "Oceanside",
        color: str = "Blue",
        finish: str = "matte",
        cost: str = "3.25",
        material_no: Optional[str] = None,
        sku: Optional[str] = None,
        title: Optional[str] = None,
    ) -> dict:
        n = cls._next_counter()
        row = {
            "itemNo": item_no or f"V-{n:04d}",
            "seriesName": series_name,
            "color": color,
            "finish": finish,
            "cost": cost,
        }
        if material_no is not None:
            row["materialNo"] = material_no
        if sku is not None:
            row["sku"] = sku
        if title is not None:
            row["title"] = title
        return row


class SampleRowFactory:
    """Factory for sample (material swatch) rows."""

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        material_no: Optional[str] = None,
        series_name: str = "Oceanside",
        color: str = "Blue",
        finish: str = "gloss",
    ) -> dict:
        n = cls._next_counter()
        return {
            "materialNo": material_no or f"MAT-{n:04d}",
            "seriesName": series_name,
            "color": color,
            "finish": finish,
        }

    @classmethod
    def create_batch(cls, count: int, **kwargs) -> list[dict]:
        return [cls.create(**kwargs) for _ in range(count)]


# ===================
# FILE BUILDERS
# ===================

def to_csv(rows: list[dict], delimiter: str = ",") -> bytes:
    """Rows sharing the first row's columns, as delimited UTF-8 bytes."""
    header = list(rows[0].keys())
    lines = [delimiter.join(header)]
    for row in rows:
        lines.append(delimiter.join(row.get(column, "") for column in header))
    return ("\n".join(lines) + "\n").encode("utf-8")


def to_xlsx(rows: list[list[str]]) -> bytes:
    """Header plus data rows as a single-sheet workbook."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, index=False, header=False)
    return output.getvalue()
