"""
Record normalizer.

Checks parsed upload rows against an ImportSchema and converts them into
typed NormalizedRecord objects. Columns the schema does not name are
dropped; required columns must be non-blank.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

import structlog

from exceptions import (
    MeasurementError,
    ParseError,
    ParseErrorReason,
    RecordValidationError,
    RecordValidationReason,
)
from models.catalog import RETAILER_PRODUCTS, SAMPLES, VENDOR_PRODUCTS
from models.imports import (
    FieldSpec,
    FieldTransform,
    ImportRow,
    ImportSchema,
    ImportTarget,
    NormalizedRecord,
)
from parsers.measurement_parser import parse_measurement
from utils.text_utils import to_capital_case, to_upper_key

logger = structlog.get_logger(__name__)


# ===================
# SCHEMAS
# ===================

RETAILER_PRODUCT_SCHEMA = ImportSchema(
    name="retailer_products",
    entity=RETAILER_PRODUCTS,
    key_column="sku",
    fields=(
        FieldSpec("sku", "sku", required=True, transform=FieldTransform.UPPERCASE),
        FieldSpec("title", "title", required=True),
        FieldSpec("itemNo", "item_no"),
    ),
)

RETAILER_PRODUCT_UPDATE_SCHEMA = ImportSchema(
    name="retailer_product_updates",
    entity=RETAILER_PRODUCTS,
    key_column="sku",
    fields=(
        FieldSpec("sku", "sku", required=True, transform=FieldTransform.UPPERCASE),
        FieldSpec("title", "title"),
        FieldSpec("itemNo", "item_no"),
    ),
)

VENDOR_PRODUCT_SCHEMA = ImportSchema(
    name="vendor_products",
    entity=VENDOR_PRODUCTS,
    key_column="itemNo",
    fields=(
        FieldSpec("itemNo", "item_no", required=True),
        FieldSpec("seriesName", "series_name"),
        FieldSpec("seriesAlias", "series_alias"),
        FieldSpec("color", "color"),
        FieldSpec("colorAlias", "color_alias"),
        FieldSpec("finish", "finish", transform=FieldTransform.CAPITAL_CASE),
        FieldSpec("cost", "list_price", transform=FieldTransform.DECIMAL),
        FieldSpec("sku", "sku", transform=FieldTransform.UPPERCASE),
        FieldSpec("title", "title"),
        FieldSpec("materialNo", "material_no"),
    ),
)

SAMPLE_SCHEMA = ImportSchema(
    name="samples",
    entity=SAMPLES,
    key_column="materialNo",
    fields=(
        FieldSpec("materialNo", "material_no", required=True),
        FieldSpec("seriesName", "series_name", required=True),
        FieldSpec("color", "color", required=True),
        FieldSpec("finish", "finish", transform=FieldTransform.CAPITAL_CASE),
        FieldSpec("seriesAlias", "series_alias"),
        FieldSpec("colorAlias", "color_alias"),
    ),
)

PRODUCT_SPEC_SCHEMA = ImportSchema(
    name="product_specs",
    entity=RETAILER_PRODUCTS,
    key_column="sku",
    fields=(
        FieldSpec("sku", "sku", required=True, transform=FieldTransform.UPPERCASE),
        FieldSpec("title", "title"),
        FieldSpec("description", "description"),
        FieldSpec("color", "color"),
        FieldSpec("size", "size"),
        FieldSpec("measurementPerCarton", "measurement_per_carton", transform=FieldTransform.MEASUREMENT),
        FieldSpec("weightPerCarton", "weight_per_carton", transform=FieldTransform.MEASUREMENT),
        FieldSpec("thickness", "thickness", transform=FieldTransform.MEASUREMENT),
        FieldSpec("listPrice", "list_price", transform=FieldTransform.DECIMAL),
    ),
)

SCHEMAS: dict[ImportTarget, ImportSchema] = {
    ImportTarget.RETAILER_PRODUCTS: RETAILER_PRODUCT_SCHEMA,
    ImportTarget.RETAILER_PRODUCT_UPDATES: RETAILER_PRODUCT_UPDATE_SCHEMA,
    ImportTarget.VENDOR_PRODUCTS: VENDOR_PRODUCT_SCHEMA,
    ImportTarget.SAMPLES: SAMPLE_SCHEMA,
    ImportTarget.PRODUCT_SPECS: PRODUCT_SPEC_SCHEMA,
}


# ===================
# NORMALIZATION
# ===================

def normalize_row(row: ImportRow, schema: ImportSchema, index: int = 0) -> NormalizedRecord:
    """
    Validate one row against a schema.

    Header names match the schema case-insensitively, ignoring spaces,
    underscores and dashes ("Item No" matches "itemNo").

    Args:
        row: Parsed upload row
        schema: Target schema
        index: Position of the row within the batch

    Returns:
        NormalizedRecord with only schema attributes

    Raises:
        ParseError: INVALID_HEADER if two headers match the same column
        RecordValidationError: MISSING_FIELD, INVALID_MEASUREMENT or INVALID_VALUE
    """
    columns = _column_lookup(row.keys())
    values: dict[str, Any] = {}

    for spec in schema.fields:
        header = columns.get(_normalize_column(spec.column))
        raw = row.get(header) if header is not None else None
        text = raw.strip() if raw is not None else ""

        if not text:
            if spec.required:
                raise RecordValidationError(
                    RecordValidationReason.MISSING_FIELD,
                    field=spec.column,
                    row=row.line,
                    value=raw
                )
            continue

        values[spec.attribute] = _transform(spec, text, row)

    return NormalizedRecord(
        entity=schema.entity,
        key_field=schema.key_attribute,
        key=str(values[schema.key_attribute]),
        values=values,
        index=index,
        line=row.line,
    )


def normalize_rows(rows: Iterable[ImportRow], schema: ImportSchema) -> list[NormalizedRecord]:
    """
    Normalize every row, stopping at the first invalid one.

    A batch is only built from fully valid input.
    """
    records = []
    for index, row in enumerate(rows):
        try:
            records.append(normalize_row(row, schema, index=index))
        except RecordValidationError as e:
            logger.warning(
                "row_validation_failed",
                schema=schema.name,
                row=row.line,
                field=e.field,
                reason=e.reason.value
            )
            raise

    logger.info("rows_normalized", schema=schema.name, count=len(records))
    return records


def _transform(spec: FieldSpec, text: str, row: ImportRow) -> Any:
    if spec.transform == FieldTransform.MEASUREMENT:
        try:
            return parse_measurement(text)
        except MeasurementError as e:
            raise RecordValidationError(
                RecordValidationReason.INVALID_MEASUREMENT,
                field=spec.column,
                row=row.line,
                value=text,
                cause=e
            ) from e

    if spec.transform == FieldTransform.DECIMAL:
        try:
            amount = Decimal(text.replace("$", "").replace(",", "").strip())
        except InvalidOperation:
            raise RecordValidationError(
                RecordValidationReason.INVALID_VALUE,
                field=spec.column,
                row=row.line,
                value=text
            )
        if not amount.is_finite():
            raise RecordValidationError(
                RecordValidationReason.INVALID_VALUE,
                field=spec.column,
                row=row.line,
                value=text
            )
        return amount

    if spec.transform == FieldTransform.UPPERCASE:
        return to_upper_key(text)

    if spec.transform == FieldTransform.CAPITAL_CASE:
        return to_capital_case(text)

    return text


def _normalize_column(name: str) -> str:
    return re.sub(r"[\s_\-]+", "", name).lower()


def _column_lookup(headers: Iterable[str]) -> dict[str, str]:
    """Map normalized names to headers; "sku" and "SKU" in one file collide."""
    columns: dict[str, str] = {}
    collisions: dict[str, list[str]] = {}
    for name in headers:
        key = _normalize_column(name)
        if key in columns:
            collisions.setdefault(key, [columns[key]]).append(name)
        else:
            columns[key] = name

    if collisions:
        raise ParseError(
            ParseErrorReason.INVALID_HEADER,
            "Header row has columns that differ only in case or spacing",
            details={"duplicates": list(collisions.values())}
        )
    return columns
