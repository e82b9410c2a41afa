"""
Catalog import service.

Runs an uploaded file through the ingestion pipeline:

    parse_tabular_file -> normalize_rows -> TransactionalUpserter

Each ImportTarget has its own schema and write plan. Writes are
all-or-nothing per upload.
"""

from decimal import Decimal
from typing import Any, Optional

import structlog

from config.settings import Settings, get_settings
from exceptions import (
    ImportTooLargeError,
    RecordValidationError,
    RecordValidationReason,
    ValidationError,
)
from models.catalog import (
    RETAILER_PRODUCTS,
    SAMPLES,
    VENDOR_PRODUCTS,
    Link,
    WriteMode,
    WriteOperation,
)
from models.imports import ImportResult, ImportTarget, NormalizedRecord
from parsers.measurement_parser import calculate_price_per_carton, split_size_cell
from parsers.tabular_parser import parse_tabular_file
from services.catalog_store import CatalogStore
from services.record_normalizer import SCHEMAS, normalize_rows
from services.upserter import OperationBuilder, TransactionalUpserter

logger = structlog.get_logger(__name__)


_SAMPLE_FIELDS = ("series_name", "series_alias", "color", "color_alias", "finish")


class ImportService:
    """
    Catalog upload business logic.

    The store handle is supplied by the caller and is used for the
    duration of one request.
    """

    def __init__(self, store: CatalogStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()
        self.upserter = TransactionalUpserter(store)

    def import_file(
        self,
        target: ImportTarget,
        content: bytes,
        content_type: Optional[str] = None,
        vendor_id: Optional[str] = None,
    ) -> ImportResult:
        """
        Parse, validate and write one uploaded file.

        Args:
            target: Which file layout / entity the upload holds
            content: Raw file bytes
            content_type: Declared MIME type
            vendor_id: Owning vendor, required for vendor product uploads

        Returns:
            ImportResult with one outcome per data row

        Raises:
            ImportTooLargeError: File or row count over the configured limits
            ParseError: File is not a well-formed table
            RecordValidationError: A row violates the target schema
            BatchError: The store rejected the batch
        """
        logger.info(
            "import_started",
            target=target.value,
            size=len(content),
            vendor_id=vendor_id
        )

        if len(content) > self.settings.import_max_bytes:
            raise ImportTooLargeError("size", len(content), self.settings.import_max_bytes)

        builder = self._builder_for(target, vendor_id)

        rows = parse_tabular_file(content, content_type)
        if len(rows) > self.settings.import_max_rows:
            raise ImportTooLargeError("row", len(rows), self.settings.import_max_rows)

        records = normalize_rows(rows, SCHEMAS[target])

        if builder is None:
            preview = [self._spec_preview(record) for record in records]
            logger.info("import_previewed", target=target.value, rows=len(preview))
            return ImportResult(target=target, row_count=len(rows), preview=preview)

        outcomes = self.upserter.apply(records, builder)

        logger.info(
            "import_complete",
            target=target.value,
            rows=len(rows),
            written=len(outcomes)
        )

        return ImportResult(
            target=target,
            row_count=len(rows),
            outcomes=outcomes,
            committed=bool(outcomes)
        )

    # ===================
    # WRITE PLANS
    # ===================

    def _builder_for(self, target: ImportTarget, vendor_id: Optional[str]) -> Optional[OperationBuilder]:
        if target == ImportTarget.RETAILER_PRODUCTS:
            return build_retailer_product_create
        if target == ImportTarget.RETAILER_PRODUCT_UPDATES:
            return build_retailer_product_update
        if target == ImportTarget.SAMPLES:
            return build_sample_create
        if target == ImportTarget.VENDOR_PRODUCTS:
            if not vendor_id:
                raise ValidationError(
                    "vendor_id is required for vendor product uploads",
                    code="VENDOR_ID_REQUIRED"
                )
            return lambda record: build_vendor_product_upsert(record, vendor_id)
        return None

    # ===================
    # PREVIEW
    # ===================

    def _spec_preview(self, record: NormalizedRecord) -> dict[str, Any]:
        """Derived carton specs and selling price for one product row."""
        measurement = record.get("measurement_per_carton")
        weight = record.get("weight_per_carton")
        thickness = record.get("thickness")
        list_price = record.get("list_price")

        dimensions = None
        if record.get("size"):
            try:
                dimensions = split_size_cell(record.get("size")).model_dump()
            except ValueError:
                raise RecordValidationError(
                    RecordValidationReason.INVALID_VALUE,
                    field="size",
                    row=record.line,
                    value=record.get("size")
                )

        price = None
        if list_price is not None and measurement is not None:
            price = calculate_price_per_carton(
                float(list_price),
                self.settings.pricing_factory_discount,
                self.settings.pricing_margin,
                self.settings.pricing_factor,
                measurement.value,
            )

        return {
            "sku": record.key,
            "title": record.get("title"),
            "description": record.get("description"),
            "color": record.get("color"),
            "dimensions": dimensions,
            "thickness": thickness.model_dump() if thickness else None,
            "measurement_per_carton": measurement.model_dump() if measurement else None,
            "weight_per_carton": weight.value if weight else None,
            "price": price,
        }


# ===================
# OPERATION BUILDERS
# ===================

def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def build_retailer_product_create(record: NormalizedRecord) -> list[WriteOperation]:
    """New retailer product, linked to its vendor product when itemNo is given."""
    links = []
    if record.get("item_no"):
        links.append(Link("vendor_product_id", VENDOR_PRODUCTS, "item_no", record.get("item_no")))

    return [WriteOperation(
        table=RETAILER_PRODUCTS,
        mode=WriteMode.CREATE,
        key_field="sku",
        key_value=record.key,
        values={"title": record.get("title")},
        links=links,
    )]


def build_retailer_product_update(record: NormalizedRecord) -> list[WriteOperation]:
    """Update title and/or vendor link of an existing retailer product."""
    values = {}
    if record.get("title"):
        values["title"] = record.get("title")

    links = []
    if record.get("item_no"):
        links.append(Link("vendor_product_id", VENDOR_PRODUCTS, "item_no", record.get("item_no")))

    return [WriteOperation(
        table=RETAILER_PRODUCTS,
        mode=WriteMode.UPDATE,
        key_field="sku",
        key_value=record.key,
        values=values,
        links=links,
    )]


def build_sample_create(record: NormalizedRecord) -> list[WriteOperation]:
    """New material sample."""
    values = {name: record.get(name) for name in _SAMPLE_FIELDS if record.get(name) is not None}
    return [WriteOperation(
        table=SAMPLES,
        mode=WriteMode.CREATE,
        key_field="material_no",
        key_value=record.key,
        values=values,
    )]


def build_vendor_product_upsert(record: NormalizedRecord, vendor_id: str) -> list[WriteOperation]:
    """
    Vendor product keyed by item number, plus its linked entities.

    - sample (materialNo) is connected, or created from the row's series/color
    - retailer product (sku) is connected, or created with the row's title
    """
    values: dict[str, Any] = {"vendor_id": vendor_id}
    for name in ("series_name", "color", "finish", "list_price"):
        if record.get(name) is not None:
            values[name] = _json_value(record.get(name))

    links = []
    if record.get("material_no"):
        sample_values = {
            name: record.get(name) for name in _SAMPLE_FIELDS if record.get(name) is not None
        }
        links.append(Link(
            "sample_id",
            SAMPLES,
            "material_no",
            record.get("material_no"),
            create=sample_values,
        ))

    operations = [WriteOperation(
        table=VENDOR_PRODUCTS,
        mode=WriteMode.UPSERT,
        key_field="item_no",
        key_value=record.key,
        values=values,
        links=links,
    )]

    if record.get("sku"):
        create_values = {"title": record.get("title")} if record.get("title") else {}
        operations.append(WriteOperation(
            table=RETAILER_PRODUCTS,
            mode=WriteMode.CONNECT_OR_CREATE,
            key_field="sku",
            key_value=record.get("sku"),
            values=create_values,
            links=[Link("vendor_product_id", VENDOR_PRODUCTS, "item_no", record.key)],
        ))

    return operations
