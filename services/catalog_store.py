"""
Catalog store collaborator.

The ingestion and search pipelines talk to persistence only through a
CatalogStore handle passed in by the caller:

    transaction()  unit of work; staged writes are submitted as one batch
    search()       full-text search of retailer products on one field

SupabaseCatalogStore is the production implementation. Batches go through
the apply_catalog_batch Postgres function (migrations/), which runs in a
single database transaction.
"""

from typing import Any, Callable, Optional, Protocol

import structlog
from supabase import Client

from exceptions import DatabaseError
from models.catalog import RETAILER_PRODUCTS, WriteOperation
from models.search import SearchField

logger = structlog.get_logger(__name__)


BatchSubmitter = Callable[[list[WriteOperation]], list[dict[str, Any]]]


class CatalogTransaction:
    """
    Unit of work for one import batch.

    Operations are staged with add() and submitted together by commit().
    Leaving the context without committing discards them; nothing reaches
    the store before commit().

    Usage:
        with store.transaction() as tx:
            tx.add(op)
            results = tx.commit()
    """

    def __init__(self, submit: BatchSubmitter):
        self._submit = submit
        self.operations: list[WriteOperation] = []
        self.results: Optional[list[dict[str, Any]]] = None
        self._closed = False

    def __enter__(self) -> "CatalogTransaction":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._closed:
            self.rollback()
        return False  # Don't suppress exceptions

    def add(self, operation: WriteOperation) -> int:
        """Stage an operation; returns its position in the batch."""
        if self._closed:
            raise RuntimeError("Transaction is already closed")
        self.operations.append(operation)
        return len(self.operations) - 1

    def commit(self) -> list[dict[str, Any]]:
        """
        Submit all staged operations atomically.

        Returns:
            One persisted row per operation, in staging order
        """
        if self._closed:
            raise RuntimeError("Transaction is already closed")
        self._closed = True

        if not self.operations:
            self.results = []
            return self.results

        results = self._submit(list(self.operations))
        if len(results) != len(self.operations):
            raise DatabaseError(
                "batch",
                f"expected {len(self.operations)} results, got {len(results)}"
            )

        self.results = results
        return results

    def rollback(self) -> None:
        """Discard staged operations without submitting them."""
        if self.operations:
            logger.info("transaction_discarded", operations=len(self.operations))
        self.operations = []
        self._closed = True


class CatalogStore(Protocol):
    """Persistence capabilities required by the pipelines."""

    def transaction(self) -> CatalogTransaction:
        ...

    def search(self, field: SearchField, engine_syntax: str, limit: int) -> list[dict[str, Any]]:
        ...


# Embeds for search results; !inner makes a nested filter restrict the parent rows
_SEARCH_SELECT = {
    SearchField.MATERIAL_NO: "*, vendor_products!inner(*, samples!inner(*))",
    SearchField.ITEM_NO: "*, vendor_products!inner(*, samples(*))",
    SearchField.SKU: "*, vendor_products(*, samples(*))",
    SearchField.TITLE: "*, vendor_products(*, samples(*))",
}


class SupabaseCatalogStore:
    """CatalogStore backed by Supabase (PostgREST)."""

    def __init__(self, client: Client, batch_function: str = "apply_catalog_batch"):
        self.db = client
        self.batch_function = batch_function

    def transaction(self) -> CatalogTransaction:
        return CatalogTransaction(self._submit_batch)

    def _submit_batch(self, operations: list[WriteOperation]) -> list[dict[str, Any]]:
        logger.info(
            "submitting_batch",
            function=self.batch_function,
            operations=len(operations)
        )

        result = self.db.rpc(
            self.batch_function,
            {"operations": [op.to_dict() for op in operations]}
        ).execute()

        rows = result.data or []

        logger.info("batch_committed", rows=len(rows))
        return rows

    def search(self, field: SearchField, engine_syntax: str, limit: int) -> list[dict[str, Any]]:
        """
        Full-text search of retailer products on one field.

        engine_syntax is passed to to_tsquery unchanged.
        """
        logger.debug("searching_field", field=field.value, query=engine_syntax)

        result = (
            self.db.table(RETAILER_PRODUCTS)
            .select(_SEARCH_SELECT[field])
            .text_search(field.column, engine_syntax)
            .order("sku")
            .limit(limit)
            .execute()
        )

        return result.data or []
