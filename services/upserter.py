"""
Transactional upserter.

Applies a batch of normalized records as one all-or-nothing write.
Every record's operations are built and staged before anything is
submitted; a failure while building discards the batch untouched.

Duplicate natural keys within a batch are passed through as-is; the
store's uniqueness constraints decide (a repeated create rejects the
whole batch).
"""

from typing import Callable, Iterable

import structlog

from exceptions import BatchError
from models.catalog import WriteOperation
from models.imports import NormalizedRecord, UpsertOutcome
from services.catalog_store import CatalogStore

logger = structlog.get_logger(__name__)


# Builds the writes for one record; the first operation is the record's own entity
OperationBuilder = Callable[[NormalizedRecord], list[WriteOperation]]


class TransactionalUpserter:
    """Stage-then-commit writer for import batches."""

    def __init__(self, store: CatalogStore):
        self.store = store

    def apply(
        self,
        records: Iterable[NormalizedRecord],
        build_operations: OperationBuilder,
    ) -> list[UpsertOutcome]:
        """
        Write all records in one transaction.

        Args:
            records: Normalized records, in upload order
            build_operations: Maps a record to its write operations

        Returns:
            outcomes[i] holds the persisted entity for records[i]

        Raises:
            BatchError: If the store rejected the batch (nothing persisted)
        """
        records = list(records)
        if not records:
            return []

        logger.info("applying_batch", records=len(records))

        with self.store.transaction() as tx:
            primary_positions = []
            for record in records:
                operations = build_operations(record)
                if not operations:
                    raise ValueError(f"No write operations for record {record.key}")
                positions = [tx.add(op) for op in operations]
                primary_positions.append(positions[0])

            try:
                results = tx.commit()
            except Exception as e:
                logger.error(
                    "batch_failed",
                    records=len(records),
                    operations=len(tx.operations),
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise BatchError(
                    row_count=len(records),
                    cause=e,
                    table=records[0].entity
                ) from e

        outcomes = [
            UpsertOutcome(index=i, key=record.key, entity=results[position])
            for i, (record, position) in enumerate(zip(records, primary_positions))
        ]

        logger.info("batch_applied", records=len(records), operations=len(results))
        return outcomes
