"""
Business logic services.

Each service receives its CatalogStore from the caller.
"""

from services.catalog_store import CatalogStore, CatalogTransaction, SupabaseCatalogStore
from services.record_normalizer import normalize_row, normalize_rows, SCHEMAS
from services.upserter import TransactionalUpserter
from services.import_service import ImportService
from services.search_service import SearchService

__all__ = [
    "CatalogStore",
    "CatalogTransaction",
    "SupabaseCatalogStore",
    "normalize_row",
    "normalize_rows",
    "SCHEMAS",
    "TransactionalUpserter",
    "ImportService",
    "SearchService",
]
