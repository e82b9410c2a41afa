"""
Request-scoped service wiring.

Routes receive the catalog store and services through FastAPI
dependencies; tests swap them with app.dependency_overrides.
"""

from fastapi import Depends

from config import get_settings, get_supabase_client
from services.catalog_store import CatalogStore, SupabaseCatalogStore
from services.import_service import ImportService
from services.search_service import SearchService


def get_catalog_store() -> CatalogStore:
    """Catalog store around the shared Supabase client."""
    settings = get_settings()
    return SupabaseCatalogStore(get_supabase_client(), batch_function=settings.batch_function)


def get_import_service(store: CatalogStore = Depends(get_catalog_store)) -> ImportService:
    return ImportService(store)


def get_search_service(store: CatalogStore = Depends(get_catalog_store)) -> SearchService:
    return SearchService(store)
