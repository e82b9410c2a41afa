"""
Catalog search service.

Runs one full-text query per searchable field and concatenates the
results in field order. Products matched on several fields are listed
once per matching field; callers that need unique rows dedupe by id.
"""

from typing import Optional, Sequence

import structlog

from config.settings import Settings, get_settings
from exceptions import SearchError
from models.search import SearchField, SearchQuery, SearchResult
from services.catalog_store import CatalogStore
from utils.search_query import sanitize_query

logger = structlog.get_logger(__name__)


class SearchService:
    """Multi-field product search."""

    def __init__(
        self,
        store: CatalogStore,
        fields: Optional[Sequence[SearchField]] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        if fields is None:
            fields = self.settings.search_fields
        self.fields = list(fields)

    def search_text(self, raw_query: Optional[str]) -> SearchResult:
        """Sanitize free text and search."""
        return self.search(sanitize_query(raw_query or ""))

    def search(self, query: SearchQuery) -> SearchResult:
        """
        Search every configured field with the same engine syntax.

        Returns:
            SearchResult; results is empty when nothing matched

        Raises:
            SearchError: If the store fails on any field
        """
        if query.is_blank:
            return SearchResult(queries=query, results=[], fields=self.fields)

        logger.info(
            "searching_catalog",
            query=query.engine_syntax,
            fields=[f.value for f in self.fields]
        )

        results = []
        for field in self.fields:
            try:
                matches = self.store.search(
                    field,
                    query.engine_syntax,
                    self.settings.search_result_limit
                )
            except Exception as e:
                logger.error(
                    "search_failed",
                    field=field.value,
                    query=query.engine_syntax,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise SearchError(cause=e, field=field.value) from e

            logger.debug("search_field_matched", field=field.value, count=len(matches))
            results.extend(matches)

        logger.info("search_complete", query=query.engine_syntax, count=len(results))

        return SearchResult(queries=query, results=results, fields=self.fields)
