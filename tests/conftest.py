"""
Shared test fixtures.

Provides an in-memory CatalogStore with real transaction semantics
(unique natural keys, all-or-nothing batches) and a chainable mock of the
Supabase client for adapter tests.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import copy
import re
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

import pytest

from models.catalog import (
    RETAILER_PRODUCTS,
    SAMPLES,
    VENDOR_PRODUCTS,
    WriteMode,
    WriteOperation,
)
from models.search import SearchField
from services.catalog_store import CatalogTransaction


# ===================
# IN-MEMORY CATALOG STORE
# ===================

class IntegrityError(Exception):
    """Stand-in for a database constraint violation."""


class InMemoryCatalogStore:
    """
    CatalogStore holding tables as lists of dicts.

    Batches are applied to a copy of the tables and swapped in only when
    every operation succeeds.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {
            RETAILER_PRODUCTS: [],
            VENDOR_PRODUCTS: [],
            SAMPLES: [],
        }
        self.submitted_batches: list[list[WriteOperation]] = []
        self.search_calls: list[tuple[SearchField, str]] = []
        self.search_failures: dict[SearchField, Exception] = {}

    # ----- setup / read-back helpers -----

    def seed(self, table: str, **values) -> dict:
        return _insert(self.tables[table], values)

    def rows(self, table: str) -> list[dict]:
        return [dict(row) for row in self.tables[table]]

    def find(self, table: str, key_field: str, key_value: str) -> Optional[dict]:
        return _find(self.tables[table], key_field, key_value)

    # ----- CatalogStore -----

    def transaction(self) -> CatalogTransaction:
        return CatalogTransaction(self._apply_batch)

    def search(self, field: SearchField, engine_syntax: str, limit: int) -> list[dict[str, Any]]:
        self.search_calls.append((field, engine_syntax))
        if field in self.search_failures:
            raise self.search_failures[field]

        results = []
        for product in self.tables[RETAILER_PRODUCTS]:
            embedded = self._embed(product)
            text = _field_text(embedded, field)
            if text and _matches(text, engine_syntax):
                results.append(embedded)
        return results[:limit]

    # ----- internals -----

    def _apply_batch(self, operations: list[WriteOperation]) -> list[dict[str, Any]]:
        self.submitted_batches.append(list(operations))
        staged = copy.deepcopy(self.tables)
        results = [_apply_operation(staged, op) for op in operations]
        self.tables = staged
        return results

    def _embed(self, product: dict) -> dict:
        embedded = dict(product)
        vendor_product = None
        if product.get("vendor_product_id"):
            vendor_product = _find(self.tables[VENDOR_PRODUCTS], "id", product["vendor_product_id"])
        if vendor_product is not None:
            vendor_product = dict(vendor_product)
            sample = None
            if vendor_product.get("sample_id"):
                sample = _find(self.tables[SAMPLES], "id", vendor_product["sample_id"])
            vendor_product["samples"] = dict(sample) if sample else None
        embedded["vendor_products"] = vendor_product
        return embedded


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _find(table: list[dict], key_field: str, key_value: Any) -> Optional[dict]:
    for row in table:
        if row.get(key_field) == key_value:
            return row
    return None


def _insert(table: list[dict], values: dict) -> dict:
    row = {"id": str(uuid4()), "created_at": _now(), "updated_at": None, **values}
    table.append(row)
    return dict(row)


def _apply_operation(tables: dict[str, list[dict]], op: WriteOperation) -> dict:
    values = dict(op.values)

    for link in op.links:
        target_table = tables[link.table]
        target = _find(target_table, link.key_field, link.key_value)
        if target is None and link.create is not None:
            target = _insert(target_table, {link.key_field: link.key_value, **link.create})
        if target is None:
            raise IntegrityError(f"No {link.table} row with {link.key_field} = {link.key_value}")
        values[link.column] = target["id"]

    table = tables[op.table]
    existing = _find(table, op.key_field, op.key_value)

    if op.mode == WriteMode.CREATE:
        if existing is not None:
            raise IntegrityError(
                f'duplicate key value violates unique constraint "{op.table}_{op.key_field}_key"'
            )
        return _insert(table, op.row_values() | values)

    if op.mode == WriteMode.UPDATE:
        if existing is None:
            raise IntegrityError(f"No {op.table} row with {op.key_field} = {op.key_value}")
        existing.update(values, updated_at=_now())
        return dict(existing)

    if op.mode == WriteMode.CONNECT_OR_CREATE and existing is not None:
        existing.update({link.column: values[link.column] for link in op.links})
        return dict(existing)

    if existing is not None:
        existing.update(values, updated_at=_now())
        return dict(existing)

    return _insert(table, op.row_values() | values)


def _field_text(product: dict, field: SearchField) -> Optional[str]:
    vendor_product = product.get("vendor_products") or {}
    if field == SearchField.SKU:
        return product.get("sku")
    if field == SearchField.TITLE:
        return product.get("title")
    if field == SearchField.ITEM_NO:
        return vendor_product.get("item_no")
    sample = vendor_product.get("samples") or {}
    return sample.get("material_no")


def _matches(text: str, engine_syntax: str) -> bool:
    """Minimal to_tsquery: '|' separates alternatives, every word within one is required."""
    words = set(re.findall(r"\w+", text.lower()))
    for alternative in engine_syntax.split("|"):
        terms = re.findall(r"\w+", alternative.lower())
        if terms and all(term in words for term in terms):
            return True
    return False


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder that records chained calls."""

    def __init__(self, client: "MockSupabaseClient", data: list = None, error: Exception = None):
        self._client = client
        self._data = data or []
        self._error = error

    def _record(self, method, *args, **kwargs):
        self._client.calls.append((method, args, kwargs))
        return self

    def select(self, *args, **kwargs):
        return self._record("select", *args, **kwargs)

    def text_search(self, column, query, options=None):
        return self._record("text_search", column, query)

    def eq(self, column, value):
        return self._record("eq", column, value)

    def order(self, column, **kwargs):
        return self._record("order", column, **kwargs)

    def limit(self, count):
        return self._record("limit", count)

    def execute(self) -> MockSupabaseResponse:
        self._client.calls.append(("execute", (), {}))
        if self._error is not None:
            raise self._error
        return MockSupabaseResponse(data=self._data)


class MockSupabaseClient:
    """Mock Supabase client with configurable table and rpc responses."""

    def __init__(self):
        self._tables: dict[str, list] = {}
        self._rpc: dict[str, Any] = {}
        self.calls: list[tuple] = []

    def set_table_data(self, table_name: str, data: list):
        """Configure rows returned by queries on a table."""
        self._tables[table_name] = data

    def set_rpc_result(self, function: str, data: Any = None, error: Exception = None):
        """Configure the result (or error) of an rpc call."""
        self._rpc[function] = (data, error)

    def table(self, name: str) -> MockSupabaseQuery:
        self.calls.append(("table", (name,), {}))
        return MockSupabaseQuery(self, self._tables.get(name, []))

    def rpc(self, function: str, params: dict) -> MockSupabaseQuery:
        self.calls.append(("rpc", (function, params), {}))
        data, error = self._rpc.get(function, ([], None))
        return MockSupabaseQuery(self, data, error)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def catalog_store() -> InMemoryCatalogStore:
    """
    Empty in-memory catalog store.

    Usage:
        def test_something(catalog_store):
            catalog_store.seed("vendor_products", item_no="EM-100", vendor_id="v-1")
    """
    return InMemoryCatalogStore()


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """Mock Supabase client for adapter tests."""
    return MockSupabaseClient()


@pytest.fixture
def test_client(catalog_store):
    """
    FastAPI test client wired to the in-memory store.

    Usage:
        def test_endpoint(test_client, catalog_store):
            response = test_client.get("/api/search", params={"query": "blue"})
    """
    from fastapi.testclient import TestClient
    from main import app
    from routes.dependencies import get_catalog_store

    app.dependency_overrides[get_catalog_store] = lambda: catalog_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
