"""
Unit tests for the Supabase-backed catalog store.

Run: pytest tests/unit/test_catalog_store.py -v
"""

import pytest

from services.catalog_store import SupabaseCatalogStore
from services.import_service import build_sample_create
from services.record_normalizer import SAMPLE_SCHEMA, normalize_rows
from services.upserter import TransactionalUpserter
from models.catalog import Link, SAMPLES, VENDOR_PRODUCTS, WriteMode, WriteOperation
from models.imports import ImportRow
from models.search import SearchField
from exceptions import BatchError, DatabaseError

from tests.factories import SampleRowFactory


class TestSubmitBatch:
    """Tests for batch submission through the rpc function."""

    def test_commit_calls_batch_function_once(self, mock_supabase):
        mock_supabase.set_rpc_result("apply_catalog_batch", data=[{"id": "a"}, {"id": "b"}])
        store = SupabaseCatalogStore(mock_supabase)

        with store.transaction() as tx:
            tx.add(WriteOperation(SAMPLES, WriteMode.CREATE, "material_no", "MAT-1", {"color": "Blue"}))
            tx.add(WriteOperation(
                VENDOR_PRODUCTS,
                WriteMode.UPSERT,
                "item_no",
                "V-1",
                {"vendor_id": "vendor-1"},
                [Link("sample_id", SAMPLES, "material_no", "MAT-1")],
            ))
            results = tx.commit()

        rpc_calls = [args for name, args, _ in mock_supabase.calls if name == "rpc"]
        assert len(rpc_calls) == 1

        function, params = rpc_calls[0]
        assert function == "apply_catalog_batch"
        assert params["operations"][0] == {
            "table": "samples",
            "mode": "create",
            "key_field": "material_no",
            "key_value": "MAT-1",
            "values": {"color": "Blue"},
            "links": [],
        }
        assert params["operations"][1]["links"] == [{
            "column": "sample_id",
            "table": "samples",
            "key_field": "material_no",
            "key_value": "MAT-1",
        }]
        assert results == [{"id": "a"}, {"id": "b"}]

    def test_custom_batch_function(self, mock_supabase):
        mock_supabase.set_rpc_result("import_batch_v2", data=[{"id": "a"}])
        store = SupabaseCatalogStore(mock_supabase, batch_function="import_batch_v2")

        with store.transaction() as tx:
            tx.add(WriteOperation(SAMPLES, WriteMode.CREATE, "material_no", "MAT-1"))
            tx.commit()

        assert ("rpc", ("import_batch_v2", {"operations": [tx.operations[0].to_dict()]}), {}) in mock_supabase.calls

    def test_discarded_transaction_makes_no_calls(self, mock_supabase):
        store = SupabaseCatalogStore(mock_supabase)

        with store.transaction() as tx:
            tx.add(WriteOperation(SAMPLES, WriteMode.CREATE, "material_no", "MAT-1"))

        assert mock_supabase.calls == []

    def test_short_result_is_database_error(self, mock_supabase):
        mock_supabase.set_rpc_result("apply_catalog_batch", data=[])
        store = SupabaseCatalogStore(mock_supabase)

        with pytest.raises(DatabaseError):
            with store.transaction() as tx:
                tx.add(WriteOperation(SAMPLES, WriteMode.CREATE, "material_no", "MAT-1"))
                tx.commit()

    def test_rpc_failure_becomes_batch_error(self, mock_supabase):
        mock_supabase.set_rpc_result(
            "apply_catalog_batch",
            error=Exception('duplicate key value violates unique constraint "samples_material_no_key"')
        )
        records = normalize_rows(
            [ImportRow(line=2, cells=SampleRowFactory.create())],
            SAMPLE_SCHEMA
        )

        with pytest.raises(BatchError) as exc_info:
            TransactionalUpserter(SupabaseCatalogStore(mock_supabase)).apply(records, build_sample_create)

        assert exc_info.value.row_count == 1
        assert "samples_material_no_key" in exc_info.value.details["cause"]


class TestSearch:
    """Tests for SupabaseCatalogStore.search()"""

    def test_query_chain(self, mock_supabase):
        mock_supabase.set_table_data("retailer_products", [{"sku": "BLUE-1"}])
        store = SupabaseCatalogStore(mock_supabase)

        results = store.search(SearchField.MATERIAL_NO, "blue|green", 50)

        assert results == [{"sku": "BLUE-1"}]
        assert mock_supabase.calls == [
            ("table", ("retailer_products",), {}),
            ("select", ("*, vendor_products!inner(*, samples!inner(*))",), {}),
            ("text_search", ("vendor_products.samples.material_no", "blue|green"), {}),
            ("order", ("sku",), {}),
            ("limit", (50,), {}),
            ("execute", (), {}),
        ]

    @pytest.mark.parametrize("field,column", [
        (SearchField.SKU, "sku"),
        (SearchField.ITEM_NO, "vendor_products.item_no"),
        (SearchField.TITLE, "title"),
    ])
    def test_field_columns(self, mock_supabase, field, column):
        SupabaseCatalogStore(mock_supabase).search(field, "ocean&blue", 10)

        text_search = [args for name, args, _ in mock_supabase.calls if name == "text_search"]
        assert text_search == [(column, "ocean&blue")]

    def test_no_rows(self, mock_supabase):
        assert SupabaseCatalogStore(mock_supabase).search(SearchField.SKU, "none", 10) == []
