"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None, table: "MockSupabaseTable" = None):
        self._data = data or []
        self._count = count
        self._table = table

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add ids and timestamps
        if isinstance(data, dict):
            data = [data]
        rows = []
        for idx, item in enumerate(data, start=1):
            row = dict(item)
            row["id"] = f"test-uuid-{idx}"
            row["created_at"] = datetime.utcnow().isoformat() + "Z"
            rows.append(row)
        if self._table is not None:
            self._table.inserts.append(rows)
        self._data = rows
        return self

    def update(self, data):
        # Simulate update - merge with existing data
        updated_data = []
        for item in self._data:
            merged = {**item, **data}
            merged["updated_at"] = datetime.utcnow().isoformat() + "Z"
            updated_data.append(merged)
        self._data = updated_data if updated_data else [data]
        return self

    def delete(self):
        return self

    def eq(self, column, value):
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class FailingSupabaseQuery(MockSupabaseQuery):
    """Query whose execute() raises, like a rejected PostgREST request."""

    def __init__(self, error: str):
        super().__init__()
        self._error = error

    def execute(self):
        raise Exception(self._error)


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, insert_error: str = None):
        self._data = data or []
        self._count = count
        self._insert_error = insert_error
        self.inserts: list[list[dict]] = []

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self._data.copy(), self._count, table=self)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        if self._insert_error:
            return FailingSupabaseQuery(self._insert_error)
        return self._query().insert(data)

    def update(self, data):
        return self._query().update(data)

    def delete(self):
        return self._query()


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = MockSupabaseTable(data, count)

    def fail_inserts(self, table_name: str, error: str):
        """Make every insert into table_name raise."""
        self._tables[table_name] = MockSupabaseTable(insert_error=error)

    def inserted_rows(self, table_name: str) -> list[list[dict]]:
        """Each insert call made against table_name, in order."""
        return self.table(table_name).inserts

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": "1", "business_id": "biz-1", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Service singletons are reset so each test builds fresh services
    around this test's mock.
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase), \
            patch("services.business_service.get_supabase_client", return_value=mock_supabase), \
            patch("services.product_service.get_supabase_client", return_value=mock_supabase), \
            patch("services.business_service._business_service", None), \
            patch("services.product_service._product_service", None):
        yield mock_supabase


@pytest.fixture
def owner_id() -> str:
    return "owner-uuid-1"


@pytest.fixture
def sample_business_data(owner_id) -> dict:
    """Sample business row owned by owner_id."""
    return {
        "id": "biz-uuid-1",
        "owner_id": owner_id,
        "name": "Corner Bakery",
        "category": "Food & Drink",
        "address": "12 Main St",
        "created_at": "2025-12-05T10:00:00Z",
    }


@pytest.fixture
def sample_product_data() -> dict:
    """Sample product row."""
    return {
        "id": "prod-uuid-1",
        "business_id": "biz-uuid-1",
        "name": "Sourdough Loaf",
        "price": 8.5,
        "description": "Naturally leavened",
        "image_url": None,
        "created_at": "2025-12-05T10:00:00Z",
    }


@pytest.fixture
def sample_csv() -> str:
    """A clean export with one row missing its price."""
    return (
        "Product Name,Price,Description,Image URL\n"
        "Sourdough Loaf,$8.50,Naturally leavened,https://img.example/loaf.jpg\n"
        "Croissant,\"$3.25\",Butter,\n"
        "Baguette,,,\n"
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            response = test_client_with_mock_db.get("/api/businesses/biz-uuid-1/products")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
