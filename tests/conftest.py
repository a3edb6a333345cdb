# tests/conftest.py
"""
Pytest configuration and fixtures for the ticket panel test suite.

Provides:
- Async Supabase mock client (in-memory tables, failure injection)
- Seeded tickets / projects / profiles
- Service, notifier and cache fixtures with a controllable clock
- FastAPI test client with the service dependency overridden

Note: Tests never talk to a real Supabase project.
"""

import asyncio
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Set test environment before imports
os.environ["TICKET_PANEL_ENV"] = "test"
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_KEY", None)

from ticket_panel.infrastructure.cache import QueryCache
from ticket_panel.repositories import SupabaseTicketRepository
from ticket_panel.services.notifications import ToastNotifier
from ticket_panel.services.tickets import build_tickets_service


# ============== Supabase Mock Fixtures ==============

class MockSupabaseResponse:
    """Mock response from Supabase operations."""
    def __init__(self, data: List[Dict] = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseTable:
    """Mock Supabase table with chainable methods and an async execute()."""

    def __init__(self, table_name: str, client: "MockSupabaseClient"):
        self.table_name = table_name
        self._client = client
        self._op = "select"
        self._payload: Any = None
        self._select_cols = "*"
        self._filters: Dict[str, Any] = {}
        self._order_by: Optional[Tuple[str, bool]] = None

    def select(self, columns: str = "*"):
        self._op = "select"
        self._select_cols = columns
        return self

    def insert(self, data):
        self._op = "insert"
        self._payload = data
        return self

    def update(self, data: Dict):
        self._op = "update"
        self._payload = data
        return self

    def eq(self, column: str, value: Any):
        self._filters[column] = value
        return self

    def order(self, column: str, desc: bool = False):
        self._order_by = (column, desc)
        return self

    async def execute(self) -> MockSupabaseResponse:
        client = self._client
        client.calls.append({
            "table": self.table_name,
            "op": self._op,
            "payload": self._payload,
            "filters": dict(self._filters),
            "order": self._order_by,
            "columns": self._select_cols,
        })

        client.in_flight += 1
        client.max_in_flight = max(client.max_in_flight, client.in_flight)
        try:
            # Yield so concurrent requests overlap
            await asyncio.sleep(0)
            error = client.failures.get((self.table_name, self._op))
            if error is not None:
                raise error
            return getattr(self, f"_{self._op}")()
        finally:
            client.in_flight -= 1

    def _rows(self) -> List[Dict]:
        return self._client.data_store.setdefault(self.table_name, [])

    def _matching(self) -> List[Dict]:
        return [
            row for row in self._rows()
            if all(row.get(col) == val for col, val in self._filters.items())
        ]

    def _select(self) -> MockSupabaseResponse:
        rows = [dict(row) for row in self._matching()]
        if self._order_by:
            column, desc = self._order_by
            rows.sort(key=lambda r: r.get(column) or "", reverse=desc)
        if self._select_cols != "*":
            cols = [c.strip() for c in self._select_cols.split(",")]
            rows = [{c: row.get(c) for c in cols} for row in rows]
        return MockSupabaseResponse(data=rows)

    def _insert(self) -> MockSupabaseResponse:
        items = self._payload if isinstance(self._payload, list) else [self._payload]
        inserted = []
        for item in items:
            row = {
                "id": str(uuid.uuid4()),
                "status": "wip",
                "is_code_red": False,
                "created_at": datetime.now(timezone.utc).isoformat(),
                "resolved_at": None,
                "closed_at": None,
                **item,
            }
            self._rows().append(row)
            inserted.append(dict(row))
        return MockSupabaseResponse(data=inserted)

    def _update(self) -> MockSupabaseResponse:
        updated = []
        for row in self._matching():
            row.update(self._payload)
            updated.append(dict(row))
        return MockSupabaseResponse(data=updated)


class MockSupabaseClient:
    """Mock async Supabase client for testing."""

    def __init__(self):
        self.data_store: Dict[str, List[Dict]] = {}
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.calls: List[Dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def table(self, name: str) -> MockSupabaseTable:
        return MockSupabaseTable(name, self)

    def seed_data(self, table_name: str, data: List[Dict]):
        """Seed test data into a table."""
        self.data_store[table_name] = [dict(row) for row in data]

    def fail(self, table_name: str, op: str, error: Exception):
        """Make every `op` ("select", "insert", "update") on a table raise."""
        self.failures[(table_name, op)] = error

    def recover(self):
        self.failures.clear()

    def rows(self, table_name: str) -> List[Dict]:
        return self.data_store.get(table_name, [])

    def calls_for(self, op: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["op"] == op]


# ============== Sample Data ==============

PROJECTS = [
    {"id": "proj-1", "name": "Website"},
    {"id": "proj-2", "name": "Mobile App"},
]

PROFILES = [
    {"id": "user-1", "email": "ana@example.com", "full_name": "Ana Silva"},
    {"id": "user-2", "email": "bo@example.com", "full_name": None},
]

TICKETS = [
    {
        "id": "a1b2c3d4-0000-0000-0000-000000000001",
        "title": "Login page broken",
        "description": "500 on submit",
        "status": "wip",
        "priority": "high",
        "project_id": "proj-1",
        "assigned_to": "user-1",
        "is_code_red": False,
        "due_date": "2024-02-01",
        "created_at": "2024-01-15T10:00:00Z",
        "resolved_at": None,
        "closed_at": None,
        "created_by": "admin-1",
    },
    {
        "id": "b2c3d4e5-0000-0000-0000-000000000002",
        "title": "Push notifications delayed",
        "description": None,
        "status": "resolved",
        "priority": "medium",
        "project_id": "proj-2",
        "assigned_to": "user-2",
        "is_code_red": True,
        "due_date": None,
        "created_at": "2024-01-16T10:00:00Z",
        "resolved_at": "2024-01-17T09:00:00Z",
        "closed_at": None,
        "created_by": "admin-1",
    },
    {
        "id": "c3d4e5f6-0000-0000-0000-000000000003",
        "title": "Update footer copy",
        "description": "Legal asked for new text",
        "status": "closed",
        "priority": "low",
        "project_id": "proj-missing",
        "assigned_to": "user-missing",
        "is_code_red": False,
        "due_date": None,
        "created_at": "2024-01-14T10:00:00Z",
        "resolved_at": None,
        "closed_at": "2024-01-15T12:00:00Z",
        "created_by": "admin-1",
    },
]


@pytest.fixture(scope="function")
def mock_supabase() -> MockSupabaseClient:
    """Empty mock Supabase client."""
    return MockSupabaseClient()


@pytest.fixture(scope="function")
def mock_supabase_with_data(mock_supabase) -> MockSupabaseClient:
    """Supabase mock with sample tickets, projects and profiles."""
    mock_supabase.seed_data("projects", PROJECTS)
    mock_supabase.seed_data("profiles", PROFILES)
    mock_supabase.seed_data("tickets", TICKETS)
    return mock_supabase


# ============== Service Fixtures ==============

class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> ToastNotifier:
    return ToastNotifier(limit=20)


@pytest.fixture
def repository(mock_supabase_with_data) -> SupabaseTicketRepository:
    return SupabaseTicketRepository(client=mock_supabase_with_data)


@pytest.fixture
def service(repository, notifier, clock):
    """Tickets service over the seeded mock, with a hand-driven clock."""
    cache = QueryCache(stale_time=30, clock=clock)
    return build_tickets_service(repository, notifier, cache=cache)


# ============== FastAPI Client Fixtures ==============

@pytest.fixture
def client(service, notifier):
    """FastAPI test client wired to the seeded mock service."""
    from fastapi.testclient import TestClient

    from ticket_panel.domains.tickets.api import get_notifier, get_tickets_service
    from ticket_panel.main import app

    app.dependency_overrides[get_tickets_service] = lambda: service
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
