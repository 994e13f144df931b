import copy
import os
import tempfile
import threading
from datetime import datetime

import pytest

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="sn_admin_logs_"))

from sn_admin.services.errors import BackendError, NOT_FOUND  # noqa: E402


def _as_comparable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _matches(row: dict, column: str, op: str, value) -> bool:
    if column == "or":
        return any(_matches(row, c, o, v) for c, o, v in value)

    actual = _as_comparable(row.get(column))
    expected = _as_comparable(value)

    if op == "eq":
        return actual == expected or (actual is not None and str(actual) == str(expected))
    if op == "neq":
        return not _matches(row, column, "eq", value)
    if op == "is":
        return actual is expected
    if op == "in":
        return actual in expected
    if op == "ilike":
        needle = str(expected).strip("*").lower()
        return actual is not None and needle in str(actual).lower()
    if actual is None:
        return False
    if op == "gte":
        return actual >= expected
    if op == "lte":
        return actual <= expected
    if op == "gt":
        return actual > expected
    if op == "lt":
        return actual < expected
    raise ValueError(op)


class FakeSupabase:
    """In-memory stand-in for SupabaseClient used by the service and API tests."""

    def __init__(self):
        self.tables = {}
        self.invocations = []
        self.function_responses = {}
        self.fail_when = None
        self._next_id = {}
        self._lock = threading.Lock()

    # === helpers for tests ===
    def seed(self, table, *rows):
        for row in rows:
            row = dict(row)
            if "id" not in row:
                row["id"] = self._new_id(table)
            else:
                self._next_id[table] = max(self._next_id.get(table, 0), row["id"] if isinstance(row["id"], int) else 0)
            self.tables.setdefault(table, []).append(row)
        return self

    def rows(self, table):
        return self.tables.get(table, [])

    def _new_id(self, table):
        self._next_id[table] = self._next_id.get(table, 0) + 1
        return self._next_id[table]

    def _check_fail(self, table, op, row):
        if self.fail_when and self.fail_when(table, op, row):
            raise BackendError("23514", f"new row for relation \"{table}\" violates check constraint")

    def _filter(self, table, filters):
        result = self.tables.get(table, [])
        for column, op, value in filters or []:
            result = [r for r in result if _matches(r, column, op, value)]
        return result

    # === SupabaseClient interface ===
    def select_with_count(self, table, filters=None, columns="*", order=None, ascending=True, limit=None, offset=None):
        with self._lock:
            rows = self._filter(table, filters)
            total = len(rows)
            if order:
                rows = sorted(rows, key=lambda r: (r.get(order) is None, _as_comparable(r.get(order))), reverse=not ascending)
            start = offset or 0
            end = start + limit if limit is not None else None
            return copy.deepcopy(rows[start:end]), total

    def select(self, table, filters=None, **kwargs):
        rows, _ = self.select_with_count(table, filters, **kwargs)
        return rows

    def get_one(self, table, record_id):
        rows = self.select(table, [("id", "eq", record_id)])
        if not rows:
            raise BackendError(NOT_FOUND, f"{table} {record_id} not found", status=404)
        return rows[0]

    def insert(self, table, rows):
        many = isinstance(rows, list)
        created = []
        with self._lock:
            for row in rows if many else [rows]:
                self._check_fail(table, "insert", row)
                row = copy.deepcopy(row)
                row.setdefault("id", self._new_id(table))
                self.tables.setdefault(table, []).append(row)
                created.append(copy.deepcopy(row))
        return created

    def update(self, table, values, filters):
        with self._lock:
            matched = self._filter(table, filters)
            for row in matched:
                self._check_fail(table, "update", {**row, **values})
            for row in matched:
                row.update(copy.deepcopy(values))
            return copy.deepcopy(matched)

    def delete(self, table, filters):
        with self._lock:
            matched = self._filter(table, filters)
            self.tables[table] = [r for r in self.tables.get(table, []) if r not in matched]
            return copy.deepcopy(matched)

    def invoke(self, function_name, body):
        self.invocations.append((function_name, body))
        response = self.function_responses.get(function_name, {})
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def db():
    fake = FakeSupabase()
    fake.seed("customers", {"id": 7, "first_name": "Jordan", "last_name": "River", "email": "jordan@example.com", "phone": "07700900123"})
    fake.seed("cleaners", {"id": 3, "first_name": "Ana", "last_name": "Petrova", "hourly_rate": 16.0, "presentage_rate": 70})
    return fake


@pytest.fixture
def booking_row():
    return {
        "id": 101,
        "customer": 7,
        "cleaner": None,
        "date_time": "2026-11-02T10:00:00",
        "address": "12 Example Street",
        "postcode": "SW1A 1AA",
        "first_name": "Jordan",
        "last_name": "River",
        "email": "jordan@example.com",
        "phone_number": "07700900123",
        "service_type": "Domestic",
        "cleaning_type": "Standard Cleaning",
        "total_hours": 3.0,
        "cleaning_cost_per_hour": 20.0,
        "total_cost": 60.0,
        "payment_method": "Card",
        "payment_status": "Paid",
        "booking_status": "active",
        "invoice_id": "INV-1",
        "invoice_link": "https://invoices.example/INV-1",
    }


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient

    from sn_admin.main import app
    from sn_admin.services.supabase_client import get_db

    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()
