"""
Shared fixtures: an in-memory Supabase client and Streamlit session state
"""

import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
import streamlit

import config.app_config as app_config
from services.ui_service.notifications import NotificationChannel

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class MockSessionState(dict):
    """Mock Streamlit session state supporting both key and attribute access"""

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key) from None

    def __setattr__(self, key, value):
        self[key] = value

    def __delattr__(self, key):
        del self[key]


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable query builder recording what execute() should do"""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.descending = False
        self.single_row = False

    def insert(self, payload):
        self.operation, self.payload = "insert", payload
        return self

    def select(self, columns="*"):
        self.operation = "select"
        return self

    def update(self, values):
        self.operation, self.payload = "update", values
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by, self.descending = column, desc
        return self

    def single(self):
        self.single_row = True
        return self

    def execute(self):
        self.db.calls.append((self.table, self.operation))
        if (self.table, self.operation) in self.db.failures:
            raise RuntimeError(f"{self.table}.{self.operation} failed")

        rows = self.db.tables.setdefault(self.table, [])

        if self.operation == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.db.stamp(dict(row)) for row in payload]
            rows.extend(inserted)
            return FakeResponse(inserted)

        matched = [row for row in rows if all(row.get(k) == v for k, v in self.filters)]

        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse(matched)

        if self.operation == "delete":
            self.db.tables[self.table] = [row for row in rows if row not in matched]
            return FakeResponse(matched)

        if self.order_by:
            matched = sorted(matched, key=lambda row: row[self.order_by], reverse=self.descending)
        if self.single_row:
            return FakeResponse(matched[0] if matched else None)
        return FakeResponse(matched)


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.fail_uploads:
            raise RuntimeError("storage unavailable")
        self.storage.objects[(self.name, path)] = (file, file_options)
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.objects = {}
        self.fail_uploads = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeAuth:
    def __init__(self, session=None):
        self.session = session

    def get_session(self):
        return self.session


class FakeRPC:
    def __init__(self, data):
        self.data = data

    def execute(self):
        return FakeResponse(self.data)


class FakeSupabase:
    """
    In-memory stand-in for supabase.Client covering the calls the services make
    """

    def __init__(self, session=None):
        self.tables = {}
        self.calls = []
        self.failures = set()
        self.rpc_results = {}
        self.auth = FakeAuth(session)
        self.storage = FakeStorage()
        self._ids = itertools.count(1)

    def stamp(self, row):
        n = next(self._ids)
        now = (BASE_TIME + timedelta(seconds=n)).isoformat()
        row.setdefault("id", f"row-{n}")
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        return row

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        self.calls.append((name, "rpc"))
        return FakeRPC(self.rpc_results.get(name, []))

    def rows(self, table, **filters):
        return [row for row in self.tables.get(table, []) if all(row.get(k) == v for k, v in filters.items())]


def make_session(user_id="user-1", email="ana@example.com"):
    return SimpleNamespace(
        user=SimpleNamespace(id=user_id, email=email),
        access_token="access-token",
        refresh_token="refresh-token",
        expires_at=None,
    )


@pytest.fixture(autouse=True)
def app_env(monkeypatch):
    """Configured environment and a fresh global config for every test"""
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.test")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "test-anon-key")
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setattr(app_config, "_config", None)
    yield
    app_config._config = None


@pytest.fixture(autouse=True)
def session_state(request, monkeypatch):
    """Dict-backed session state, except for AppTest runs which need the real one"""
    if request.node.get_closest_marker("apptest"):
        return None
    state = MockSessionState()
    monkeypatch.setattr(streamlit, "session_state", state)
    return state



@pytest.fixture
def supabase():
    return FakeSupabase(session=make_session())


@pytest.fixture
def signed_out_supabase():
    return FakeSupabase()


@pytest.fixture
def notifications():
    return NotificationChannel()
