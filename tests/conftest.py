"""Shared fixtures: an in-memory transactional store for engine tests.

``FakeStore`` implements the ``DatabaseClient`` protocol over plain lists of
row dicts.  It enforces NOT NULL columns and unique keys, applies column
defaults, and rolls back every change made inside ``transaction()`` when the
block raises, which is what the engine relies on from PostgreSQL.
"""

import copy
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Sequence

import pytest

SEED_TIME = datetime(2025, 1, 1, 12, 0, 0)

TABLE_RULES: dict[str, dict[str, Any]] = {
    "users": {
        "not_null": {"username", "password"},
        "unique": {"username"},
        "defaults": {"created_at": SEED_TIME, "display_name": None},
    },
    "posts": {
        "not_null": {"subject", "message", "view_count", "pinned"},
        "unique": {"slug"},
        "defaults": {
            "slug": None,
            "author_id": None,
            "view_count": 0,
            "pinned": False,
            "created_at": SEED_TIME,
            "updated_at": SEED_TIME,
        },
    },
    "subscribers": {
        "not_null": {"email"},
        "unique": {"email"},
        "defaults": {"ip_address": None, "created_at": SEED_TIME},
    },
    "links": {
        "not_null": {"title", "url"},
        "unique": set(),
        "defaults": {"created_at": SEED_TIME},
    },
    "settings": {
        "not_null": set(),
        "unique": set(),
        "defaults": {
            "site_title": "My Blog",
            "footer_text": "Building the future, one commit at a time.",
            "site_description": "Welcome to my blog!",
            "created_at": SEED_TIME,
            "updated_at": SEED_TIME,
        },
    },
}


class FakeIntegrityError(Exception):
    """Stands in for a driver constraint violation."""


def _serialize(row: dict) -> dict:
    return {k: v.isoformat() if isinstance(v, datetime) else v for k, v in row.items()}


def _matches(row: dict, filters: dict | None, exclude: dict | None = None) -> bool:
    if filters and any(row.get(k) != v for k, v in filters.items()):
        return False
    if exclude and any(row.get(k) == v for k, v in exclude.items()):
        return False
    return True


class FakeSession:
    """CRUD over the store's tables; no commit or rollback of its own."""

    def __init__(self, store: "FakeStore"):
        self._store = store

    def _rows(self, table: str) -> list[dict]:
        if table in self._store.fail_tables or table not in self._store.tables:
            raise FakeIntegrityError(f'relation "{table}" does not exist')
        return self._store.tables[table]

    def _build_row(self, table: str, data: dict) -> dict:
        rules = TABLE_RULES[table]
        row = {**rules["defaults"], **data}
        for column in rules["not_null"]:
            if row.get(column) is None:
                raise FakeIntegrityError(
                    f'null value in column "{column}" of relation "{table}"'
                )
        return row

    def _conflict(self, table: str, row: dict, column: str) -> dict | None:
        value = row.get(column)
        if value is None:
            return None
        for existing in self._rows(table):
            if existing.get(column) == value:
                return existing
        return None

    def _append(self, table: str, row: dict) -> dict:
        for column in TABLE_RULES[table]["unique"]:
            if self._conflict(table, row, column) is not None:
                raise FakeIntegrityError(f'duplicate key value violates "{table}_{column}_key"')
        self._store.next_ids[table] = self._store.next_ids.get(table, 0) + 1
        row = {"id": self._store.next_ids[table], **row}
        self._rows(table).append(row)
        self._store.mutations += 1
        return row

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        rows = [dict(r) for r in self._rows(table) if _matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: r[order_by])
        return [_serialize(r) for r in rows]

    async def insert(self, table: str, data: dict) -> dict:
        self._rows(table)
        return _serialize(self._append(table, self._build_row(table, data)))

    async def upsert(
        self,
        table: str,
        data: dict,
        conflict_columns: Sequence[str],
        update_columns: Sequence[str] = (),
    ) -> dict | None:
        self._rows(table)
        candidate = self._build_row(table, data)
        existing = self._conflict(table, candidate, conflict_columns[0])
        if existing is None:
            return _serialize(self._append(table, candidate))
        if not update_columns:
            return None
        for column in update_columns:
            existing[column] = candidate.get(column)
        self._store.mutations += 1
        return _serialize(existing)

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> dict:
        matched = [r for r in self._rows(table) if _matches(r, filters)]
        if not matched:
            raise ValueError(f"No rows matched filters: {filters}")
        for row in matched:
            row.update(data)
        self._store.mutations += 1
        return _serialize(matched[0])

    async def delete(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        exclude: dict[str, Any] | None = None,
    ) -> None:
        rows = self._rows(table)
        rows[:] = [r for r in rows if not _matches(r, filters, exclude)]
        self._store.mutations += 1

    async def execute(self, sql: str, params: dict | None = None) -> None:
        self._store.executed.append((sql, params))


class FakeStore:
    """In-memory ``DatabaseClient`` with snapshot-based rollback."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {name: [] for name in TABLE_RULES}
        self.next_ids: dict[str, int] = {}
        self.fail_tables: set[str] = set()
        self.mutations = 0
        self.transactions_opened = 0
        self.rollbacks = 0
        self.executed: list[tuple] = []
        self.closed = False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[FakeSession]:
        self.transactions_opened += 1
        saved = copy.deepcopy((self.tables, self.next_ids, self.mutations))
        try:
            yield FakeSession(self)
        except BaseException:
            self.tables, self.next_ids, self.mutations = saved
            self.rollbacks += 1
            raise

    async def select(self, table, columns, filters=None, order_by=None):
        return await FakeSession(self).select(table, columns, filters, order_by)

    async def insert(self, table, data):
        async with self.transaction() as session:
            return await session.insert(table, data)

    async def upsert(self, table, data, conflict_columns, update_columns=()):
        async with self.transaction() as session:
            return await session.upsert(table, data, conflict_columns, update_columns)

    async def update(self, table, data, filters):
        async with self.transaction() as session:
            return await session.update(table, data, filters)

    async def delete(self, table, filters=None, exclude=None):
        async with self.transaction() as session:
            await session.delete(table, filters, exclude)

    async def execute(self, sql, params=None):
        self.executed.append((sql, params))

    async def close(self) -> None:
        self.closed = True

    def reset_counters(self) -> None:
        self.mutations = 0
        self.transactions_opened = 0
        self.rollbacks = 0


def seed(store: FakeStore) -> FakeStore:
    """Bootstrap state: admin user, singleton settings, one row per collection."""
    session = FakeSession(store)
    session._append("users", session._build_row("users", {"username": "admin", "password": "hash", "display_name": "Admin"}))
    session._append("settings", session._build_row("settings", {}))
    session._append(
        "posts",
        session._build_row(
            "posts",
            {"subject": "Welcome", "message": "<p>First post</p>", "slug": "123456", "author_id": 1, "view_count": 5},
        ),
    )
    session._append("subscribers", session._build_row("subscribers", {"email": "old@example.com", "ip_address": "10.0.0.1"}))
    session._append("links", session._build_row("links", {"title": "GitHub", "url": "https://github.com"}))
    store.reset_counters()
    return store


@pytest.fixture
def store() -> FakeStore:
    """Seeded in-memory store."""
    return seed(FakeStore())


@pytest.fixture
def empty_store() -> FakeStore:
    """Store with empty tables."""
    return FakeStore()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove database environment variables and keep .env files out of reach."""
    for name in (
        "BLOG_DB_PROFILE",
        "DB_PROFILE",
        "BLOG_DATABASE_URL",
        "DATABASE_URL",
        "DB_USER",
        "DB_HOST",
        "DB_NAME",
        "DB_PASSWORD",
        "DB_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
