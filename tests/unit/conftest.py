"""
In-memory stand-ins for a psycopg connection.

`FakeConnection` understands the ledger statements the runner issues and the
composed INSERTs the seeder issues; everything else is recorded as an opaque
"effect". `transaction()` snapshots state and restores it when the block
raises, which is what a real ROLLBACK does to the ledger and to the effects.
"""

from __future__ import annotations

import copy
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Sequence

import psycopg
import pytest
from psycopg import sql


INSERT_RE = re.compile(r'^INSERT INTO "(?P<table>[^"]+)" \((?P<columns>[^)]*)\) VALUES')
QUOTED_RE = re.compile(r'"([^"]+)"')


def _insert_target(query: sql.Composable) -> tuple[str, List[str]]:
    """Table and column names of a composed INSERT rendered without a connection."""
    match = INSERT_RE.match(query.as_string(None))
    assert match is not None, f"unexpected composed query: {query!r}"
    return match["table"], QUOTED_RE.findall(match["columns"])


class FakeCursor:
    def __init__(self, conn: FakeConnection) -> None:
        self._conn = conn
        self._rows: List[tuple] = []
        self.rowcount = -1
        self.statusmessage: Optional[str] = None

    def __enter__(self) -> FakeCursor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb

    def fetchall(self) -> List[tuple]:
        return list(self._rows)

    def execute(self, query: Any, params: Optional[Sequence[Any]] = None) -> FakeCursor:
        conn = self._conn
        if isinstance(query, sql.Composable):
            return self._insert(query, list(params or []))

        text = " ".join(query.split())
        upper = text.upper()
        conn.history.append(text)

        if conn.fail_on and conn.fail_on in text:
            raise psycopg.errors.SyntaxError(f'syntax error at or near "{conn.fail_on}"')

        if upper.startswith("CREATE TABLE IF NOT EXISTS SCHEMA_MIGRATIONS"):
            conn.ledger_ready = True
            self.statusmessage = "CREATE TABLE"
        elif upper.startswith("SELECT NAME, EXECUTED_AT FROM SCHEMA_MIGRATIONS"):
            self._rows = sorted(conn.ledger.items())
            self.rowcount = len(self._rows)
            self.statusmessage = f"SELECT {self.rowcount}"
        elif upper.startswith("INSERT INTO SCHEMA_MIGRATIONS"):
            name = params[0]
            if name in conn.ledger:
                raise psycopg.errors.UniqueViolation(
                    'duplicate key value violates unique constraint "schema_migrations_name_key"'
                )
            conn.ledger[name] = datetime.now(timezone.utc)
            self.rowcount = 1
            self.statusmessage = "INSERT 0 1"
        elif upper.startswith("DELETE FROM SCHEMA_MIGRATIONS"):
            self.rowcount = 1 if conn.ledger.pop(params[0], None) is not None else 0
            self.statusmessage = f"DELETE {self.rowcount}"
        else:
            conn.effects.append(text)
            self.statusmessage = " ".join(upper.split()[:2])
        return self

    def _insert(self, query: sql.Composable, params: List[Any]) -> FakeCursor:
        conn = self._conn
        table, columns = _insert_target(query)
        conn.insert_calls += 1
        if conn.insert_calls in conn.fail_insert_at:
            raise psycopg.errors.NotNullViolation(f'null value in column of relation "{table}"')

        row = dict(zip(columns, params))
        rows = conn.tables.setdefault(table, [])
        keys = conn.unique_columns.get(table, [])
        if any(existing.get(key) == row.get(key) for existing in rows for key in keys):
            self.rowcount = 0
            self.statusmessage = "INSERT 0 0"
        else:
            rows.append(row)
            self.rowcount = 1
            self.statusmessage = "INSERT 0 1"
        return self


class FakeConnection:
    def __init__(
        self,
        fail_on: Optional[str] = None,
        ledger: Optional[Dict[str, datetime]] = None,
    ) -> None:
        self.fail_on = fail_on
        self.ledger: Dict[str, datetime] = dict(ledger or {})
        self.ledger_ready = False
        self.effects: List[str] = []
        self.history: List[str] = []
        self.transactions: List[str] = []
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.unique_columns: Dict[str, List[str]] = {}
        self.fail_insert_at: set[int] = set()
        self.insert_calls = 0
        self.closed = False

    @contextmanager
    def transaction(self) -> Iterator[FakeConnection]:
        snapshot = (dict(self.ledger), list(self.effects), copy.deepcopy(self.tables))
        try:
            yield self
        except BaseException:
            self.ledger, self.effects, self.tables = snapshot
            self.transactions.append("rollback")
            raise
        self.transactions.append("commit")

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def execute(self, query: Any, params: Optional[Sequence[Any]] = None) -> FakeCursor:
        return FakeCursor(self).execute(query, params)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()
