"""Shared fixtures: an in-memory stand-in for the Supabase client."""

import itertools
import re
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest


class FakeQuery:
    """Records a postgrest-style chain and applies it to the in-memory tables on ``execute``."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.action = "select"
        self.payload: Any = None
        self.on_conflict = None
        self.filters: List = []
        self.orders: List = []
        self.limit_n = None

    # actions
    def select(self, *columns: str) -> "FakeQuery":
        self.action = "select"
        return self

    def insert(self, rows: Any) -> "FakeQuery":
        self.action, self.payload = "insert", rows
        return self

    def update(self, values: Dict[str, Any]) -> "FakeQuery":
        self.action, self.payload = "update", values
        return self

    def upsert(self, rows: Any, on_conflict: str = "id") -> "FakeQuery":
        self.action, self.payload, self.on_conflict = "upsert", rows, on_conflict
        return self

    def delete(self) -> "FakeQuery":
        self.action = "delete"
        return self

    # filters
    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def lte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) <= value)
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        allowed = set(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def or_(self, expression: str) -> "FakeQuery":
        clauses = []
        for part in expression.split(","):
            column, op, pattern = part.split(".", 2)
            assert op == "ilike", f"unsupported or_ operator {op}"
            regex = re.compile("^" + re.escape(pattern).replace("%", ".*") + "$", re.IGNORECASE)
            clauses.append((column, regex))
        self.filters.append(
            lambda row: any(regex.match(str(row.get(column) or "")) for column, regex in clauses)
        )
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.orders.append((column, desc))
        return self

    def limit(self, n: int) -> "FakeQuery":
        self.limit_n = n
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(f(row) for f in self.filters)

    def execute(self) -> SimpleNamespace:
        if self.table in self.db.failing_tables:
            raise RuntimeError(f"{self.table} unavailable")
        self.db.calls.append((self.table, self.action))
        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "select":
            found = [dict(r) for r in rows if self._matches(r)]
            for column, desc in reversed(self.orders):
                found.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
            if self.limit_n is not None:
                found = found[: self.limit_n]
            return SimpleNamespace(data=found)

        if self.action == "insert":
            new = self.payload if isinstance(self.payload, list) else [self.payload]
            saved = []
            for row in new:
                stored = {"id": self.db.next_id(), **row}
                rows.append(stored)
                saved.append(dict(stored))
            return SimpleNamespace(data=saved)

        if self.action == "update":
            saved = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    saved.append(dict(row))
            return SimpleNamespace(data=saved)

        if self.action == "upsert":
            new = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = [k.strip() for k in self.on_conflict.split(",")]
            saved = []
            for row in new:
                existing = next(
                    (r for r in rows if all(r.get(k) == row.get(k) for k in keys)), None
                )
                if existing is None:
                    existing = {"id": self.db.next_id()}
                    rows.append(existing)
                existing.update(row)
                saved.append(dict(existing))
            return SimpleNamespace(data=saved)

        if self.action == "delete":
            removed = [dict(r) for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=removed)

        raise AssertionError(f"unknown action {self.action}")


class FakeBucket:
    def __init__(self, db: "FakeSupabase", name: str) -> None:
        self.db = db
        self.name = name

    def upload(self, path: str, content: bytes, options: Dict[str, Any] | None = None) -> None:
        self.db.files[f"{self.name}/{path}"] = content

    def get_public_url(self, path: str) -> str:
        return f"https://storage.test/{self.name}/{path}"


class FakeSupabase:
    """Just enough of ``supabase.Client`` for the services under test."""

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]] | None = None) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(r) for r in rows] for name, rows in (tables or {}).items()
        }
        self.files: Dict[str, bytes] = {}
        self.calls: List = []
        self.failing_tables: set = set()
        self._ids = itertools.count(1)
        self.storage = SimpleNamespace(from_=lambda bucket: FakeBucket(self, bucket))

    def next_id(self) -> str:
        return f"gen-{next(self._ids)}"

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.get(name, [])


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


def make_llm(*responses: str):
    """A ``call_llm`` replacement that returns canned replies in order and records prompts."""
    replies = list(responses)
    calls: List[Dict[str, Any]] = []

    def llm(prompt: str, system: str | None = None, temperature: float = 0.3, **kwargs: Any) -> str:
        calls.append({"prompt": prompt, "system": system, "temperature": temperature})
        return replies.pop(0) if len(replies) > 1 else replies[0]

    llm.calls = calls
    return llm


@pytest.fixture
def llm_factory():
    return make_llm
