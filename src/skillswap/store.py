"""Record stores backing the skillswap services."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Protocol

__all__ = [
    "SKILLS",
    "PROFILES",
    "SKILL_MATCHES",
    "StoreError",
    "RecordStore",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
]

logger = logging.getLogger(__name__)

SKILLS = "skills"
PROFILES = "profiles"
SKILL_MATCHES = "skill_matches"

Record = dict[str, Any]


class StoreError(RuntimeError):
    """Raised by a store when a call cannot be completed."""


def _restore(row: Record, before: Record) -> None:
    row.clear()
    row.update(before)


class RecordStore(Protocol):
    """Generic table store consumed by the services."""

    def insert(self, table: str, record: Mapping[str, Any]) -> Record: ...

    def select(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by_created_desc: bool = True,
    ) -> list[Record]: ...

    def select_in(self, table: str, field: str, values: Iterable[Any]) -> list[Record]: ...

    def update(self, table: str, record_id: str, changes: Mapping[str, Any]) -> Record: ...

    def upsert(self, table: str, key: str, record: Mapping[str, Any]) -> Record: ...


class InMemoryRecordStore:
    """Thread-safe in-memory store.

    Inserted rows get a uuid4 hex ``id`` and a UTC ``created_at`` that is
    strictly increasing within the store, so newest-first ordering never
    depends on clock resolution.
    """

    def __init__(self, tables: Mapping[str, list[Record]] | None = None) -> None:
        self._tables: dict[str, list[Record]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self._lock = threading.Lock()
        self._last_created: datetime | None = None

    def _next_timestamp(self) -> str:
        now = datetime.now(timezone.utc)
        if self._last_created is not None and now <= self._last_created:
            now = self._last_created + timedelta(microseconds=1)
        self._last_created = now
        return now.isoformat(timespec="microseconds")

    def _rows(self, table: str) -> list[Record]:
        return self._tables.setdefault(table, [])

    def _written(self) -> None:
        """Hook called after every write while the lock is held."""

    def _commit(self, undo: Callable[[], object]) -> None:
        """Run the write hook, reverting the in-memory change if it fails."""
        try:
            self._written()
        except StoreError:
            undo()
            raise

    def insert(self, table: str, record: Mapping[str, Any]) -> Record:
        with self._lock:
            row = dict(record)
            row.setdefault("id", uuid.uuid4().hex)
            row.setdefault("created_at", self._next_timestamp())
            rows = self._rows(table)
            rows.append(row)
            self._commit(rows.pop)
            logger.debug("Inserted %s row %s", table, row["id"])
            return dict(row)

    def select(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        order_by_created_desc: bool = True,
    ) -> list[Record]:
        with self._lock:
            rows = [
                dict(row)
                for row in self._rows(table)
                if all(row.get(k) == v for k, v in (filters or {}).items())
            ]
        if order_by_created_desc:
            # Reverse first so rows sharing a timestamp stay newest-first.
            rows = sorted(reversed(rows), key=lambda r: str(r.get("created_at", "")), reverse=True)
        return rows

    def select_in(self, table: str, field: str, values: Iterable[Any]) -> list[Record]:
        wanted = set(values)
        with self._lock:
            return [dict(row) for row in self._rows(table) if row.get(field) in wanted]

    def update(self, table: str, record_id: str, changes: Mapping[str, Any]) -> Record:
        with self._lock:
            for row in self._rows(table):
                if row.get("id") == record_id:
                    before = dict(row)
                    row.update(changes)
                    self._commit(lambda: _restore(row, before))
                    return dict(row)
        raise StoreError(f"No {table} row with id '{record_id}'")

    def upsert(self, table: str, key: str, record: Mapping[str, Any]) -> Record:
        if key not in record:
            raise StoreError(f"Upsert into {table} requires '{key}'")
        with self._lock:
            for row in self._rows(table):
                if row.get(key) == record[key]:
                    before = dict(row)
                    row.update(record)
                    self._commit(lambda: _restore(row, before))
                    return dict(row)
            row = dict(record)
            row.setdefault("id", uuid.uuid4().hex)
            row.setdefault("created_at", self._next_timestamp())
            rows = self._rows(table)
            rows.append(row)
            self._commit(rows.pop)
            return dict(row)


class JsonFileRecordStore(InMemoryRecordStore):
    """In-memory store that mirrors its tables to a JSON file after each write."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        tables: dict[str, list[Record]] = {}
        if self._path.exists():
            try:
                tables = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise StoreError(f"Cannot read data file {self._path}: {exc}") from exc
            if not isinstance(tables, dict):
                raise StoreError(f"Data file {self._path} does not hold a table mapping")
        super().__init__(tables)
        created = [
            str(row["created_at"])
            for rows in self._tables.values()
            for row in rows
            if row.get("created_at")
        ]
        if created:
            self._last_created = datetime.fromisoformat(max(created))

    @property
    def path(self) -> Path:
        return self._path

    def _written(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(self._tables, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot write data file {self._path}: {exc}") from exc
