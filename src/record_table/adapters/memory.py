"""In-process data adapter.

Provides ``InMemoryAdapter``, a ``DataClient`` that keeps rows in dicts and
assigns ids and timestamps the way the managed backend does.  Used by the
``memory`` profile provider and by the test suite.

With a ``path`` the store is loaded from a JSON file on construction and
written back after every mutation, so separate CLI runs share data.

Usage:
    from record_table.adapters.memory import InMemoryAdapter

    adapter = InMemoryAdapter()
    row = await adapter.insert("tags", {"name": "Rock"})
    row["id"]         # 'c0a8...'
    row["createdAt"]  # '2026-10-19T16:41:00.000Z'
"""

import copy
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def _now() -> str:
    moment = datetime.now(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class InMemoryAdapter:
    """In-memory implementation of the ``DataClient`` protocol.

    Rows are returned in insertion order unless ``order_by`` is given.
    Every returned row is a copy; callers cannot mutate stored state.

    Args:
        tables: Optional initial rows per table.  Rows are stored as given;
            no ids or timestamps are added.
        path: Optional JSON file backing the store.
    """

    def __init__(
        self,
        tables: dict[str, list[dict]] | None = None,
        path: Path | str | None = None,
    ) -> None:
        self._path: Path | None = Path(path) if path else None
        if tables is None and self._path is not None and self._path.exists():
            tables = json.loads(self._path.read_text())
        self._tables: dict[str, list[dict]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }

    def rows(self, table: str) -> list[dict]:
        """Snapshot of every stored row of ``table``."""
        return copy.deepcopy(self._tables.get(table, []))

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._tables, indent=2, default=str))

    @staticmethod
    def _matches(row: dict, filters: dict[str, Any] | None) -> bool:
        if not filters:
            return True
        return all(row.get(key) == value for key, value in filters.items())

    @staticmethod
    def _project(row: dict, columns: str) -> dict:
        if columns.strip() == "*":
            return copy.deepcopy(row)
        names = [c.strip() for c in columns.split(",") if c.strip()]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    # ------------------------------------------------------------------
    # CRUD Methods
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        """Select rows matching filters."""
        rows = [r for r in self._tables.get(table, []) if self._matches(r, filters)]
        if order_by:
            rows = sorted(rows, key=lambda r: (r.get(order_by) is None, str(r.get(order_by))))
        return [self._project(r, columns) for r in rows]

    async def insert(self, table: str, data: dict) -> dict:
        """Insert row, assigning ``id``, ``createdAt`` and ``updatedAt``.

        Filters out metadata fields (starting with ``_``) before insertion.
        """
        clean_data = {k: v for k, v in data.items() if not k.startswith("_")}
        now = _now()
        row = {
            **clean_data,
            "id": uuid.uuid4().hex,
            "createdAt": now,
            "updatedAt": now,
        }
        self._tables.setdefault(table, []).append(row)
        self._save()
        return copy.deepcopy(row)

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> dict:
        """Update matching rows and return the first updated row.

        Raises:
            ValueError: If no rows match filters.
        """
        matched = [r for r in self._tables.get(table, []) if self._matches(r, filters)]
        if not matched:
            raise ValueError(f"No rows matched filters: {filters}")
        now = _now()
        for row in matched:
            row.update(data)
            row["updatedAt"] = now
        self._save()
        return copy.deepcopy(matched[0])

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Delete rows matching filters."""
        rows = self._tables.get(table, [])
        self._tables[table] = [r for r in rows if not self._matches(r, filters)]
        self._save()

    async def close(self) -> None:
        """No-op; every mutation is already persisted."""
        return None
