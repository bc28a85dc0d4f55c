"""Shared fixtures for record-table tests."""

import pytest

from record_table.adapters.memory import InMemoryAdapter
from record_table.adapters.model import BoundModel
from record_table.schema.entities import get_table_config
from record_table.table.controller import RecordTable


class RecordingNotifier:
    """Notifier that records alerts and answers confirmations from a script."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.alerts: list[str] = []
        self.prompts: list[str] = []

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def adapter() -> InMemoryAdapter:
    return InMemoryAdapter()


@pytest.fixture
def tag_table(adapter: InMemoryAdapter, notifier: RecordingNotifier) -> RecordTable:
    return RecordTable(BoundModel(adapter, get_table_config("Tag")), notifier)


def make_tags(count: int) -> list[dict]:
    """Rows for the ``tags`` table: tag-01 .. tag-NN."""
    return [
        {
            "id": f"t{i:02d}",
            "name": f"Tag {i:02d}",
            "slug": f"tag-{i:02d}",
            "color": None,
            "createdAt": "2026-01-01T00:00:00Z",
        }
        for i in range(1, count + 1)
    ]
