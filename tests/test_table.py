"""Tests for RecordTable: load, search, paginate, edit, submit, remove.

Covers the data-synchronization contract of the generic table: wholesale
reload after every mutation, client-side search and pagination, modal
editing with drafts, and failure handling through the notifier.
"""

import asyncio
import math
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import RecordingNotifier, make_tags
from record_table.adapters.memory import InMemoryAdapter
from record_table.adapters.model import BoundModel, ModelResult
from record_table.schema.entities import get_table_config
from record_table.table.controller import (
    EditMode,
    RecordTable,
    TableState,
    filter_records,
    paginate_records,
)


def _table(rows: dict[str, list[dict]], entity: str = "Tag", answer: bool = True):
    adapter = InMemoryAdapter(rows)
    notifier = RecordingNotifier(answer=answer)
    table = RecordTable(BoundModel(adapter, get_table_config(entity)), notifier)
    return table, adapter, notifier


def _mock_model(entity: str = "Tag") -> MagicMock:
    model = MagicMock(spec=BoundModel)
    model.config = get_table_config(entity)
    model.name = model.config.model_name
    model.list = AsyncMock(return_value=ModelResult(data=[]))
    model.create = AsyncMock(return_value=ModelResult(data={"id": "new"}))
    model.update = AsyncMock(return_value=ModelResult(data={"id": "abc123"}))
    model.delete = AsyncMock(return_value=ModelResult(data={"id": "t1"}))
    return model


# ============================================================================
# Test: load()
# ============================================================================


class TestLoad:
    """Verify load() replaces the cache wholesale and handles failures."""

    def test_initial_state_is_idle(self, tag_table) -> None:
        """A fresh table is Idle with an empty cache."""
        assert tag_table.state is TableState.IDLE
        assert tag_table.records == []

    @pytest.mark.asyncio
    async def test_load_preserves_backend_order(self) -> None:
        """Records keep the order the API returned them in."""
        rows = make_tags(3)
        rows.reverse()
        table, _, _ = _table({"tags": rows})

        assert await table.load() is True
        assert [r["id"] for r in table.records] == ["t03", "t02", "t01"]
        assert table.state is TableState.READY

    @pytest.mark.asyncio
    async def test_load_failure_leaves_cache_empty(self) -> None:
        """A rejected list() logs, empties the cache and moves to Failed."""
        model = _mock_model()
        model.list = AsyncMock(return_value=ModelResult(data=make_tags(2)))
        table = RecordTable(model, RecordingNotifier())
        await table.load()
        assert len(table.records) == 2

        model.list = AsyncMock(side_effect=ConnectionError("network down"))
        assert await table.load() is False
        assert table.records == []
        assert table.state is TableState.FAILED
        assert "network down" in table.last_error

    @pytest.mark.asyncio
    async def test_load_failure_shows_no_alert(self) -> None:
        """Load failures are logged only; the notifier is not used."""
        model = _mock_model()
        model.list = AsyncMock(side_effect=RuntimeError("boom"))
        notifier = RecordingNotifier()
        table = RecordTable(model, notifier)

        await table.load()
        assert notifier.alerts == []

    @pytest.mark.asyncio
    async def test_result_errors_count_as_failure(self) -> None:
        """A ModelResult carrying errors is a load failure."""
        model = _mock_model()
        model.list = AsyncMock(
            return_value=ModelResult(data=[], errors=["Tag record has no id"])
        )
        table = RecordTable(model, RecordingNotifier())

        assert await table.load() is False
        assert table.state is TableState.FAILED

    @pytest.mark.asyncio
    async def test_invalid_rows_are_skipped(self) -> None:
        """Rows that do not fit the schema are dropped; the rest still load."""
        rows = [
            {"id": f"p{i}", "title": f"Post {i}", "status": "DRAFT"} for i in range(1, 6)
        ]
        rows.insert(2, {"id": "bad", "title": "Lowercase", "status": "draft"})
        table, _, notifier = _table({"posts": rows}, entity="Post")

        assert await table.load() is True
        assert table.state is TableState.READY
        assert [r["id"] for r in table.records] == ["p1", "p2", "p3", "p4", "p5"]
        assert len(table.rejected) == 1
        assert "draft" in table.rejected[0]
        assert notifier.alerts == []

    @pytest.mark.asyncio
    async def test_load_twice_is_idempotent(self) -> None:
        """Two loads with no mutation in between yield identical caches."""
        table, _, _ = _table({"tags": make_tags(5)})
        await table.load()
        first = [dict(r) for r in table.records]
        await table.load()
        assert table.records == first

    @pytest.mark.asyncio
    async def test_stale_load_is_discarded(self) -> None:
        """A slower, older load cannot overwrite a newer one."""
        slow_gate = asyncio.Event()
        calls = 0

        async def list_records() -> ModelResult:
            nonlocal calls
            calls += 1
            if calls == 1:
                await slow_gate.wait()
                return ModelResult(data=[{"id": "stale"}])
            return ModelResult(data=[{"id": "fresh"}])

        model = _mock_model()
        model.list = list_records
        table = RecordTable(model, RecordingNotifier())

        older = asyncio.create_task(table.load())
        await asyncio.sleep(0)
        assert await table.load() is True
        slow_gate.set()
        assert await older is False

        assert [r["id"] for r in table.records] == ["fresh"]
        assert table.state is TableState.READY


# ============================================================================
# Test: search()
# ============================================================================


class TestSearch:
    """Verify client-side case-insensitive substring search."""

    RECORDS = [
        {"id": "1", "name": "Rock", "slug": "rock"},
        {"id": "2", "name": "Jazz", "slug": "jazz-fusion"},
        {"id": "3", "name": "Pop", "slug": None},
        {"id": "4", "name": "Hard ROCK", "slug": "hard"},
    ]

    def test_empty_term_matches_all(self) -> None:
        """search("") returns every record."""
        assert filter_records(self.RECORDS, ["name", "slug"], "") == self.RECORDS

    def test_case_insensitive(self) -> None:
        """Matching ignores case on both sides."""
        result = filter_records(self.RECORDS, ["name"], "rOcK")
        assert [r["id"] for r in result] == ["1", "4"]

    def test_any_search_field_matches(self) -> None:
        """A record is kept when at least one search field matches."""
        result = filter_records(self.RECORDS, ["name", "slug"], "fusion")
        assert [r["id"] for r in result] == ["2"]

    def test_only_configured_fields_are_searched(self) -> None:
        """Fields outside search_fields never match."""
        assert filter_records(self.RECORDS, ["slug"], "Pop") == []

    def test_none_values_never_match(self) -> None:
        """Missing or None values are skipped, not stringified."""
        assert filter_records(self.RECORDS, ["slug"], "none") == []

    def test_exact_subset_property(self) -> None:
        """search(t) is exactly the records with a matching search field."""
        for term in ["", "o", "ROCK", "z", "-", "xyz"]:
            expected = [
                r
                for r in self.RECORDS
                if not term
                or any(
                    r.get(k) is not None and term.lower() in str(r[k]).lower()
                    for k in ["name", "slug"]
                )
            ]
            assert filter_records(self.RECORDS, ["name", "slug"], term) == expected

    def test_numbers_and_booleans_use_string_form(self) -> None:
        """Non-string values are matched through their string form."""
        records = [{"id": "1", "count": 42}, {"id": "2", "count": 7}]
        assert filter_records(records, ["count"], "4") == [records[0]]

    @pytest.mark.asyncio
    async def test_search_makes_no_network_call(self) -> None:
        """search() is a pure function of the cache."""
        model = _mock_model()
        model.list = AsyncMock(return_value=ModelResult(data=make_tags(3)))
        table = RecordTable(model, RecordingNotifier())
        await table.load()
        model.list.reset_mock()

        assert len(table.search("tag 0")) == 3
        model.list.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_search_resets_page(self) -> None:
        """Changing the search term returns to page 1."""
        table, _, _ = _table({"tags": make_tags(25)})
        await table.load()
        table.go_to_page(3)

        table.set_search("tag 1")
        assert table.current_page == 1
        assert [r["id"] for r in table.filtered] == [f"t{i}" for i in range(10, 20)]


# ============================================================================
# Test: paginate()
# ============================================================================


class TestPaginate:
    """Verify slicing, page count and clamping."""

    @pytest.mark.parametrize("n,p", [(0, 10), (1, 10), (10, 10), (11, 10), (25, 7), (3, 1)])
    def test_pages_reproduce_filtered_set(self, n: int, p: int) -> None:
        """ceil(n/p) pages, each at most p long, concatenating to the input."""
        records = [{"id": str(i)} for i in range(n)]
        total = math.ceil(n / p)

        pages = [paginate_records(records, k, p) for k in range(1, total + 1)]
        assert all(page.total_pages == total for page in pages)
        assert all(len(page.items) <= p for page in pages)
        assert [r for page in pages for r in page.items] == records

    def test_out_of_range_clamps_high(self) -> None:
        """A page past the end clamps to the last page."""
        records = [{"id": str(i)} for i in range(25)]
        page = paginate_records(records, 99, 10)
        assert page.page == 3
        assert [r["id"] for r in page.items] == [str(i) for i in range(20, 25)]

    def test_out_of_range_clamps_low(self) -> None:
        """Page 0 or negative clamps to page 1."""
        records = [{"id": str(i)} for i in range(25)]
        assert paginate_records(records, 0, 10).page == 1
        assert paginate_records(records, -4, 10).page == 1

    def test_empty_set(self) -> None:
        """No records: zero pages, page 1, empty items."""
        page = paginate_records([], 5, 10)
        assert page.total_pages == 0
        assert page.page == 1
        assert page.items == []
        assert page.summary() == "Showing 0 to 0 of 0 results"

    def test_summary_bounds(self) -> None:
        """Summary shows 1-based start/end of the current slice."""
        records = [{"id": str(i)} for i in range(42)]
        page = paginate_records(records, 2, 10)
        assert page.summary() == "Showing 11 to 20 of 42 results"
        last = paginate_records(records, 5, 10)
        assert last.summary() == "Showing 41 to 42 of 42 results"
        assert last.has_previous and not last.has_next

    def test_invalid_page_size(self) -> None:
        """page_size below 1 is rejected."""
        with pytest.raises(ValueError):
            paginate_records([], 1, 0)

    def test_explicit_zero_page_size_is_rejected(self, tag_table) -> None:
        """paginate(page_size=0) is not silently replaced by the default."""
        with pytest.raises(ValueError):
            tag_table.paginate(page_size=0)

    @pytest.mark.asyncio
    async def test_explicit_page_size_overrides_default(self) -> None:
        table, _, _ = _table({"tags": make_tags(5)})
        await table.load()
        page = table.paginate(1, page_size=2)
        assert [r["id"] for r in page.items] == ["t01", "t02"]
        assert page.total_pages == 3

    @pytest.mark.asyncio
    async def test_next_and_previous_clamp(self) -> None:
        """Navigation never leaves [1, total_pages]."""
        table, _, _ = _table({"tags": make_tags(15)})
        await table.load()

        assert table.previous_page().page == 1
        assert table.next_page().page == 2
        assert table.next_page().page == 2
        assert len(table.paginate().items) == 5

    @pytest.mark.asyncio
    async def test_default_page_size_is_ten(self) -> None:
        """Tables page by 10 unless configured otherwise."""
        table, _, _ = _table({"tags": make_tags(12)})
        await table.load()
        page = table.paginate(1)
        assert page.page_size == 10
        assert page.total_pages == 2


# ============================================================================
# Test: open_create() / open_edit() / form_fields()
# ============================================================================


class TestEditor:
    """Verify modal edit state and draft handling."""

    def test_open_create_starts_empty(self, tag_table) -> None:
        """Create opens with an empty draft and no target."""
        editor = tag_table.open_create()
        assert editor.mode is EditMode.CREATE
        assert editor.draft == {}
        assert editor.target_id is None
        assert tag_table.state is TableState.EDITING
        assert tag_table.editor_title == "Create Tag"

    def test_open_edit_copies_record(self, tag_table) -> None:
        """Edit starts from a shallow copy; editing the draft leaves the record alone."""
        record = {"id": "t1", "name": "Rock", "slug": "rock"}
        editor = tag_table.open_edit(record)
        editor.draft["name"] = "Changed"

        assert record["name"] == "Rock"
        assert editor.target_id == "t1"
        assert tag_table.editor_title == "Edit Tag"

    def test_open_edit_requires_id(self, tag_table) -> None:
        """A record without id cannot be edited."""
        with pytest.raises(ValueError):
            tag_table.open_edit({"name": "Rock"})

    def test_close_editor(self, tag_table) -> None:
        """Closing the editor returns to the data state."""
        tag_table.open_create()
        tag_table.close_editor()
        assert tag_table.editor is None
        assert tag_table.state is TableState.IDLE

    def test_create_form_hides_immutable_fields(self, tag_table) -> None:
        """id, createdAt and updatedAt are not editable on create."""
        tag_table.open_create()
        keys = [f.key for f in tag_table.form_fields()]
        assert keys == ["name", "slug", "color"]

    def test_edit_form_shows_id_read_only(self, tag_table) -> None:
        """id is shown read-only while editing; timestamps stay hidden."""
        tag_table.open_edit({"id": "t1", "name": "Rock", "slug": "rock"})
        controls = tag_table.inputs()
        assert [c.key for c in controls] == ["id", "name", "slug", "color"]
        assert controls[0].read_only is True
        assert controls[0].value == "t1"
        assert not any(c.read_only for c in controls[1:])

    def test_inputs_empty_without_editor(self, tag_table) -> None:
        assert tag_table.inputs() == []


# ============================================================================
# Test: submit()
# ============================================================================


class TestSubmit:
    """Verify create/update submission and resynchronization."""

    @pytest.mark.asyncio
    async def test_create_round_trip(self) -> None:
        """Created draft shows up after reload with a new id."""
        table, adapter, _ = _table({})
        await table.load()
        draft = {"name": "Rock", "slug": "rock", "color": "#FF6B6B"}

        table.open_create()
        assert await table.submit(draft) is True

        assert table.editor is None
        assert table.state is TableState.READY
        assert len(table.records) == 1
        record = table.records[0]
        assert record["id"]
        assert {k: record[k] for k in draft} == draft

    @pytest.mark.asyncio
    async def test_tag_scenario_renders_one_row(self) -> None:
        """Creating a Tag then loading shows exactly one row with its values."""
        table, _, _ = _table({})
        table.open_create()
        await table.submit({"name": "Rock", "slug": "rock", "color": "#FF6B6B"})

        page = table.paginate(1)
        assert len(page.items) == 1
        row = table.render_row(page.items[0])
        assert row[0] != "-"
        assert row[1:4] == ["Rock", "rock", "● #FF6B6B"]

    @pytest.mark.asyncio
    async def test_create_strips_id_and_timestamps(self) -> None:
        """id/createdAt/updatedAt never reach create()."""
        model = _mock_model()
        table = RecordTable(model, RecordingNotifier())
        table.open_create()

        await table.submit({
            "id": "forged",
            "name": "Rock",
            "slug": "rock",
            "createdAt": "2020-01-01T00:00:00Z",
            "updatedAt": "2020-01-01T00:00:00Z",
        })
        model.create.assert_awaited_once_with({"name": "Rock", "slug": "rock"})

    @pytest.mark.asyncio
    async def test_update_sends_id_and_draft(self) -> None:
        """Update on abc123 with {isActive: False} sends exactly that."""
        model = _mock_model("User")
        table = RecordTable(model, RecordingNotifier())
        table.open_edit({"id": "abc123", "email": "a@example.com", "isActive": True})

        assert await table.submit({"isActive": False}) is True
        model.update.assert_awaited_once_with({"id": "abc123", "isActive": False})
        model.list.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_scenario_renders_inactive(self) -> None:
        """After update and reload, isActive renders as the inactive indicator."""
        rows = {"users": [{"id": "abc123", "email": "a@example.com", "isActive": True}]}
        table, adapter, _ = _table(rows, entity="User")
        await table.load()

        table.open_edit(table.records[0])
        await table.submit({"isActive": False})

        assert adapter.rows("users")[0]["isActive"] is False
        record = table.records[0]
        active = table.config.field("isActive")
        assert table.render_field(active, record["isActive"], record) == "❌ Inactive"

    @pytest.mark.asyncio
    async def test_update_with_full_draft_strips_timestamps(self) -> None:
        """Submitting the editor's own draft omits id and timestamps from the fields."""
        model = _mock_model()
        table = RecordTable(model, RecordingNotifier())
        table.open_edit({
            "id": "t1",
            "name": "Rock",
            "slug": "rock",
            "createdAt": "2026-01-01T00:00:00Z",
        })

        await table.submit()
        model.update.assert_awaited_once_with({"id": "t1", "name": "Rock", "slug": "rock"})

    @pytest.mark.asyncio
    async def test_failure_keeps_editor_and_draft(self) -> None:
        """A rejected save alerts and leaves the modal open with the draft."""
        model = _mock_model()
        model.create = AsyncMock(side_effect=RuntimeError("conflict"))
        notifier = RecordingNotifier()
        table = RecordTable(model, notifier)
        table.open_create()
        draft = {"name": "Rock", "slug": "rock"}

        assert await table.submit(draft) is False
        assert notifier.alerts == ["Error saving item"]
        assert table.state is TableState.EDITING
        assert table.editor.draft == draft
        assert "conflict" in table.editor.error
        model.list.assert_not_called()

    @pytest.mark.asyncio
    async def test_result_errors_are_a_failure(self) -> None:
        """A create result with errors is treated as a failed save."""
        model = _mock_model()
        model.create = AsyncMock(return_value=ModelResult(errors=["bad slug"]))
        notifier = RecordingNotifier()
        table = RecordTable(model, notifier)
        table.open_create()

        assert await table.submit({"name": "Rock", "slug": "rock"}) is False
        assert notifier.alerts == ["Error saving item"]

    @pytest.mark.asyncio
    async def test_required_fields_checked_on_create(self) -> None:
        """Blank required fields alert without calling the API."""
        model = _mock_model()
        notifier = RecordingNotifier()
        table = RecordTable(model, notifier)
        table.open_create()

        assert await table.submit({"name": "Rock", "slug": "  "}) is False
        model.create.assert_not_called()
        assert "slug" in notifier.alerts[0]
        assert table.state is TableState.EDITING

    @pytest.mark.asyncio
    async def test_required_fields_absent_from_update_are_fine(self) -> None:
        """Partial updates need not repeat required fields."""
        model = _mock_model("User")
        table = RecordTable(model, RecordingNotifier())
        table.open_edit({"id": "abc123"})

        assert await table.submit({"role": "ADMIN"}) is True

    @pytest.mark.asyncio
    async def test_submit_without_editor_raises(self, tag_table) -> None:
        with pytest.raises(RuntimeError):
            await tag_table.submit({"name": "Rock"})

    @pytest.mark.asyncio
    async def test_double_submit_is_ignored(self) -> None:
        """A second submit while one is in flight issues no second call."""
        gate = asyncio.Event()

        async def slow_create(fields: dict) -> ModelResult:
            await gate.wait()
            return ModelResult(data={"id": "new", **fields})

        model = _mock_model()
        model.create = AsyncMock(side_effect=slow_create)
        table = RecordTable(model, RecordingNotifier())
        table.open_create()
        draft = {"name": "Rock", "slug": "rock"}

        first = asyncio.create_task(table.submit(draft))
        await asyncio.sleep(0)
        assert await table.submit(draft) is False
        gate.set()
        assert await first is True
        assert model.create.await_count == 1

    @pytest.mark.asyncio
    async def test_resubmit_during_reload_is_ignored(self) -> None:
        """A second submit while the post-save reload runs is not an error."""
        gate = asyncio.Event()

        async def slow_list() -> ModelResult:
            await gate.wait()
            return ModelResult(data=[{"id": "new", "name": "Rock", "slug": "rock"}])

        model = _mock_model()
        model.list = AsyncMock(side_effect=slow_list)
        table = RecordTable(model, RecordingNotifier())
        table.open_create()
        draft = {"name": "Rock", "slug": "rock"}

        first = asyncio.create_task(table.submit(draft))
        for _ in range(5):
            await asyncio.sleep(0)
        assert model.create.await_count == 1
        assert table.editor is None

        assert await table.submit(draft) is False
        gate.set()
        assert await first is True
        assert model.create.await_count == 1
        assert [r["id"] for r in table.records] == ["new"]

    @pytest.mark.asyncio
    async def test_editor_opened_during_save_stays_open(self) -> None:
        """A successful save only closes the editor it was submitted from."""
        gate = asyncio.Event()

        async def slow_create(fields: dict) -> ModelResult:
            await gate.wait()
            return ModelResult(data={"id": "new", **fields})

        model = _mock_model()
        model.create = AsyncMock(side_effect=slow_create)
        table = RecordTable(model, RecordingNotifier())
        table.open_create()

        first = asyncio.create_task(table.submit({"name": "Rock", "slug": "rock"}))
        await asyncio.sleep(0)
        reopened = table.open_edit({"id": "t9", "name": "Jazz", "slug": "jazz"})
        gate.set()
        assert await first is True

        assert table.editor is reopened
        assert table.state is TableState.EDITING


# ============================================================================
# Test: remove()
# ============================================================================


class TestRemove:
    """Verify confirmed deletion."""

    @pytest.mark.asyncio
    async def test_declined_confirmation_changes_nothing(self) -> None:
        """Answering no issues no delete call and keeps the cache."""
        table, adapter, notifier = _table({"tags": make_tags(2)}, answer=False)
        await table.load()

        assert await table.remove("t01") is False
        assert notifier.prompts == ["Are you sure you want to delete this item?"]
        assert len(table.records) == 2
        assert len(adapter.rows("tags")) == 2

    @pytest.mark.asyncio
    async def test_declined_confirmation_skips_api(self) -> None:
        model = _mock_model()
        table = RecordTable(model, RecordingNotifier(answer=False))
        await table.remove("t01")
        model.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_confirmed_delete_resyncs(self) -> None:
        """Confirmed delete removes the record and reloads."""
        table, adapter, _ = _table({"tags": make_tags(2)})
        await table.load()

        assert await table.remove("t01") is True
        assert [r["id"] for r in table.records] == ["t02"]
        assert [r["id"] for r in adapter.rows("tags")] == ["t02"]

    @pytest.mark.asyncio
    async def test_delete_failure_alerts(self) -> None:
        """A rejected delete alerts and does not reload."""
        model = _mock_model()
        model.delete = AsyncMock(side_effect=RuntimeError("forbidden"))
        notifier = RecordingNotifier()
        table = RecordTable(model, notifier)

        assert await table.remove("t01") is False
        assert notifier.alerts == ["Error deleting item"]
        model.list.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_result_errors_alert(self) -> None:
        """A delete the API reports errors for is a failure."""
        model = _mock_model()
        model.delete = AsyncMock(return_value=ModelResult(errors=["tags: permission denied"]))
        notifier = RecordingNotifier()
        table = RecordTable(model, notifier)

        assert await table.remove("t01") is False
        assert notifier.alerts == ["Error deleting item"]
        model.list.assert_not_called()


class TestConstruction:
    def test_rejects_zero_page_size(self, adapter) -> None:
        with pytest.raises(ValueError):
            RecordTable(
                BoundModel(adapter, get_table_config("Tag")),
                RecordingNotifier(),
                page_size=0,
            )
