"""Generic record table.

``RecordTable`` binds one entity's ``BoundModel`` to list, search, paginate,
create, update and delete operations, driven entirely by the entity's
``TableConfig``.

The local cache is an ordered list of records that is reloaded wholesale
after every successful mutation.  Network failures never raise out of the
table: they are logged, reported through the ``Notifier``, and leave the
table usable.

State machine::

    Idle -> Loading -> Ready | Failed
    Ready -> Editing (create | update) -> Ready      (submit succeeded)
                                       -> Editing    (submit failed, alert shown)

Usage:
    table = RecordTable(BoundModel(client, get_table_config("Tag")), notifier)
    await table.load()
    table.set_search("rock")
    page = table.paginate(1)
    table.open_create()
    await table.submit({"name": "Rock", "slug": "rock", "color": "#FF6B6B"})
"""

import logging
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from record_table.adapters.model import BoundModel
from record_table.errors import RequiredFieldError
from record_table.schema.fields import (
    ID_FIELD,
    IMMUTABLE_FIELDS,
    FieldSpec,
    TableConfig,
)
from record_table.table.notifier import Notifier
from record_table.table.render import InputControl, render_field, render_input

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DELETE_PROMPT = "Are you sure you want to delete this item?"
SAVE_ERROR = "Error saving item"
DELETE_ERROR = "Error deleting item"


class TableState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
    EDITING = "editing"


class EditMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class EditorState(BaseModel):
    """Open create/edit form."""

    mode: EditMode
    target_id: str | None = None
    draft: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class Page(BaseModel):
    """One page of the filtered records.

    ``start`` and ``end`` are the 1-based positions shown in the summary
    (both 0 when there are no records).
    """

    items: list[dict[str, Any]]
    page: int
    page_size: int
    total_pages: int
    total_count: int

    @property
    def start(self) -> int:
        if self.total_count == 0:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def end(self) -> int:
        return min(self.page * self.page_size, self.total_count)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def summary(self) -> str:
        """Human-readable position, e.g. ``"Showing 11 to 20 of 42 results"``."""
        return f"Showing {self.start} to {self.end} of {self.total_count} results"


def _search_text(value: Any) -> str | None:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def filter_records(
    records: list[dict[str, Any]], search_fields: list[str], term: str
) -> list[dict[str, Any]]:
    """Records where any search field contains ``term``, case-insensitively.

    An empty term keeps every record.  Order is preserved.
    """
    if not term:
        return list(records)
    needle = term.lower()
    kept: list[dict[str, Any]] = []
    for record in records:
        for key in search_fields:
            text = _search_text(record.get(key))
            if text is not None and needle in text.lower():
                kept.append(record)
                break
    return kept


def paginate_records(
    records: list[dict[str, Any]], page: int, page_size: int = DEFAULT_PAGE_SIZE
) -> Page:
    """Slice ``records`` into ``page``, clamping the page to ``[1, total_pages]``.

    Raises:
        ValueError: If ``page_size`` is less than 1.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    total_count = len(records)
    total_pages = math.ceil(total_count / page_size)
    page = max(1, min(page, max(total_pages, 1)))
    offset = (page - 1) * page_size
    return Page(
        items=records[offset:offset + page_size],
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_count=total_count,
    )


class RecordTable:
    """Configuration-driven table over one entity.

    Args:
        model: The entity's CRUD operations, bound to an explicitly
            constructed data client.
        notifier: Alert/confirm surface of the front end.
        page_size: Rows per page.
    """

    def __init__(
        self,
        model: BoundModel,
        notifier: Notifier,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.model = model
        self.notifier = notifier
        self.page_size = page_size

        self.records: list[dict[str, Any]] = []
        self.search_term: str = ""
        self.current_page: int = 1
        self.editor: EditorState | None = None
        self.last_error: str | None = None
        self.rejected: list[str] = []

        self._data_state: TableState = TableState.IDLE
        self._load_seq: int = 0
        self._submitting: bool = False

    @property
    def config(self) -> TableConfig:
        return self.model.config

    @property
    def state(self) -> TableState:
        if self.editor is not None:
            return TableState.EDITING
        return self._data_state

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Reload the cache from the data API.

        Rows that do not fit the table schema are skipped and listed in
        ``rejected``; they do not fail the load.

        Returns:
            True if the cache was replaced.  False on failure, or when a
            newer ``load()`` started while this one was in flight (its
            result is discarded).
        """
        self._load_seq += 1
        seq = self._load_seq
        self._data_state = TableState.LOADING
        name = self.model.name

        try:
            result = await self.model.list()
            result.raise_for_errors(name)
        except Exception as e:
            if seq != self._load_seq:
                logger.debug(f"Ignoring failure of superseded {name} load: {e}")
                return False
            logger.error(f"Error loading {name}: {e}")
            self.records = []
            self.rejected = []
            self.last_error = str(e)
            self._data_state = TableState.FAILED
            return False

        if seq != self._load_seq:
            logger.warning(f"Discarding stale {name} load result")
            return False

        self.records = list(result.data or [])
        self.rejected = list(result.rejected)
        self.last_error = None
        self._data_state = TableState.READY
        self.current_page = self._clamp_page(self.current_page)
        logger.debug(f"Loaded {len(self.records)} {name} records")
        return True

    # ------------------------------------------------------------------
    # Search and pagination
    # ------------------------------------------------------------------

    def search(self, term: str) -> list[dict[str, Any]]:
        """Cached records matching ``term`` on any search field."""
        return filter_records(self.records, self.config.search_fields, term)

    def set_search(self, term: str) -> None:
        """Change the active search term and return to the first page."""
        self.search_term = term
        self.current_page = 1

    @property
    def filtered(self) -> list[dict[str, Any]]:
        return self.search(self.search_term)

    def _clamp_page(self, page: int) -> int:
        total_pages = math.ceil(len(self.filtered) / self.page_size)
        return max(1, min(page, max(total_pages, 1)))

    def paginate(self, page: int | None = None, page_size: int | None = None) -> Page:
        """Page of the filtered records; defaults to the current page."""
        return paginate_records(
            self.filtered,
            self.current_page if page is None else page,
            self.page_size if page_size is None else page_size,
        )

    def go_to_page(self, page: int) -> Page:
        """Move to ``page`` (clamped) and return it."""
        self.current_page = self._clamp_page(page)
        return self.paginate()

    def next_page(self) -> Page:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> Page:
        return self.go_to_page(self.current_page - 1)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def open_create(self) -> EditorState:
        """Open the editor with an empty draft."""
        self.editor = EditorState(mode=EditMode.CREATE)
        return self.editor

    def open_edit(self, record: dict[str, Any]) -> EditorState:
        """Open the editor on a shallow copy of ``record``.

        Raises:
            ValueError: If the record has no ``id``.
        """
        record_id = record.get(ID_FIELD)
        if not record_id:
            raise ValueError(f"Cannot edit a {self.model.name} record without an id")
        self.editor = EditorState(
            mode=EditMode.UPDATE,
            target_id=str(record_id),
            draft=dict(record),
        )
        return self.editor

    def close_editor(self) -> None:
        self.editor = None

    def form_fields(self) -> list[FieldSpec]:
        """Fields shown in the editor.

        Creating hides ``id`` and the timestamps; editing shows ``id``
        (read-only) but still hides the timestamps.
        """
        editing = self.editor is not None and self.editor.mode is EditMode.UPDATE
        hidden = IMMUTABLE_FIELDS - {ID_FIELD} if editing else IMMUTABLE_FIELDS
        return [spec for spec in self.config.fields if spec.key not in hidden]

    def inputs(self) -> list[InputControl]:
        """Edit controls for the open editor's draft."""
        if self.editor is None:
            return []
        editing = self.editor.mode is EditMode.UPDATE
        return [
            render_input(spec, self.editor.draft.get(spec.key), editing=editing)
            for spec in self.form_fields()
        ]

    def _missing_required(self, draft: dict[str, Any], mode: EditMode) -> list[str]:
        missing: list[str] = []
        for spec in self.config.fields:
            if not spec.required or spec.key in IMMUTABLE_FIELDS:
                continue
            # Updates only send the keys present in the draft
            if mode is EditMode.UPDATE and spec.key not in draft:
                continue
            value = draft.get(spec.key)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(spec.key)
        return missing

    async def submit(self, draft: dict[str, Any] | None = None) -> bool:
        """Send the draft to the data API and resynchronize.

        Update sends ``{id, **draft}``; create sends the draft.  In both
        cases ``id``, ``createdAt`` and ``updatedAt`` are stripped from the
        draft first.  On success the editor closes and the table reloads.
        On failure an alert is shown and the editor stays open with the
        draft intact.

        Args:
            draft: Form values; defaults to the open editor's draft.

        Returns:
            True if the record was saved.

        Raises:
            RuntimeError: If no editor is open and no save is in flight.
        """
        # A save in flight may already have closed the editor
        if self._submitting:
            logger.warning(f"Ignoring duplicate {self.model.name} submit")
            return False
        editor = self.editor
        if editor is None:
            raise RuntimeError("submit() called with no editor open")

        values = dict(editor.draft if draft is None else draft)
        editor.draft = values
        payload = {k: v for k, v in values.items() if k not in IMMUTABLE_FIELDS}

        missing = self._missing_required(payload, editor.mode)
        if missing:
            message = str(RequiredFieldError(missing))
            editor.error = message
            self.notifier.alert(message)
            return False

        name = self.model.name
        self._submitting = True
        try:
            try:
                if editor.mode is EditMode.UPDATE:
                    result = await self.model.update({ID_FIELD: editor.target_id, **payload})
                else:
                    result = await self.model.create(payload)
                result.raise_for_errors(name)
            except Exception as e:
                logger.error(f"Error saving {name}: {e}")
                editor.error = str(e)
                self.notifier.alert(SAVE_ERROR)
                return False

            if self.editor is editor:
                self.editor = None
            await self.load()
            return True
        finally:
            self._submitting = False

    async def remove(self, record_id: str) -> bool:
        """Delete a record after explicit confirmation.

        Returns:
            True if the record was deleted.  A declined confirmation issues
            no API call and returns False.
        """
        name = self.model.name
        if not self.notifier.confirm(DELETE_PROMPT):
            logger.debug(f"Delete of {name} {record_id} cancelled")
            return False

        try:
            result = await self.model.delete({ID_FIELD: record_id})
            result.raise_for_errors(name)
        except Exception as e:
            logger.error(f"Error deleting {name}: {e}")
            self.notifier.alert(DELETE_ERROR)
            return False

        await self.load()
        return True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_field(
        self, field: FieldSpec, value: Any, record: dict[str, Any] | None = None
    ) -> str:
        return render_field(field, value, record)

    def render_input(self, field: FieldSpec, value: Any) -> InputControl:
        editing = self.editor is not None and self.editor.mode is EditMode.UPDATE
        return render_input(field, value, editing=editing)

    def render_row(self, record: dict[str, Any]) -> list[str]:
        """Cell text for every configured field of ``record``."""
        return [
            render_field(spec, record.get(spec.key), record)
            for spec in self.config.fields
        ]

    @property
    def editor_title(self) -> str:
        """``"Create Tag"`` or ``"Edit Tag"`` for the open editor."""
        verb = "Edit" if self.editor and self.editor.mode is EditMode.UPDATE else "Create"
        return f"{verb} {self.config.singular_title}"
