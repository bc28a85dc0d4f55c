"""Record table: controller, rendering, and notifier protocol.

Usage:
    from record_table.table import RecordTable, Notifier, render_field
"""

from record_table.table.controller import (
    DEFAULT_PAGE_SIZE,
    EditMode,
    EditorState,
    Page,
    RecordTable,
    TableState,
    filter_records,
    paginate_records,
)
from record_table.table.notifier import Notifier
from record_table.table.render import (
    InputControl,
    parse_input,
    render_field,
    render_input,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "EditMode",
    "EditorState",
    "InputControl",
    "Notifier",
    "Page",
    "RecordTable",
    "TableState",
    "filter_records",
    "paginate_records",
    "parse_input",
    "render_field",
    "render_input",
]
