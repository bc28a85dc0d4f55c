"""Display and edit rendering for table fields.

- ``render_field``: cell text for one value
- ``render_input``: description of the edit control for one field
- ``parse_input``: typed value from a raw control value

Datetime inputs follow the ``datetime-local`` convention: the control holds
``YYYY-MM-DDTHH:MM`` in UTC and submits an ISO-8601 UTC string.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from record_table.schema.fields import ID_FIELD, EnumOption, FieldSpec, FieldType
from record_table.schema.records import parse_datetime

PLACEHOLDER = "-"
TRUE_MARK = "✅"
FALSE_MARK = "❌"
DATE_FORMAT = "%x"
DATETIME_LOCAL_FORMAT = "%Y-%m-%dT%H:%M"
UNSELECTED_LABEL = "Select..."

InputKind = Literal["checkbox", "select", "number", "datetime-local", "text"]


class InputControl(BaseModel):
    """Editable control for one field of the draft."""

    key: str
    label: str
    kind: InputKind
    value: Any = None
    required: bool = False
    read_only: bool = False
    options: list[EnumOption] = Field(default_factory=list)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        try:
            return parse_datetime(value)
        except ValueError:
            return None
    return None


def render_field(field: FieldSpec, value: Any, record: dict | None = None) -> str:
    """Render one cell.

    A field's own ``render`` always wins.  Otherwise booleans become a
    check or cross, datetimes the local date, and empty values ``"-"``.
    """
    if field.render is not None:
        return field.render(value, record or {})

    if field.type is FieldType.BOOLEAN:
        return TRUE_MARK if value else FALSE_MARK

    if field.type is FieldType.DATETIME:
        moment = _as_datetime(value)
        if moment is None:
            return PLACEHOLDER if _is_empty(value) else str(value)
        return moment.astimezone().strftime(DATE_FORMAT)

    if _is_empty(value):
        return PLACEHOLDER
    return str(value)


def to_datetime_local(value: Any) -> str:
    """Format a datetime value for a ``datetime-local`` control (UTC)."""
    moment = _as_datetime(value)
    if moment is None:
        return ""
    return moment.astimezone(timezone.utc).strftime(DATETIME_LOCAL_FORMAT)


def from_datetime_local(raw: str) -> str | None:
    """Convert a ``datetime-local`` control value to an ISO-8601 UTC string."""
    if not raw:
        return None
    moment = parse_datetime(raw).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def render_input(field: FieldSpec, value: Any, editing: bool = False) -> InputControl:
    """Describe the edit control for ``field`` holding ``value``.

    The ``id`` field is read-only while editing an existing record.
    """
    control = InputControl(
        key=field.key,
        label=field.label,
        kind="text",
        required=field.required,
        read_only=editing and field.key == ID_FIELD,
    )

    if field.type is FieldType.BOOLEAN:
        control.kind = "checkbox"
        control.value = bool(value)
        control.required = False
    elif field.type is FieldType.ENUM:
        control.kind = "select"
        control.value = "" if value is None else str(value)
        control.options = [EnumOption(value="", label=UNSELECTED_LABEL), *field.options]
    elif field.type is FieldType.NUMBER:
        control.kind = "number"
        control.value = "" if value is None else value
    elif field.type is FieldType.DATETIME:
        control.kind = "datetime-local"
        control.value = to_datetime_local(value)
    else:
        control.value = "" if value is None else str(value)

    return control


def parse_input(field: FieldSpec, raw: Any) -> Any:
    """Convert a raw control value back to the field's typed value.

    Raises:
        ValueError: If a number or datetime control holds unparsable text,
            or a select holds a value outside its options.
    """
    if field.type is FieldType.BOOLEAN:
        if isinstance(raw, str):
            return raw.strip().lower() in ("true", "1", "yes", "on", "y")
        return bool(raw)

    if field.type is FieldType.NUMBER:
        if _is_empty(raw):
            return None
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return raw
        text = str(raw).strip()
        try:
            return int(text)
        except ValueError:
            return float(text)

    if field.type is FieldType.DATETIME:
        if _is_empty(raw):
            return None
        return from_datetime_local(str(raw))

    if field.type is FieldType.ENUM:
        if _is_empty(raw):
            return None
        text = str(raw)
        if text not in field.option_values:
            raise ValueError(
                f"'{text}' is not a valid {field.label}; choose from "
                f"{', '.join(field.option_values)}"
            )
        return text

    return "" if raw is None else str(raw)
