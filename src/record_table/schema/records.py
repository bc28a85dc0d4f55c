"""Record validation at the data-API boundary.

Rows coming back from a backend are untyped dicts.  ``validate_record``
coerces each configured field to the Python type of its ``FieldType``:

==========  ==========================================
FieldType   Python value
==========  ==========================================
text        ``str``
number      ``int`` or ``float``
boolean     ``bool``
datetime    timezone-aware ``datetime``
enum        ``str`` (must be one of the field options)
==========  ==========================================

``None`` is accepted for every kind.  Keys without a field spec are kept
verbatim so custom renderers can still read them.
"""

from datetime import datetime, timezone
from typing import Any

from record_table.errors import RecordValidationError
from record_table.schema.fields import ID_FIELD, FieldSpec, FieldType, TableConfig

_TRUE_STRINGS = frozenset(("true", "1", "yes", "on"))
_FALSE_STRINGS = frozenset(("false", "0", "no", "off", ""))


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string, treating a trailing ``Z`` and naive values as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce_value(spec: FieldSpec, value: Any) -> Any:
    """Coerce a raw value to the type of ``spec``.

    Raises:
        RecordValidationError: If the value cannot represent the field kind.
    """
    if value is None:
        return None

    kind = spec.type

    if kind is FieldType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise RecordValidationError(
            f"Field '{spec.key}' expects a boolean, got {value!r}"
        )

    if kind is FieldType.NUMBER:
        if isinstance(value, bool):
            raise RecordValidationError(
                f"Field '{spec.key}' expects a number, got {value!r}"
            )
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
            try:
                return float(value)
            except ValueError:
                pass
        raise RecordValidationError(
            f"Field '{spec.key}' expects a number, got {value!r}"
        )

    if kind is FieldType.DATETIME:
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        if isinstance(value, str):
            try:
                return parse_datetime(value)
            except ValueError:
                pass
        raise RecordValidationError(
            f"Field '{spec.key}' expects an ISO-8601 datetime, got {value!r}"
        )

    if kind is FieldType.ENUM:
        text = str(value)
        if text not in spec.option_values:
            raise RecordValidationError(
                f"Field '{spec.key}' value {text!r} is not one of "
                f"{spec.option_values}"
            )
        return text

    return value if isinstance(value, str) else str(value)


def validate_record(config: TableConfig, raw: dict[str, Any]) -> dict[str, Any]:
    """Validate one record from the data API against ``config``.

    Args:
        config: Table configuration describing the record's fields.
        raw: Record as returned by the backend.

    Returns:
        New dict with configured fields coerced and unknown keys copied.

    Raises:
        RecordValidationError: If the record has no ``id`` or a field value
            does not fit its kind.

    Example:
        >>> validate_record(config, {"id": "t1", "isActive": "false"})
        {'id': 't1', 'isActive': False}
    """
    if not isinstance(raw, dict):
        raise RecordValidationError(
            f"{config.model_name} record must be a mapping, got {type(raw).__name__}"
        )
    if not raw.get(ID_FIELD):
        raise RecordValidationError(f"{config.model_name} record has no id")

    record: dict[str, Any] = {}
    for key, value in raw.items():
        spec = config.field(key)
        record[key] = coerce_value(spec, value) if spec is not None else value
    record[ID_FIELD] = str(raw[ID_FIELD])
    return record
