"""Pydantic models describing how a table displays and edits records.

This module contains the table-configuration models:
- ``FieldType``: closed set of field kinds
- ``EnumOption``: one ``{value, label}`` choice of an enum field
- ``FieldSpec``: display/edit description of one record attribute
- ``TableConfig``: the full per-entity configuration

Invalid configurations fail at construction time with a pydantic
``ValidationError``.

Usage:
    from record_table.schema.fields import FieldSpec, FieldType, TableConfig

    config = TableConfig(
        model_name="Tag",
        title="Tags",
        fields=[
            FieldSpec(key="id", label="ID"),
            FieldSpec(key="name", label="Name", required=True),
            FieldSpec(key="slug", label="Slug", required=True),
        ],
        search_fields=["name", "slug"],
    )
"""

from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, Field, field_validator, model_validator

# Platform-assigned keys that the UI never sends back on create
ID_FIELD = "id"
TIMESTAMP_FIELDS = ("createdAt", "updatedAt")
IMMUTABLE_FIELDS = frozenset((ID_FIELD, *TIMESTAMP_FIELDS))

# Alternative spellings accepted for field types
_TYPE_ALIASES = {
    "string": "text",
    "select": "enum",
}


class FieldType(str, Enum):
    """Kind of value a field holds."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    ENUM = "enum"


class EnumOption(BaseModel):
    """One selectable choice of an enum field."""

    value: str
    label: str


RenderFn = Callable[[Any, dict], str]


class FieldSpec(BaseModel):
    """Configuration of one record attribute.

    ``render`` receives ``(value, record)`` and always takes precedence
    over the type-based display.
    """

    key: str = Field(min_length=1)
    label: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: list[EnumOption] = Field(default_factory=list)
    render: RenderFn | None = Field(default=None, exclude=True)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _TYPE_ALIASES.get(value, value)
        return value

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, value: Any) -> Any:
        # Bare strings are shorthand for {value: s, label: s}
        if value is None:
            return []
        return [
            {"value": opt, "label": opt} if isinstance(opt, str) else opt
            for opt in value
        ]

    @model_validator(mode="after")
    def _enum_needs_options(self) -> "FieldSpec":
        if self.type is FieldType.ENUM and not self.options:
            raise ValueError(f"Enum field '{self.key}' has no options")
        return self

    @property
    def option_values(self) -> list[str]:
        """Allowed values of an enum field, in display order."""
        return [opt.value for opt in self.options]


class TableConfig(BaseModel):
    """Complete configuration of one record table.

    Example:
        >>> config = TableConfig(
        ...     model_name="Todo",
        ...     title="Todos",
        ...     fields=[FieldSpec(key="content", label="Content")],
        ...     search_fields=["content"],
        ... )
        >>> config.table_name
        'Todo'
        >>> config.singular_title
        'Todo'
    """

    model_name: str = Field(min_length=1)
    title: str
    fields: list[FieldSpec]
    search_fields: list[str] = Field(default_factory=list)
    table_name: str | None = None

    @model_validator(mode="after")
    def _check_keys(self) -> "TableConfig":
        seen: set[str] = set()
        for spec in self.fields:
            if spec.key in seen:
                raise ValueError(
                    f"Duplicate field key '{spec.key}' in {self.model_name}"
                )
            seen.add(spec.key)

        unknown = [key for key in self.search_fields if key not in seen]
        if unknown:
            raise ValueError(
                f"Search fields not configured on {self.model_name}: "
                f"{', '.join(unknown)}"
            )

        if self.table_name is None:
            self.table_name = self.model_name
        return self

    @property
    def singular_title(self) -> str:
        """Title with its trailing character dropped ("Tags" -> "Tag")."""
        return self.title[:-1]

    def field(self, key: str) -> FieldSpec | None:
        """Return the field spec for ``key``, or None if not configured."""
        for spec in self.fields:
            if spec.key == key:
                return spec
        return None

    @property
    def field_keys(self) -> list[str]:
        """Configured field keys in display order."""
        return [spec.key for spec in self.fields]
