"""Table schema: field specs, table configs, record validation, entity registry.

Usage:
    from record_table.schema import FieldSpec, FieldType, TableConfig
    from record_table.schema import Entity, get_table_config, validate_record
"""

from record_table.schema.entities import (
    ENTITY_CONFIGS,
    datetime_columns,
    Entity,
    get_table_config,
    resolve_entity,
)
from record_table.schema.fields import (
    ID_FIELD,
    IMMUTABLE_FIELDS,
    TIMESTAMP_FIELDS,
    EnumOption,
    FieldSpec,
    FieldType,
    TableConfig,
)
from record_table.schema.records import coerce_value, parse_datetime, validate_record

__all__ = [
    # Fields
    "EnumOption",
    "FieldSpec",
    "FieldType",
    "TableConfig",
    "ID_FIELD",
    "IMMUTABLE_FIELDS",
    "TIMESTAMP_FIELDS",
    # Records
    "coerce_value",
    "parse_datetime",
    "validate_record",
    # Entities
    "ENTITY_CONFIGS",
    "datetime_columns",
    "Entity",
    "get_table_config",
    "resolve_entity",
]
