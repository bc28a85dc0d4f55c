"""record-table: Configuration-driven CRUD tables over a managed data API.

Binds any entity of the content data API to list, search, paginate,
create, update and delete operations, driven by a declarative
``TableConfig``.  Ships a typed registry of the built-in content entities,
async adapters for Supabase (optional), PostgreSQL and an in-process store,
multi-profile configuration, and a terminal front end.

Usage:
    from record_table import RecordTable, BoundModel, InMemoryAdapter
    from record_table import Entity, get_table_config, open_table
    from record_table import FieldSpec, TableConfig, load_config
"""

__version__ = "0.1.0"

# Adapters
from record_table.adapters.base import DataClient
from record_table.adapters.memory import InMemoryAdapter
from record_table.adapters.model import BoundModel, ModelResult
from record_table.adapters.postgres import AsyncPostgresAdapter

# Config
from record_table.config.loader import load_config
from record_table.config.models import AppConfig, BackendProfile

# Errors
from record_table.errors import (
    ConfigError,
    DataAPIError,
    ModelError,
    ProfileNotFoundError,
    RecordTableError,
    RecordValidationError,
    RequiredFieldError,
)

# Factory
from record_table.factory import (
    create_client,
    get_active_profile_name,
    open_table,
    resolve_url,
)

# Schema
from record_table.schema.entities import Entity, get_table_config
from record_table.schema.fields import EnumOption, FieldSpec, FieldType, TableConfig
from record_table.schema.records import validate_record

# Table
from record_table.table.controller import Page, RecordTable, TableState
from record_table.table.notifier import Notifier

__all__ = [
    # Adapters
    "DataClient",
    "BoundModel",
    "ModelResult",
    "InMemoryAdapter",
    "AsyncPostgresAdapter",
    # Config
    "load_config",
    "AppConfig",
    "BackendProfile",
    # Errors
    "RecordTableError",
    "ConfigError",
    "DataAPIError",
    "ModelError",
    "ProfileNotFoundError",
    "RecordValidationError",
    "RequiredFieldError",
    # Factory
    "create_client",
    "get_active_profile_name",
    "open_table",
    "resolve_url",
    # Schema
    "Entity",
    "get_table_config",
    "EnumOption",
    "FieldSpec",
    "FieldType",
    "TableConfig",
    "validate_record",
    # Table
    "Notifier",
    "Page",
    "RecordTable",
    "TableState",
]

# Optional: AsyncSupabaseAdapter (only available with supabase extra)
try:
    from record_table.adapters.supabase import AsyncSupabaseAdapter

    __all__.append("AsyncSupabaseAdapter")
except ImportError:
    # supabase extra not installed -- AsyncSupabaseAdapter unavailable
    pass
