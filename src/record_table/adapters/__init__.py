"""Data adapters package.

Provides the ``DataClient`` Protocol, the per-entity ``BoundModel`` and
concrete async adapters for PostgreSQL, an in-process store and
(optionally) Supabase.

``AsyncSupabaseAdapter`` is only available when the ``supabase`` extra
is installed.  A missing ``supabase`` dependency does not prevent
importing the rest of the package.

Usage:
    from record_table.adapters import DataClient, BoundModel, InMemoryAdapter

    # With supabase extra installed:
    from record_table.adapters import AsyncSupabaseAdapter
"""

from record_table.adapters.base import DataClient
from record_table.adapters.memory import InMemoryAdapter
from record_table.adapters.model import BoundModel, ModelResult
from record_table.adapters.postgres import AsyncPostgresAdapter

__all__ = [
    "DataClient",
    "BoundModel",
    "ModelResult",
    "InMemoryAdapter",
    "AsyncPostgresAdapter",
]

try:
    from record_table.adapters.supabase import AsyncSupabaseAdapter

    __all__.append("AsyncSupabaseAdapter")
except ImportError:
    # supabase extra not installed -- AsyncSupabaseAdapter unavailable
    pass
