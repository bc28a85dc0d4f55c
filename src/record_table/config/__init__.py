"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from record_table.config import load_config, BackendProfile, AppConfig
"""

from record_table.config.loader import load_config, resolve_config_path
from record_table.config.models import AppConfig, BackendProfile, TableSettings

__all__ = [
    "load_config",
    "resolve_config_path",
    "AppConfig",
    "BackendProfile",
    "TableSettings",
]
