"""TOML configuration loader.

Config file lookup order:
1. Explicit ``config_path`` argument
2. ``{env_prefix}RECORD_TABLE_CONFIG`` environment variable
3. ``./record-table.toml``
"""

import os
import tomllib
from pathlib import Path

from record_table.config.models import AppConfig, BackendProfile, TableSettings

DEFAULT_CONFIG_FILE = "record-table.toml"


def resolve_config_path(config_path: Path | str | None = None, env_prefix: str = "") -> Path:
    """Return the config file path that ``load_config`` would read."""
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get(f"{env_prefix}RECORD_TABLE_CONFIG")
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_FILE


def load_config(config_path: Path | str | None = None, env_prefix: str = "") -> AppConfig:
    """Load backend profiles and table settings from a TOML file.

    Args:
        config_path: Path to record-table.toml.
        env_prefix: Prefix for environment variable lookup.

    Returns:
        AppConfig with all profiles.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config format is invalid.
    """
    path = resolve_config_path(config_path, env_prefix)

    if not path.exists():
        raise FileNotFoundError(
            f"Config not found: {path}\n"
            f"Create {DEFAULT_CONFIG_FILE} with at least one [profiles.<name>] table."
        )

    with open(path, "rb") as f:
        data = tomllib.load(f)

    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = BackendProfile(**profile_data)

    return AppConfig(
        profiles=profiles,
        table=TableSettings(**data.get("table", {})),
    )
