"""Data client and table factory.

Clients are always constructed explicitly and handed to the table that
uses them; nothing is cached at module level.  The caller owns the client
and closes it when the table goes away.

Profile resolution order:
1. Explicit ``profile_name`` argument
2. ``{env_prefix}RECORD_TABLE_PROFILE`` environment variable
3. The only profile, if exactly one is configured
4. Raise ``ProfileNotFoundError``

Usage:
    config = load_config()
    client = create_client(config, env_prefix="APP_")
    table = open_table("Tag", client, notifier, page_size=config.table.page_size)
    await table.load()
    ...
    await client.close()
"""

import logging
import os
from urllib.parse import quote

from record_table.adapters.base import DataClient
from record_table.adapters.memory import InMemoryAdapter
from record_table.adapters.model import BoundModel
from record_table.adapters.postgres import AsyncPostgresAdapter
from record_table.config.models import AppConfig, BackendProfile
from record_table.errors import ConfigError, ProfileNotFoundError
from record_table.schema.entities import Entity, datetime_columns, get_table_config
from record_table.table.controller import DEFAULT_PAGE_SIZE, RecordTable
from record_table.table.notifier import Notifier

logger = logging.getLogger(__name__)


# ============================================================================
# Profile Resolution
# ============================================================================


def get_active_profile_name(
    config: AppConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> str:
    """Pick the profile to connect with.

    Args:
        config: Loaded configuration.
        profile_name: Explicit profile, takes precedence over everything.
        env_prefix: Prefix for environment variable lookup.  For example,
            ``env_prefix="APP_"`` reads ``APP_RECORD_TABLE_PROFILE``.

    Returns:
        Name of a profile present in ``config``.

    Raises:
        ProfileNotFoundError: If no profile is selected or the selected one
            is not configured.
    """
    env_var = f"{env_prefix}RECORD_TABLE_PROFILE"
    name = profile_name or os.environ.get(env_var)

    if name is None and len(config.profiles) == 1:
        name = next(iter(config.profiles))

    available = ", ".join(config.profiles.keys()) or "(none)"
    if name is None:
        raise ProfileNotFoundError(
            "No backend profile selected.\n"
            f"Pass --profile or set {env_var}. Available profiles: {available}"
        )
    if name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{name}' not found. Available: {available}"
        )
    return name


def resolve_url(profile: BackendProfile) -> str:
    """Resolve profile URL with password substitution."""
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


# ============================================================================
# Client Factory
# ============================================================================


def create_profile_client(profile: BackendProfile) -> DataClient:
    """Construct the data client a profile describes.

    Raises:
        ConfigError: If the profile needs the ``supabase`` extra and it is
            not installed.
    """
    if profile.provider == "supabase":
        try:
            from record_table.adapters.supabase import AsyncSupabaseAdapter
        except ImportError as e:
            raise ConfigError(
                "Supabase profiles need the supabase extra: "
                "pip install 'record-table[supabase]'"
            ) from e
        return AsyncSupabaseAdapter(url=profile.url, key=profile.key)

    if profile.provider == "postgres":
        return AsyncPostgresAdapter(
            resolve_url(profile), datetime_columns=datetime_columns()
        )

    return InMemoryAdapter(path=profile.path)


def create_client(
    config: AppConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> DataClient:
    """Resolve the active profile and construct its data client."""
    name = get_active_profile_name(config, profile_name, env_prefix)
    profile = config.profiles[name]
    logger.debug(f"Using profile '{name}' ({profile.provider})")
    return create_profile_client(profile)


def open_table(
    entity: Entity | str,
    client: DataClient,
    notifier: Notifier,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> RecordTable:
    """Bind an entity's registered config to ``client`` and build its table.

    Raises:
        ConfigError: If ``entity`` is not a registered entity.
    """
    model = BoundModel(client, get_table_config(entity))
    return RecordTable(model, notifier, page_size=page_size)
