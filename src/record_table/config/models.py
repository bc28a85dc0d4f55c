"""Pydantic models for backend profiles and table settings."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator


# ============================================================================
# Configuration Models
# ============================================================================


class BackendProfile(BaseModel):
    """Data backend connection profile from record-table.toml."""

    provider: Literal["memory", "supabase", "postgres"] = "memory"
    url: str = ""
    key: str = ""  # Supabase anon or service key
    path: str | None = None  # JSON file backing a memory profile
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    description: str = ""

    @model_validator(mode="after")
    def _check_connection(self) -> "BackendProfile":
        if self.provider == "supabase" and not (self.url and self.key):
            raise ValueError("supabase profiles need both url and key")
        if self.provider == "postgres" and not self.url:
            raise ValueError("postgres profiles need a url")
        return self


class TableSettings(BaseModel):
    """``[table]`` section of record-table.toml."""

    page_size: int = Field(default=10, ge=1)


class AppConfig(BaseModel):
    """Complete configuration from record-table.toml."""

    profiles: dict[str, BackendProfile]
    table: TableSettings = Field(default_factory=TableSettings)
