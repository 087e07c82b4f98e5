"""
Application settings.

Values are read from the environment (optionally seeded from a local
.env file) and collected into a single validated Settings object.

Missing Supabase credentials are a startup error: the UI and the API
both call load_settings(require_supabase=True) before doing anything
else and abort on ConfigurationError.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# =============================================================================
# DEFAULTS (overridable per call through the environment)
# =============================================================================

SPECIES_TABLE = os.getenv("SPECIES_TABLE", "species")
SPECIES_SPEED_CSV = os.getenv("SPECIES_SPEED_CSV", "data/sample_animals.csv")
SITE_URL = os.getenv("SITE_URL", "http://localhost:8501")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class ConfigurationError(RuntimeError):
    """Raised when required external-service credentials are absent."""


class Settings(BaseModel):
    """
    Resolved runtime configuration.
    """
    supabase_url: Optional[str] = Field(
        default=None,
        description="Base URL of the Supabase project.",
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Public anon key; RLS policies still apply to every call.",
    )
    species_table: str = Field(
        default="species",
        description="Name of the species table.",
    )
    species_speed_csv: str = Field(
        default="data/sample_animals.csv",
        description="Path or URL of the animal speed CSV.",
    )
    site_url: str = Field(
        default="http://localhost:8501",
        description="Public origin used for auth redirects.",
    )
    log_level: str = Field(default="INFO")

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def load_settings(require_supabase: bool = False) -> Settings:
    """
    Build Settings from the current environment.

    With require_supabase=True a missing URL or anon key raises
    ConfigurationError instead of returning a half-usable object.
    """
    settings = Settings(
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or None,
        species_table=os.getenv("SPECIES_TABLE", SPECIES_TABLE),
        species_speed_csv=os.getenv("SPECIES_SPEED_CSV", SPECIES_SPEED_CSV),
        site_url=os.getenv("SITE_URL", SITE_URL),
        log_level=os.getenv("LOG_LEVEL", LOG_LEVEL).upper(),
    )

    if require_supabase and not settings.has_supabase:
        raise ConfigurationError(
            "Supabase is not configured. "
            "Please set SUPABASE_URL and SUPABASE_ANON_KEY."
        )

    return settings
