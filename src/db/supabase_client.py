# src/db/supabase_client.py
"""
Supabase client construction for the species catalog.

Responsibilities:
- Build a configured Supabase client from Settings
- Optionally attach a session storage (cookies, Streamlit state)
- Thin table accessor used by repositories

Clients are created explicitly by the caller (UI session, API request)
and passed down; nothing here keeps a process-wide instance.
"""

from typing import Any, Optional

from supabase import Client, ClientOptions, create_client

from src.config.settings import ConfigurationError, Settings
from src.utils.logger import get_logger

logger = get_logger(__name__)


def create_supabase_client(settings: Settings, storage: Optional[Any] = None) -> Client:
    """
    Create a Supabase client for one consumer.

    storage, when given, must expose get_item / set_item / remove_item;
    it is where the auth layer keeps the session and the PKCE verifier.

    Raises ConfigurationError if credentials are missing.
    """
    if not settings.has_supabase:
        raise ConfigurationError(
            "Supabase is not configured. "
            "Please set SUPABASE_URL and SUPABASE_ANON_KEY."
        )

    logger.info("[db] Initializing Supabase client")

    if storage is None:
        return create_client(settings.supabase_url, settings.supabase_anon_key)

    options = ClientOptions(
        storage=storage,
        flow_type="pkce",
        persist_session=True,
        auto_refresh_token=True,
    )
    return create_client(settings.supabase_url, settings.supabase_anon_key, options=options)


class DB:
    """
    Thin database access wrapper around an injected client.

    Keeps repository code independent of the concrete client so tests can
    pass an in-memory fake.
    """

    def __init__(self, client: Client):
        self.client = client

    def table(self, name: str):
        """
        Access a Supabase table.
        """
        return self.client.table(name)
