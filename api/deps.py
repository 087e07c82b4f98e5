# api/deps.py
"""
Per-request dependencies.

Each request gets its own Supabase client whose session storage reads
the request cookies; routes that may touch the session write pending
cookie changes back with `storage.apply(response)`.
"""

from fastapi import Depends, Request

from src.auth.session import CookieSessionStorage
from src.config.settings import Settings
from src.db.supabase_client import create_supabase_client
from src.species.repository import SpeciesRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cookie_storage(request: Request) -> CookieSessionStorage:
    return CookieSessionStorage(request.cookies, secure=request.url.scheme == "https")


def get_supabase(
    settings: Settings = Depends(get_settings),
    storage: CookieSessionStorage = Depends(get_cookie_storage),
):
    return create_supabase_client(settings, storage=storage)


def get_species_repository(
    client=Depends(get_supabase),
    settings: Settings = Depends(get_settings),
) -> SpeciesRepository:
    return SpeciesRepository(client, table=settings.species_table)
