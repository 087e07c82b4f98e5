# src/species/repository.py
"""
Data access for the `species` table.

All calls go through the Supabase client handed to the constructor.
Row-level security on the table decides what the current session may
read or change; an update the policy rejects simply matches no rows.
"""

from typing import Any, Dict, List, Optional, Union

import httpx
from postgrest import APIError

from src.config.settings import SPECIES_TABLE
from src.db.supabase_client import DB
from src.species.models import SPECIES_FIELDS, Species, project_row
from src.utils.logger import get_logger

logger = get_logger(__name__)


class SpeciesServiceError(RuntimeError):
    """Transport or service failure while talking to the species table."""


class SpeciesRepository:
    def __init__(self, client: Any, table: str = SPECIES_TABLE):
        self.db = DB(client)
        self.table_name = table

    def list_species(self) -> List[Species]:
        """
        All readable species, ordered by id.
        """
        try:
            response = (
                self.db.table(self.table_name)
                .select(",".join(SPECIES_FIELDS))
                .order("id")
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"[species] List failed: {e}")
            raise SpeciesServiceError(_error_message(e)) from e

        return [Species.model_validate(project_row(row)) for row in response.data or []]

    def update(self, species_id: Union[int, str], payload: Dict[str, Any]) -> Optional[Species]:
        """
        Update one row by id and return it as stored.

        Returns None when nothing matched: unknown id, or the RLS policy
        filtered the row out for this session.
        """
        logger.info(f"[species] Updating species id={species_id!r}")
        try:
            response = (
                self.db.table(self.table_name)
                .update(payload)
                .eq("id", species_id)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"[species] Update error for id={species_id!r}: {e}")
            raise SpeciesServiceError(_error_message(e)) from e

        rows = response.data or []
        if not rows:
            logger.warning(f"[species] Update matched no row for id={species_id!r}")
            return None
        if len(rows) > 1:
            logger.warning(f"[species] Update matched {len(rows)} rows for id={species_id!r}")

        return Species.model_validate(project_row(rows[0]))


def _error_message(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    return str(message) if message else str(exc)
