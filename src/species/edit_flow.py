# src/species/edit_flow.py
"""
Species edit dialog logic, independent of any UI toolkit.

States:
    closed -> open -> submitting -> closed          (saved)
                                 -> open + message  (service error / no row)
    open -> open + field_errors                     (validation failed, no request)

can_edit() only decides whether to *show* the edit control. The real
authorization is the RLS policy on the species table keyed on `author`;
a forged request from a non-author matches no row and lands in the
"no row returned" branch.
"""

from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import ValidationError

from src.species.models import Species, SpeciesForm, form_errors
from src.species.repository import SpeciesRepository, SpeciesServiceError
from src.utils.logger import get_logger

logger = get_logger(__name__)

NO_ROW_MESSAGE = (
    "Update did not return a row. This usually means the id didn't match any row, "
    "or you aren't authorized to edit this species."
)
UNEXPECTED_MESSAGE = "An unexpected error occurred while updating the species."


def failure_message(detail: str) -> str:
    return f"Failed to update species: {detail}"


def can_edit(session_id: Optional[str], species: Species) -> bool:
    """Show the edit control only to the species' author."""
    return bool(session_id) and bool(species.author) and session_id == species.author


class DialogState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


class EditSpeciesDialog:
    """
    One edit dialog bound to one species.

    on_saved receives the merged species after a successful update;
    on_refresh is called afterwards so dependent views can reload.
    """

    def __init__(
        self,
        species: Species,
        repository: SpeciesRepository,
        on_saved: Optional[Callable[[Species], None]] = None,
        on_refresh: Optional[Callable[[], None]] = None,
    ):
        self.species = species
        self.repository = repository
        self.on_saved = on_saved
        self.on_refresh = on_refresh

        self.state = DialogState.CLOSED
        self.values: Dict[str, Any] = SpeciesForm.initial_values(species)
        self.field_errors: Dict[str, str] = {}
        self.message: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state != DialogState.CLOSED

    def open(self) -> None:
        self.values = SpeciesForm.initial_values(self.species)
        self.field_errors = {}
        self.message = None
        self.state = DialogState.OPEN

    def close(self) -> None:
        if self.state == DialogState.SUBMITTING:
            return
        self.state = DialogState.CLOSED

    def validate(self, values: Mapping[str, Any]) -> Optional[SpeciesForm]:
        """Validate raw form values; fills field_errors on failure."""
        try:
            form = SpeciesForm.model_validate(dict(values))
        except ValidationError as e:
            self.field_errors = form_errors(e)
            return None
        self.field_errors = {}
        return form

    def submit(self, values: Mapping[str, Any]) -> bool:
        """
        Validate and save. Returns True when the dialog closed on success.
        """
        # Only an open dialog may submit; closed or in-flight ones are ignored
        if self.state != DialogState.OPEN:
            return False

        self.values = dict(values)
        self.message = None

        form = self.validate(values)
        if form is None:
            self.state = DialogState.OPEN
            return False

        self.state = DialogState.SUBMITTING
        try:
            updated = self.repository.update(self.species.id, form.to_payload())
        except SpeciesServiceError as e:
            self.message = failure_message(str(e))
            self.state = DialogState.OPEN
            return False
        except Exception:
            logger.exception(f"[species] Unexpected error while updating id={self.species.id!r}")
            self.message = UNEXPECTED_MESSAGE
            self.state = DialogState.OPEN
            return False

        if updated is None:
            self.message = NO_ROW_MESSAGE
            self.state = DialogState.OPEN
            return False

        self.species = self.species.merged(updated)
        self.state = DialogState.CLOSED
        logger.info(f"[species] Saved species id={self.species.id!r}")

        if self.on_saved is not None:
            self.on_saved(self.species)
        if self.on_refresh is not None:
            self.on_refresh()
        return True
