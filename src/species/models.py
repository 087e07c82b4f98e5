# src/species/models.py
"""
Species schemas.

Species mirrors a row of the Supabase `species` table (projected to
SPECIES_FIELDS). SpeciesForm is the edit form: it receives raw form
input and normalizes it into the update payload.
"""

import math
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

SPECIES_FIELDS: Tuple[str, ...] = (
    "id",
    "common_name",
    "scientific_name",
    "kingdom",
    "total_population",
    "image",
    "description",
    "author",
)

EDITABLE_FIELDS: Tuple[str, ...] = (
    "common_name",
    "scientific_name",
    "kingdom",
    "total_population",
    "image",
    "description",
)

_URL = TypeAdapter(AnyUrl)

# Bundled stand-in for species without an image
PLACEHOLDER_IMAGE = str(Path(__file__).resolve().parent / "assets" / "placeholder-species.svg")

# =============================================================================
# ROW SCHEMA
# =============================================================================

class Species(BaseModel):
    """
    One species as stored remotely.

    author is the id of the user who created the row; it drives the edit
    affordance in the UI and the RLS policy on the server.
    """
    id: Union[int, str]
    common_name: Optional[str] = None
    scientific_name: Optional[str] = None
    kingdom: Optional[str] = None
    total_population: Optional[Union[int, float]] = None
    image: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None

    def merged(self, updated: "Species") -> "Species":
        """Copy of self with the updated row's fields laid over it."""
        changes = updated.model_dump(include=set(EDITABLE_FIELDS) | {"id"})
        if updated.author is not None:
            changes["author"] = updated.author
        return self.model_copy(update=changes)


def project_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the SPECIES_FIELDS of a raw table row."""
    return {key: row.get(key) for key in SPECIES_FIELDS if key in row}


# =============================================================================
# DISPLAY HELPERS
# =============================================================================

def format_population(value: Optional[Union[int, float]]) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "Unknown"
    return f"{value:,}"


def display_title(species: Species) -> str:
    return species.common_name or species.scientific_name or "Species details"


def image_src(species: Species) -> str:
    """Image to show for a species; the placeholder when it has none."""
    return species.image or PLACEHOLDER_IMAGE


# =============================================================================
# EDIT FORM
# =============================================================================

class SpeciesForm(BaseModel):
    """
    Validated edit-form values.

    - common_name: required
    - total_population: "1,234" -> 1234, "" -> None, unparseable -> None
    - image: valid URL, or "" -> None
    """
    common_name: str = Field(default="", validate_default=True)
    scientific_name: Optional[str] = None
    kingdom: Optional[str] = None
    total_population: Optional[Union[int, float]] = None
    image: Optional[str] = None
    description: Optional[str] = None

    @field_validator("common_name", mode="before")
    @classmethod
    def _common_name_required(cls, value: Any) -> str:
        if value is None or str(value) == "":
            raise ValueError("Common name is required")
        return str(value)

    @field_validator("total_population", mode="before")
    @classmethod
    def _parse_population(cls, value: Any) -> Optional[Union[int, float]]:
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            number = float(value)
        else:
            text = str(value).replace(",", "").strip()
            if not text:
                return None
            try:
                number = float(text)
            except ValueError:
                return None

        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number

    @field_validator("image", mode="before")
    @classmethod
    def _check_image_url(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        try:
            _URL.validate_python(value)
        except ValidationError:
            raise ValueError("Invalid url")
        return str(value)

    @classmethod
    def initial_values(cls, species: Species) -> Dict[str, Any]:
        """Raw form values pre-populated from a species row."""
        return {
            "common_name": species.common_name or "",
            "scientific_name": species.scientific_name or "",
            "kingdom": species.kingdom or "",
            "total_population": species.total_population,
            "image": species.image or "",
            "description": species.description or "",
        }

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(include=set(EDITABLE_FIELDS))


def form_errors(exc: ValidationError) -> Dict[str, str]:
    """
    Flatten a SpeciesForm ValidationError into {field: message}.
    """
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err.get("loc") else "__root__"
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors
