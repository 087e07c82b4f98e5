# api/models.py
"""
Pydantic request/response models for the HTTP API.

Request bodies carry raw form input; normalization and validation of
the values happens in SpeciesForm so the UI and the API share one set of
rules.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from src.speed.ingest import AnimalRecord


class SpeciesUpdateRequest(BaseModel):
    """
    Raw edit-form values for one species.
    """
    common_name: Optional[str] = Field(
        default=None,
        description="Required by validation; sent as typed by the user.",
        examples=["Snow leopard"],
    )
    scientific_name: Optional[str] = Field(default=None, examples=["Panthera uncia"])
    kingdom: Optional[str] = Field(default=None, examples=["Animalia"])
    total_population: Optional[Union[int, float, str]] = Field(
        default=None,
        description="Number or comma-grouped text; empty means unknown.",
        examples=["4,500"],
    )
    image: Optional[str] = Field(
        default=None,
        description="Absolute image URL, or empty to clear.",
    )
    description: Optional[str] = None


class SpeedChartResponse(BaseModel):
    """
    Top-N animals by speed plus the Vega-Lite spec drawing them.
    """
    count: int = Field(..., description="Number of animals in the selection.")
    animals: List[AnimalRecord] = Field(default_factory=list)
    spec: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Vega-Lite chart; null when there is nothing to draw.",
    )


class FieldErrorResponse(BaseModel):
    """
    Validation failure of an edit request, keyed by field.
    """
    error: str = "Validation failed"
    fields: Dict[str, str] = Field(default_factory=dict)
