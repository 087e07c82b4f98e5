# api/routers.py
"""
API routing layer.

Responsibilities:
- Auth redirect callback (code -> session cookies)
- Species listing and editing
- Species speed dataset + chart spec

Business rules live in src/; routes only translate outcomes to HTTP.
"""

from typing import Any, List, Optional, Union

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from api.deps import get_cookie_storage, get_settings, get_species_repository, get_supabase
from api.models import FieldErrorResponse, SpeciesUpdateRequest, SpeedChartResponse
from src.auth.session import CookieSessionStorage, exchange_code_for_session, get_current_user
from src.config.settings import Settings
from src.species.edit_flow import NO_ROW_MESSAGE, failure_message
from src.species.models import Species, SpeciesForm, form_errors
from src.species.repository import SpeciesRepository, SpeciesServiceError
from src.speed.ingest import load_animals
from src.speed.ranking import select_top
from src.speed.render import chart_spec, chart_width
from src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="", tags=["api"])


def _coerce_id(species_id: str) -> Union[int, str]:
    return int(species_id) if species_id.isdigit() else species_id


# =============================================================================
# AUTH
# =============================================================================

@router.get("/auth/callback", summary="Exchange an auth code for a session")
def auth_callback(
    request: Request,
    code: Optional[str] = None,
    storage: CookieSessionStorage = Depends(get_cookie_storage),
    client=Depends(get_supabase),
):
    """
    Redirect target of the auth provider. Stores the session in cookies
    and sends the user to the species page.
    """
    if code:
        try:
            exchange_code_for_session(client, code)
        except Exception as e:
            # The user still lands on /species, signed out
            logger.error(f"[auth] Code exchange failed: {e}")

    origin = str(request.base_url).rstrip("/")
    response = RedirectResponse(f"{origin}/species", status_code=307)
    storage.apply(response)
    return response
# =============================================================================
# SPECIES
# =============================================================================

def _error_response(storage: CookieSessionStorage, status_code: int, content: Any) -> JSONResponse:
    """
    Error reply that still carries pending session cookies.

    The session may have been refreshed while handling the request; the
    rotated tokens must reach the browser on every exit path.
    """
    response = JSONResponse(status_code=status_code, content=content)
    storage.apply(response)
    return response


@router.get("/species", response_model=List[Species], summary="List species")
def list_species(
    response: Response,
    storage: CookieSessionStorage = Depends(get_cookie_storage),
    repo: SpeciesRepository = Depends(get_species_repository),
):
    try:
        species = repo.list_species()
    except SpeciesServiceError as e:
        return _error_response(storage, 502, {"detail": f"Failed to load species: {e}"})
    storage.apply(response)
    return species


@router.patch(
    "/species/{species_id}",
    response_model=Species,
    summary="Update one species",
    responses={422: {"model": FieldErrorResponse}},
)
def update_species(
    species_id: str,
    req: SpeciesUpdateRequest,
    response: Response,
    storage: CookieSessionStorage = Depends(get_cookie_storage),
    client=Depends(get_supabase),
    repo: SpeciesRepository = Depends(get_species_repository),
):
    """
    Validate the form values and update the row.

    Authorization is enforced by the table's RLS policy; a row the
    session may not edit comes back as 404 like an unknown id.
    """
    try:
        form = SpeciesForm.model_validate(req.model_dump())
    except ValidationError as e:
        return _error_response(storage, 422, FieldErrorResponse(fields=form_errors(e)).model_dump())

    if get_current_user(client) is None:
        return _error_response(storage, 401, {"detail": "Sign in to edit species."})

    try:
        updated = repo.update(_coerce_id(species_id), form.to_payload())
    except SpeciesServiceError as e:
        return _error_response(storage, 502, {"detail": failure_message(str(e))})

    if updated is None:
        return _error_response(storage, 404, {"detail": NO_ROW_MESSAGE})

    storage.apply(response)
    return updated


# =============================================================================
# SPECIES SPEED
# =============================================================================

@router.get("/species-speed", response_model=SpeedChartResponse, summary="Top animals by speed")
async def species_speed(
    width: Optional[int] = Query(default=None, ge=0),
    settings: Settings = Depends(get_settings),
):
    """
    Load the speed CSV and return the ranked selection and chart spec.

    Load failures yield an empty selection rather than an error.
    """
    records = await load_animals(settings.species_speed_csv)
    dataset = select_top(records or [])

    return SpeedChartResponse(
        count=len(dataset),
        animals=list(dataset),
        spec=chart_spec(dataset, chart_width(width)),
    )
