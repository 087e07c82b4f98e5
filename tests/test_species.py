"""
Species form validation, repository and the edit dialog flow.
"""

from pathlib import Path

import httpx
import pytest
from postgrest import APIError
from pydantic import ValidationError

from src.species.edit_flow import (
    NO_ROW_MESSAGE,
    UNEXPECTED_MESSAGE,
    DialogState,
    EditSpeciesDialog,
    can_edit,
)
from src.species.models import (
    PLACEHOLDER_IMAGE,
    Species,
    SpeciesForm,
    display_title,
    form_errors,
    format_population,
    image_src,
)
from src.species.repository import SpeciesRepository, SpeciesServiceError


def _valid_values(**overrides):
    values = {
        "common_name": "Snow leopard",
        "scientific_name": "Panthera uncia",
        "kingdom": "Animalia",
        "total_population": "4,500",
        "image": "",
        "description": "Updated description.",
    }
    values.update(overrides)
    return values


# ============================================================
# Form validation
# ============================================================

def test_form_normalizes_population_and_image():
    form = SpeciesForm.model_validate(_valid_values())
    assert form.total_population == 4500
    assert form.image is None


@pytest.mark.parametrize(
    "raw, expected",
    [("", None), (None, None), ("1,234,567", 1234567), (" 12.5 ", 12.5), ("lots", None), (42, 42)],
)
def test_population_parsing(raw, expected):
    assert SpeciesForm(common_name="x", total_population=raw).total_population == expected


def test_common_name_required():
    with pytest.raises(ValidationError) as exc:
        SpeciesForm.model_validate(_valid_values(common_name=""))
    assert form_errors(exc.value) == {"common_name": "Common name is required"}


def test_missing_common_name_is_reported_too():
    with pytest.raises(ValidationError) as exc:
        SpeciesForm.model_validate({})
    assert "common_name" in form_errors(exc.value)


def test_image_must_be_url():
    with pytest.raises(ValidationError) as exc:
        SpeciesForm.model_validate(_valid_values(image="not a url"))
    assert form_errors(exc.value) == {"image": "Invalid url"}

    form = SpeciesForm.model_validate(_valid_values(image="https://example.org/a.png"))
    assert form.image == "https://example.org/a.png"


def test_payload_contains_only_editable_fields():
    payload = SpeciesForm.model_validate(_valid_values()).to_payload()
    assert set(payload) == {
        "common_name",
        "scientific_name",
        "kingdom",
        "total_population",
        "image",
        "description",
    }


def test_initial_values_from_species():
    species = Species(id=3, common_name=None, total_population=12)
    values = SpeciesForm.initial_values(species)
    assert values["common_name"] == ""
    assert values["total_population"] == 12
    assert values["image"] == ""


# ============================================================
# Display helpers
# ============================================================

def test_display_helpers():
    assert format_population(1234567) == "1,234,567"
    assert format_population(None) == "Unknown"
    assert display_title(Species(id=1, scientific_name="Ambystoma")) == "Ambystoma"
    assert display_title(Species(id=1)) == "Species details"


def test_image_src_falls_back_to_placeholder():
    assert image_src(Species(id=1, image="https://example.org/a.png")) == "https://example.org/a.png"
    assert image_src(Species(id=1, image=None)) == PLACEHOLDER_IMAGE
    assert image_src(Species(id=1, image="")) == PLACEHOLDER_IMAGE
    assert Path(PLACEHOLDER_IMAGE).is_file()
    assert Path(PLACEHOLDER_IMAGE).read_text(encoding="utf-8").lstrip().startswith("<svg")


# ============================================================
# Authorization affordance
# ============================================================

def test_can_edit_only_for_author(author_id):
    mine = Species(id=1, author=author_id)
    theirs = Species(id=2, author="someone-else")
    orphan = Species(id=3, author=None)

    assert can_edit(author_id, mine) is True
    assert can_edit(author_id, theirs) is False
    assert can_edit(None, mine) is False
    assert can_edit("", orphan) is False
    assert can_edit(None, orphan) is False


# ============================================================
# Repository
# ============================================================

def test_list_species_projects_fields(fake_supabase):
    species = SpeciesRepository(fake_supabase).list_species()

    assert [s.id for s in species] == [1, 2]
    assert species[0].author is not None
    query = fake_supabase.tables["species"].queries[-1]
    assert "created_at" not in query.columns
    assert query.order_by == "id"


def test_update_returns_projected_row(fake_supabase):
    repo = SpeciesRepository(fake_supabase)
    updated = repo.update(1, {"common_name": "Ounce"})

    assert updated.common_name == "Ounce"
    query = fake_supabase.tables["species"].queries[-1]
    assert query.op == "update"
    assert query.filters == [("id", 1)]


def test_update_no_row_returns_none(fake_supabase):
    assert SpeciesRepository(fake_supabase).update(999, {"common_name": "x"}) is None


def test_update_transport_error_is_wrapped(fake_supabase):
    fake_supabase.tables["species"].error = httpx.ConnectError("connection refused")
    with pytest.raises(SpeciesServiceError, match="connection refused"):
        SpeciesRepository(fake_supabase).update(1, {"common_name": "x"})


# ============================================================
# Edit dialog flow
# ============================================================

@pytest.fixture
def snow_leopard(species_rows):
    return Species.model_validate({k: v for k, v in species_rows[0].items() if k != "created_at"})


def test_dialog_success_merges_closes_and_refreshes(fake_supabase, snow_leopard):
    saved, refreshed = [], []
    dialog = EditSpeciesDialog(
        snow_leopard,
        SpeciesRepository(fake_supabase),
        on_saved=saved.append,
        on_refresh=lambda: refreshed.append(True),
    )
    dialog.open()
    assert dialog.state == DialogState.OPEN

    assert dialog.submit(_valid_values(common_name="Ounce")) is True

    assert dialog.state == DialogState.CLOSED
    assert dialog.species.common_name == "Ounce"
    assert dialog.species.total_population == 4500
    assert dialog.species.author == snow_leopard.author
    assert saved == [dialog.species]
    assert refreshed == [True]


def test_dialog_validation_error_blocks_request(fake_supabase, snow_leopard):
    dialog = EditSpeciesDialog(snow_leopard, SpeciesRepository(fake_supabase))
    dialog.open()

    assert dialog.submit(_valid_values(common_name="", image="nope")) is False

    assert dialog.state == DialogState.OPEN
    assert set(dialog.field_errors) == {"common_name", "image"}
    assert fake_supabase.tables["species"].queries == []


def test_dialog_no_row_keeps_local_state(fake_supabase, snow_leopard):
    fake_supabase.tables["species"].can_update = lambda row: False
    saved = []
    dialog = EditSpeciesDialog(snow_leopard, SpeciesRepository(fake_supabase), on_saved=saved.append)
    dialog.open()

    assert dialog.submit(_valid_values(common_name="Hijacked")) is False

    assert dialog.state == DialogState.OPEN
    assert dialog.message == NO_ROW_MESSAGE
    assert dialog.species == snow_leopard
    assert saved == []


def test_dialog_service_error_surfaces_message(fake_supabase, snow_leopard):
    fake_supabase.tables["species"].error = APIError(
        {"message": "permission denied for table species", "code": "42501", "hint": None, "details": None}
    )
    dialog = EditSpeciesDialog(snow_leopard, SpeciesRepository(fake_supabase))
    dialog.open()

    assert dialog.submit(_valid_values()) is False
    assert dialog.state == DialogState.OPEN
    assert dialog.message.startswith("Failed to update species: ")
    assert "permission denied" in dialog.message


def test_dialog_unexpected_error(snow_leopard):
    class BrokenRepository:
        def update(self, species_id, payload):
            raise KeyError("boom")

    dialog = EditSpeciesDialog(snow_leopard, BrokenRepository())
    dialog.open()

    assert dialog.submit(_valid_values()) is False
    assert dialog.message == UNEXPECTED_MESSAGE
    assert dialog.state == DialogState.OPEN


def test_dialog_open_resets_form(fake_supabase, snow_leopard):
    dialog = EditSpeciesDialog(snow_leopard, SpeciesRepository(fake_supabase))
    dialog.open()
    dialog.submit(_valid_values(common_name=""))
    dialog.close()
    dialog.open()

    assert dialog.field_errors == {}
    assert dialog.values["common_name"] == "Snow leopard"


def test_dialog_submit_ignored_unless_open(fake_supabase, snow_leopard):
    dialog = EditSpeciesDialog(snow_leopard, SpeciesRepository(fake_supabase))

    assert dialog.submit(_valid_values(common_name="Ounce")) is False
    assert dialog.state == DialogState.CLOSED
    assert fake_supabase.tables["species"].queries == []

    dialog.open()
    dialog.state = DialogState.SUBMITTING
    assert dialog.submit(_valid_values(common_name="Ounce")) is False
    assert fake_supabase.tables["species"].queries == []
