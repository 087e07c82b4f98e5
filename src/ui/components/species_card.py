"""
SPECIES CARD / DETAIL / EDIT COMPONENTS
---------------------------------------

Responsibilities:
- Card per species with thumbnail, names and short description
- Detail dialog with kingdom, population and full description
- Edit dialog for the species' author, driven by EditSpeciesDialog

Text from the database is escaped before it is rendered as HTML.
"""

from html import escape
from typing import Any, Callable, Dict, Optional

import streamlit as st

from src.species.edit_flow import DialogState, EditSpeciesDialog, can_edit
from src.species.models import Species, display_title, format_population, image_src
from src.species.repository import SpeciesRepository

# =============================================================================
# UTILITIES
# =============================================================================

def _safe(text: Any) -> str:
    return escape(str(text)) if text is not None else ""


def _dialog_key(species: Species) -> str:
    return f"edit_dialog_{species.id}"


def get_edit_dialog(
    species: Species,
    repository: SpeciesRepository,
    on_saved: Optional[Callable[[Species], None]] = None,
) -> EditSpeciesDialog:
    """
    One EditSpeciesDialog per species, kept across Streamlit reruns.
    """
    key = _dialog_key(species)
    dialog = st.session_state.get(key)
    if dialog is None or dialog.species.id != species.id:
        dialog = EditSpeciesDialog(species, repository, on_saved=on_saved, on_refresh=st.rerun)
        st.session_state[key] = dialog
    elif dialog.state == DialogState.CLOSED:
        dialog.species = species
    return dialog


# =============================================================================
# EDIT DIALOG
# =============================================================================

@st.dialog("Edit species")
def edit_species_dialog(dialog: EditSpeciesDialog):
    """Call dialog.open() before showing this; it resets the form."""
    values: Dict[str, Any] = dialog.values
    errors = dialog.field_errors

    with st.form(f"edit_species_form_{dialog.species.id}"):
        common_name = st.text_input("Common name", value=values.get("common_name") or "")
        if "common_name" in errors:
            st.error(errors["common_name"])

        scientific_name = st.text_input("Scientific name", value=values.get("scientific_name") or "")
        kingdom = st.text_input("Kingdom", value=values.get("kingdom") or "")

        population = values.get("total_population")
        total_population = st.text_input(
            "Total population",
            value="" if population is None else str(population),
        )
        if "total_population" in errors:
            st.error(errors["total_population"])

        image = st.text_input("Image URL", value=values.get("image") or "")
        if "image" in errors:
            st.error(errors["image"])

        description = st.text_area("Description", value=values.get("description") or "", height=140)

        col_cancel, col_save = st.columns(2)
        cancelled = col_cancel.form_submit_button("Cancel", use_container_width=True)
        saved = col_save.form_submit_button("Save", type="primary", use_container_width=True)

    if cancelled:
        dialog.close()
        st.rerun()

    if saved:
        with st.spinner("Saving..."):
            ok = dialog.submit(
                {
                    "common_name": common_name,
                    "scientific_name": scientific_name,
                    "kingdom": kingdom,
                    "total_population": total_population,
                    "image": image,
                    "description": description,
                }
            )
        if not ok:
            if dialog.field_errors:
                # redraw only the dialog so errors show under their fields
                st.rerun(scope="fragment")
            elif dialog.message:
                st.error(dialog.message)


# =============================================================================
# DETAIL DIALOG
# =============================================================================

def render_species_detail(species: Species):
    """Body of the detail view (used inside the detail dialog)."""
    if species.scientific_name:
        st.markdown(f"*Scientific name: {_safe(species.scientific_name)}*")

    st.image(image_src(species), use_container_width=True)

    st.markdown("**Kingdom**")
    st.write(species.kingdom or "—")

    st.markdown("**Total population**")
    st.write(format_population(species.total_population))

    st.divider()

    st.markdown("**Description**")
    st.write(species.description or "No description available.")


def render_detail_actions(species: Species, session_id: Optional[str]):
    """Edit (author only) and Close buttons under the detail view."""
    col_edit, col_close = st.columns(2)

    # Advisory only: the species table's RLS policy is the real check
    if can_edit(session_id, species):
        if col_edit.button("Edit", key=f"edit_{species.id}"):
            st.session_state["pending_edit"] = species.id
            st.rerun()

    if col_close.button("Close", key=f"close_{species.id}"):
        st.rerun()


@st.dialog("Species details", width="large")
def species_detail_dialog(species: Species, session_id: Optional[str]):
    st.subheader(display_title(species))
    render_species_detail(species)
    render_detail_actions(species, session_id)


# =============================================================================
# CARD
# =============================================================================

def render_species_card(species: Species, session_id: Optional[str]):
    """
    Render one species card with its "Learn more" trigger.
    """
    with st.container(border=True):
        col_img, col_text = st.columns([0.25, 0.75])

        with col_img:
            st.image(image_src(species), width=48)

        with col_text:
            st.markdown(f"**{_safe(species.common_name or 'Unnamed')}**")
            st.caption(f"*{_safe(species.scientific_name or '')}*")

        description = species.description or "No brief description available."
        st.markdown(
            f"<div style='font-size:0.85rem;opacity:0.8;'>{_safe(description[:220])}</div>",
            unsafe_allow_html=True,
        )

        if st.button("Learn more", key=f"learn_more_{species.id}"):
            species_detail_dialog(species, session_id)
