"""
STREAMLIT UI — SPECIES CATALOG
------------------------------

Pages:
- Home:           sign in / sign out
- Species:        species cards, detail dialog, author-only edit dialog
- Species Speed:  top animals by speed, loaded from the speed CSV

Session state holds the per-visitor Supabase client (its auth session
lives in session_state too), the open edit dialogs and the speed view.

Run with:
    streamlit run src/ui/app.py
"""

import asyncio
from typing import Optional

import streamlit as st

from src.auth.session import (
    MappingSessionStorage,
    SessionUser,
    get_current_user,
    send_magic_link,
    sign_out,
    verify_email_code,
)
from src.config.settings import ConfigurationError, Settings, load_settings
from src.db.supabase_client import create_supabase_client
from src.species.repository import SpeciesRepository, SpeciesServiceError
from src.speed.view import AnimalSpeedView
from src.ui.components.charts import render_species_speed
from src.ui.components.navbar import HOME, SPECIES, SPECIES_CHATBOT, SPECIES_SPEED, render_navbar
from src.ui.components.species_card import edit_species_dialog, get_edit_dialog, render_species_card
from src.utils.logger import get_logger

logger = get_logger(__name__)

# =============================================================================
# PAGE CONFIGURATION
# =============================================================================

st.set_page_config(
    page_title="Species Catalog",
    page_icon="🐾",
    layout="wide",
)

# =============================================================================
# STARTUP (missing credentials stop the app)
# =============================================================================

try:
    settings: Settings = load_settings(require_supabase=True)
except ConfigurationError as e:
    logger.error(f"[config] {e}")
    st.error(str(e))
    st.stop()

if "supabase" not in st.session_state:
    st.session_state.supabase = create_supabase_client(
        settings,
        storage=MappingSessionStorage(st.session_state),
    )

client = st.session_state.supabase
repository = SpeciesRepository(client, table=settings.species_table)

user: Optional[SessionUser] = get_current_user(client)

# =============================================================================
# PAGES
# =============================================================================


def home_page():
    st.markdown("<h1 style='margin-bottom:0.2rem;'>🐾 Species Catalog</h1>", unsafe_allow_html=True)
    st.caption("Browse species · Edit your entries · Compare top speeds")

    if user is not None:
        st.success(f"Signed in as {user.email or user.id}")
        if st.button("Sign out"):
            sign_out(client)
            st.session_state.pop("sign_in_email", None)
            st.rerun()
        return

    with st.form("sign_in"):
        email = st.text_input("Email")
        submitted = st.form_submit_button("Send sign-in code")

    if submitted and email.strip():
        try:
            send_magic_link(client, email.strip(), settings.site_url)
        except Exception as e:
            logger.error(f"[auth] Sign-in code request failed: {e}")
            st.error("Could not send the sign-in code.")
        else:
            st.session_state.sign_in_email = email.strip()

    # The session is created here, in this browser session, from the emailed code
    pending_email = st.session_state.get("sign_in_email")
    if not pending_email:
        return

    st.info(f"Enter the code sent to {pending_email}.")
    with st.form("verify_code"):
        token = st.text_input("Sign-in code")
        verified = st.form_submit_button("Sign in")

    if verified and token.strip():
        try:
            signed_in = verify_email_code(client, pending_email, token.strip())
        except Exception as e:
            logger.error(f"[auth] Code verification failed: {e}")
            st.error("That code is invalid or expired.")
            return

        if signed_in is None:
            st.error("That code is invalid or expired.")
            return

        st.session_state.pop("sign_in_email", None)
        st.rerun()


def species_page():
    st.markdown("### 🦎 Species")

    try:
        species_list = repository.list_species()
    except SpeciesServiceError as e:
        st.error(f"Failed to load species: {e}")
        return

    if not species_list:
        st.info("No species yet.")
        return

    # Edit requested from a detail dialog on the previous run
    pending = st.session_state.pop("pending_edit", None)
    if pending is not None:
        target = next((s for s in species_list if s.id == pending), None)
        if target is not None:
            dialog = get_edit_dialog(target, repository)
            dialog.open()
            edit_species_dialog(dialog)

    session_id = user.id if user else None
    columns = st.columns(3)
    for idx, species in enumerate(species_list):
        with columns[idx % 3]:
            render_species_card(species, session_id)


def species_speed_page():
    st.markdown("### 🐆 Species Speed")

    view: Optional[AnimalSpeedView] = st.session_state.get("speed_view")
    if view is None:
        view = AnimalSpeedView(settings.species_speed_csv)
        st.session_state.speed_view = view
        asyncio.run(view.load())

    if st.button("Reload data"):
        asyncio.run(view.load())

    render_species_speed(view.dataset)


def leave_species_speed():
    view = st.session_state.pop("speed_view", None)
    if view is not None:
        view.teardown()


# =============================================================================
# ROUTING
# =============================================================================

page = render_navbar(user)

if page != SPECIES_SPEED:
    leave_species_speed()

if page == HOME:
    home_page()
elif page == SPECIES:
    species_page()
elif page == SPECIES_SPEED:
    species_speed_page()
elif page == SPECIES_CHATBOT:
    st.markdown("### 💬 Species Chatbot")
    st.info("The species chatbot is not available in this deployment.")
