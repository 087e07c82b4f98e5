"""
NAVIGATION COMPONENT
--------------------

Sidebar navigation. Home is always available; the species pages only
appear once a session exists.
"""

from typing import List, Optional, Tuple

import streamlit as st

from src.auth.session import SessionUser

HOME = "Home"
SPECIES = "Species"
SPECIES_SPEED = "Species Speed"
SPECIES_CHATBOT = "Species Chatbot"

# (label, path)
PUBLIC_LINKS: List[Tuple[str, str]] = [(HOME, "/")]
MEMBER_LINKS: List[Tuple[str, str]] = [
    (SPECIES, "/species"),
    (SPECIES_SPEED, "/species-speed"),
    (SPECIES_CHATBOT, "/species-chatbot"),
]


def nav_links(user: Optional[SessionUser]) -> List[Tuple[str, str]]:
    """Links visible to this visitor, in display order."""
    if user is None:
        return list(PUBLIC_LINKS)
    return PUBLIC_LINKS + MEMBER_LINKS


def render_navbar(user: Optional[SessionUser]) -> str:
    """
    Render the sidebar menu and return the selected page label.
    """
    labels = [label for label, _ in nav_links(user)]

    with st.sidebar:
        st.markdown("### 🧭 Navigation")
        page = st.radio("Go to", labels, key="nav_page", label_visibility="collapsed")
        if user is not None:
            st.caption(f"Signed in as {user.email or user.id}")

    return page
