"""
System integrity tests for the species catalog.

These tests verify that:
- Core modules import correctly
- Public entry points are callable
- No external services (Supabase, network) are required

IMPORTANT:
- These are NOT functional correctness tests
- They validate architecture integrity & CI safety
"""


# ============================================================
# Import integrity
# ============================================================

def test_core_imports():
    """Ensure all major modules import without side effects."""
    import src.config.settings
    import src.db.supabase_client
    import src.auth.session

    import src.speed.ingest
    import src.speed.ranking
    import src.speed.scales
    import src.speed.render
    import src.speed.view

    import src.species.models
    import src.species.repository
    import src.species.edit_flow

    import api.main
    import api.routers


# ============================================================
# Entry points
# ============================================================

def test_public_callables():
    from api.main import create_app
    from src.speed.ingest import load_animals
    from src.speed.ranking import select_top
    from src.speed.render import render

    assert callable(create_app)
    assert callable(load_animals)
    assert callable(select_top)
    assert callable(render)


def test_ui_components_import():
    """Streamlit components import without a running script context."""
    import src.ui.components.charts
    import src.ui.components.navbar
    import src.ui.components.species_card
