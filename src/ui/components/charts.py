"""
SPECIES SPEED CHART COMPONENT
-----------------------------

Streamlit side of the species speed chart: owns the placeholder the
chart is drawn into and hands it to the renderer.

Streamlit does not report element widths to Python, so the chart is laid
out for a fixed nominal container width; the renderer still enforces
its 700px minimum.
"""

from typing import Sequence

import streamlit as st

from src.speed.ingest import AnimalRecord
from src.speed.render import render

CONTAINER_WIDTH = 960


def render_species_speed(dataset: Sequence[AnimalRecord], container_width: int = CONTAINER_WIDTH) -> bool:
    """
    Draw the chart into a fresh placeholder. Empty data draws nothing.
    """
    placeholder = st.empty()
    return render(placeholder, dataset, container_width)
