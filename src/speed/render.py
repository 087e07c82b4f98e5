# src/speed/render.py
"""
SPECIES SPEED CHART
-------------------

Turns the ranked dataset into a layered Altair bar chart.

Geometry:
- total width = max(container width, 700), height = 480
- margins: top 70, right 160, bottom 120, left 90
- x / y / color scales come from build_scales(), so the chart uses the
  same band padding, niced domain, ticks and palette as the scale module

Rendering is a full clear-and-redraw on every call. Nothing is retained
between calls and there is no incremental update path.
"""

import math
from typing import Any, Dict, Optional, Sequence

import altair as alt
import pandas as pd

from src.speed.ingest import AnimalRecord
from src.speed.ranking import TOP_N
from src.speed.scales import Y_TICK_COUNT, ChartScales, build_scales
from src.utils.logger import get_logger

logger = get_logger(__name__)

# =============================================================================
# LAYOUT
# =============================================================================

MIN_WIDTH = 700
HEIGHT = 480
MARGIN = {"top": 70, "right": 160, "bottom": 120, "left": 90}

TITLE = "Species Speed"
X_TITLE = "Animal"
Y_TITLE = "Speed (km/h)"
CAPTION = f"Showing top {TOP_N} animals."

TEXT_COLOR = "white"
GRID_OPACITY = 0.12
BAR_RADIUS = 6
LABEL_ANGLE = -28
LEGEND_OFFSET = 22

# Capitalize the first letter of each diet in the legend
_CAPITALIZE_EXPR = "upper(slice(datum.label, 0, 1)) + slice(datum.label, 1)"


def chart_width(container_width: Optional[float]) -> int:
    """Container width, floored at MIN_WIDTH (zero/unknown widths included)."""
    return int(max(container_width or 0, MIN_WIDTH))


def inner_size(width: int) -> Dict[str, int]:
    return {
        "width": width - MARGIN["left"] - MARGIN["right"],
        "height": HEIGHT - MARGIN["top"] - MARGIN["bottom"],
    }


def value_label(speed: float) -> str:
    """Integer label shown above a bar (half-up rounding)."""
    return str(math.floor(speed + 0.5))


# =============================================================================
# CHART
# =============================================================================

def _records_frame(dataset: Sequence[AnimalRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "name": r.name,
                "speed": r.speed,
                "diet": r.diet,
                "label": value_label(r.speed),
            }
            for r in dataset
        ]
    )


def build_chart(dataset: Sequence[AnimalRecord], width: int = MIN_WIDTH) -> Optional[alt.LayerChart]:
    """
    Build the complete chart for an already ranked dataset.

    Returns None for an empty dataset (nothing is drawn).
    """
    size = inner_size(width)
    scales: Optional[ChartScales] = build_scales(dataset, size["width"], size["height"])
    if scales is None:
        return None

    y_ticks = scales.y.ticks(Y_TICK_COUNT)

    x_scale = alt.Scale(
        domain=scales.x.domain,
        paddingInner=scales.x.padding_inner,
        paddingOuter=scales.x.padding_outer,
        align=scales.x.align,
    )
    y_scale = alt.Scale(domain=list(scales.y.domain), nice=False, zero=True)
    color_scale = alt.Scale(domain=list(scales.color.domain), range=list(scales.color.range))

    # -------------------------------------------------
    # Gridlines (no axis line)
    # -------------------------------------------------
    grid = (
        alt.Chart(pd.DataFrame({"tick": y_ticks}))
        .mark_rule(color=TEXT_COLOR, opacity=GRID_OPACITY)
        .encode(y=alt.Y("tick:Q", scale=y_scale, axis=None))
    )

    base = alt.Chart(_records_frame(dataset)).encode(
        x=alt.X(
            "name:N",
            sort=scales.x.domain,
            scale=x_scale,
            axis=alt.Axis(
                title=X_TITLE,
                labelAngle=LABEL_ANGLE,
                labelAlign="right",
                labelBaseline="middle",
                labelOverlap=False,
                tickSize=6,
                titlePadding=50,
            ),
        ),
        y=alt.Y(
            "speed:Q",
            scale=y_scale,
            axis=alt.Axis(
                title=Y_TITLE,
                values=y_ticks,
                tickCount=Y_TICK_COUNT,
                grid=False,
                titlePadding=30,
            ),
        ),
    )

    # -------------------------------------------------
    # Bars + value labels
    # -------------------------------------------------
    bars = base.mark_bar(cornerRadius=BAR_RADIUS).encode(
        color=alt.Color(
            "diet:N",
            scale=color_scale,
            legend=alt.Legend(
                title=None,
                orient="none",
                legendX=size["width"] + LEGEND_OFFSET,
                legendY=0,
                symbolType="square",
                labelExpr=_CAPITALIZE_EXPR,
            ),
        ),
        tooltip=["name:N", "speed:Q", "diet:N"],
    )

    labels = base.mark_text(dy=-6, fontSize=10, color=TEXT_COLOR, align="center").encode(
        text="label:N",
    )

    # -------------------------------------------------
    # Caption (bottom left, in plot coordinates)
    # -------------------------------------------------
    caption = (
        alt.Chart(pd.DataFrame({"caption": [CAPTION]}))
        .mark_text(align="left", fontSize=11, opacity=0.7, color=TEXT_COLOR)
        .encode(
            x=alt.value(0),
            y=alt.value(HEIGHT - MARGIN["top"] - 14),
            text="caption:N",
        )
    )

    chart = (
        alt.layer(grid, bars, labels, caption)
        .properties(
            title=alt.TitleParams(
                TITLE,
                anchor="start",
                fontSize=22,
                fontWeight=800,
                color=TEXT_COLOR,
            ),
            width=size["width"],
            height=size["height"],
            padding=MARGIN,
            autosize=alt.AutoSizeParams(type="none"),
        )
        .configure_axis(
            labelColor=TEXT_COLOR,
            titleColor=TEXT_COLOR,
            domainColor=TEXT_COLOR,
            tickColor=TEXT_COLOR,
            titleFontSize=12,
        )
        .configure_legend(labelColor=TEXT_COLOR, labelFontSize=12)
        .configure_view(strokeWidth=0)
    )
    return chart


def chart_spec(dataset: Sequence[AnimalRecord], width: int = MIN_WIDTH) -> Optional[Dict[str, Any]]:
    """Vega-Lite JSON for the chart, or None for an empty dataset."""
    chart = build_chart(dataset, width)
    return chart.to_dict() if chart is not None else None


def render(container: Any, dataset: Sequence[AnimalRecord], container_width: Optional[float] = None) -> bool:
    """
    Clear the container and redraw the chart from scratch.

    container is any Streamlit-like placeholder exposing empty() and
    altair_chart(). Returns True when a chart was drawn.
    """
    container.empty()

    chart = build_chart(dataset, chart_width(container_width))
    if chart is None:
        return False

    container.altair_chart(chart, use_container_width=False)
    logger.debug(f"[chart] Rendered {len(dataset)} bars")
    return True
