# src/speed/scales.py
"""
Scale construction for the species speed chart.

Three mappings are built from the selected dataset:
- BandScale:   animal name -> horizontal band (x)
- LinearScale: speed -> vertical pixel (y, inverted)
- ColorScale:  diet -> fill color (fixed domain)

The numeric behavior matches d3-scale (band padding, nice(), ticks()),
so the Altair chart configured from these objects lines up with the
geometry computed here.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple

from src.speed.ingest import DIETS, AnimalRecord

BAND_PADDING = 0.2
Y_TICK_COUNT = 6

# Diet palette (green / gold / red)
DIET_COLORS: Dict[str, str] = {
    "herbivore": "#2ecc71",
    "omnivore": "#f1c40f",
    "carnivore": "#ff6b6b",
}

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)

# =============================================================================
# TICK ARITHMETIC
# =============================================================================


def _round(value: float) -> int:
    # half-up, not banker's rounding
    return math.floor(value + 0.5)


def _tick_spec(start: float, stop: float, count: float) -> Tuple[int, int, float]:
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / (10 ** power)
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1

    if power < 0:
        inc = (10 ** -power) / factor
        i1 = _round(start * inc)
        i2 = _round(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = (10 ** power) * factor
        i1 = _round(start / inc)
        i2 = _round(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1

    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return i1, i2, inc


def tick_increment(start: float, stop: float, count: float) -> float:
    """
    Step between round ticks: 1, 2 or 5 times a power of ten.

    Negative results encode 1/step for sub-unit increments.
    """
    return _tick_spec(start, stop, count)[2]


def ticks(start: float, stop: float, count: int) -> List[float]:
    """Round tick values covering [start, stop]."""
    if count <= 0:
        return []
    if start == stop:
        return [start]

    reverse = stop < start
    if reverse:
        start, stop = stop, start

    i1, i2, inc = _tick_spec(start, stop, count)
    if i2 < i1:
        return []

    if inc < 0:
        values = [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    else:
        values = [(i1 + i) * inc for i in range(i2 - i1 + 1)]

    return values[::-1] if reverse else values


# =============================================================================
# SCALES
# =============================================================================


class BandScale:
    """
    Ordered categories -> evenly spaced, padded bands.
    """

    def __init__(
        self,
        domain: Sequence[str],
        range_: Tuple[float, float],
        padding: float = BAND_PADDING,
        align: float = 0.5,
    ):
        self.domain: List[str] = list(dict.fromkeys(domain))
        self.range = range_
        self.padding_inner = min(1.0, padding)
        self.padding_outer = padding
        self.align = align
        self._rescale()

    def _rescale(self) -> None:
        n = len(self.domain)
        r0, r1 = self.range
        reverse = r1 < r0
        start, stop = (r1, r0) if reverse else (r0, r1)

        self.step = (stop - start) / max(1, n - self.padding_inner + self.padding_outer * 2)
        start += (stop - start - self.step * (n - self.padding_inner)) * self.align
        self.bandwidth = self.step * (1 - self.padding_inner)

        positions = [start + self.step * i for i in range(n)]
        if reverse:
            positions.reverse()
        self._index = dict(zip(self.domain, positions))

    def __call__(self, value: str) -> Optional[float]:
        return self._index.get(value)


class LinearScale:
    """
    Continuous numeric domain -> continuous pixel range.
    """

    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            t = 0.5
        else:
            t = (value - d0) / (d1 - d0)
        return r0 + t * (r1 - r0)

    def nice(self, count: int = 10) -> "LinearScale":
        """Extend the domain outward to round tick values."""
        d0, d1 = self.domain
        reverse = d1 < d0
        start, stop = (d1, d0) if reverse else (d0, d1)

        prestep = None
        for _ in range(10):
            if stop == start:
                break
            step = tick_increment(start, stop, count)
            if step == prestep:
                break
            if step > 0:
                start = math.floor(start / step) * step
                stop = math.ceil(stop / step) * step
            elif step < 0:
                start = math.ceil(start * step) / step
                stop = math.floor(stop * step) / step
            else:
                break
            prestep = step

        self.domain = (stop, start) if reverse else (start, stop)
        return self

    def ticks(self, count: int = 10) -> List[float]:
        return ticks(self.domain[0], self.domain[1], count)


class ColorScale:
    """
    Diet -> color. The domain is all three diets regardless of the data.
    """

    def __init__(self, colors: Optional[Dict[str, str]] = None):
        colors = colors or DIET_COLORS
        self.domain: Tuple[str, ...] = DIETS
        self.range: Tuple[str, ...] = tuple(colors[d] for d in DIETS)
        self._index = dict(zip(self.domain, self.range))

    def __call__(self, diet: str) -> str:
        return self._index[diet]


class ChartScales:
    """Bundle of the three scales plus the inner plot size they were built for."""

    def __init__(self, x: BandScale, y: LinearScale, color: ColorScale, inner_width: float, inner_height: float):
        self.x = x
        self.y = y
        self.color = color
        self.inner_width = inner_width
        self.inner_height = inner_height


# =============================================================================
# BUILDERS
# =============================================================================


def speed_domain_max(dataset: Sequence[AnimalRecord]) -> float:
    """
    Upper y bound: the max speed rounded up to a multiple of 10, then niced.
    """
    top = max((r.speed for r in dataset), default=0.0)
    upper = math.ceil(top / 10) * 10
    return LinearScale((0, upper), (1, 0)).nice().domain[1]


def build_scales(
    dataset: Sequence[AnimalRecord],
    inner_width: float,
    inner_height: float,
) -> Optional[ChartScales]:
    """
    Build x / y / color scales for the selection; None when it is empty.
    """
    if not dataset:
        return None

    x = BandScale([r.name for r in dataset], (0, inner_width), padding=BAND_PADDING)
    y = LinearScale((0, speed_domain_max(dataset)), (inner_height, 0))
    color = ColorScale()

    return ChartScales(x, y, color, inner_width, inner_height)
