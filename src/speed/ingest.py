# src/speed/ingest.py
"""
ANIMAL SPEED CSV INGESTION
--------------------------

Reads the animal speed CSV and normalizes its rows into AnimalRecord
objects.

Source files disagree on column names ("Animal" vs "name", "Dietary" vs
"diet", ...), so each canonical field is resolved by probing a short,
ordered alias list. Rows that do not yield a valid record are dropped
without raising; only the count is logged.

Usage:
    records = asyncio.run(load_animals("data/sample_animals.csv"))
"""

import asyncio
import math
from typing import Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from src.utils.logger import get_logger

logger = get_logger(__name__)

# =============================================================================
# CANONICAL SHAPE
# =============================================================================

Diet = Literal["herbivore", "omnivore", "carnivore"]

DIETS: Tuple[str, ...] = ("herbivore", "omnivore", "carnivore")

RawRow = Mapping[str, str]


class AnimalRecord(BaseModel):
    """
    One validated animal: name, top speed in km/h, diet category.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    speed: float = Field(..., gt=0)
    diet: Diet


class NormalizationResult(BaseModel):
    """
    Outcome of normalizing a batch of raw rows.
    """
    records: List[AnimalRecord] = Field(default_factory=list)
    total_rows: int = 0

    @property
    def dropped(self) -> int:
        return self.total_rows - len(self.records)


# =============================================================================
# COLUMN ALIASES (first match wins, exact and case-sensitive)
# =============================================================================

NAME_KEYS: Sequence[str] = ("name", "Name", "Animal", "animal")
SPEED_KEYS: Sequence[str] = (
    "speed",
    "Speed",
    "Average Speed (km/h)",
    "average speed (km/h)",
)
DIET_KEYS: Sequence[str] = ("diet", "Diet", "dietary", "Dietary")


def resolve_field(row: RawRow, aliases: Sequence[str]) -> Optional[str]:
    """
    Return the value under the first alias present in row, else None.
    """
    for key in aliases:
        if key in row:
            value = row[key]
            return "" if value is None else str(value)
    return None


# =============================================================================
# ROW VALIDATION
# =============================================================================

_PREFIXED_INT = ("0x", "0o", "0b")


def parse_speed(raw: str) -> Optional[float]:
    """
    Parse a trimmed numeric string; None unless finite and > 0.

    Accepts decimal and exponent forms plus unsigned 0x / 0o / 0b
    integer literals. "Infinity" parses but is rejected as non-finite.
    """
    text = raw.strip()
    # float() accepts "1_000"; a CSV cell like that is not a number
    if not text or "_" in text:
        return None

    try:
        if text[:2].lower() in _PREFIXED_INT:
            value = float(int(text, 0))
        else:
            value = float(text)
    except ValueError:
        return None

    if not math.isfinite(value) or value <= 0:
        return None
    return value


def parse_diet(raw: str) -> Optional[str]:
    diet = raw.strip().lower()
    return diet if diet in DIETS else None


def normalize_row(row: RawRow) -> Optional[AnimalRecord]:
    """
    Map one raw row to an AnimalRecord, or None if any field is unusable.
    """
    raw_name = resolve_field(row, NAME_KEYS)
    raw_speed = resolve_field(row, SPEED_KEYS)
    raw_diet = resolve_field(row, DIET_KEYS)

    if raw_name is None or raw_speed is None or raw_diet is None:
        return None

    name = raw_name.strip()
    if not name:
        return None

    speed = parse_speed(raw_speed)
    if speed is None:
        return None

    diet = parse_diet(raw_diet)
    if diet is None:
        return None

    return AnimalRecord(name=name, speed=speed, diet=diet)


def normalize_rows(rows: Iterable[RawRow]) -> NormalizationResult:
    """
    Normalize every row, keeping input order for the accepted ones.
    """
    records: List[AnimalRecord] = []
    total = 0

    for row in rows:
        total += 1
        record = normalize_row(row)
        if record is not None:
            records.append(record)

    result = NormalizationResult(records=records, total_rows=total)

    if result.dropped:
        logger.info(
            f"[ingest] Dropped {result.dropped} of {total} rows that failed validation"
        )

    return result


# =============================================================================
# FETCH + PARSE
# =============================================================================

def read_csv_rows(location: str) -> List[Dict[str, str]]:
    """
    Fetch and parse a CSV (local path or URL) into raw string rows.

    Every cell stays text; empty cells stay "" rather than NaN.
    """
    df = pd.read_csv(location, dtype=str, keep_default_na=False)
    return df.to_dict(orient="records")


async def load_animals(location: str) -> Optional[List[AnimalRecord]]:
    """
    Fetch, parse and normalize the animal CSV.

    Returns:
        list of records (possibly empty) on success,
        None when the document could not be fetched or parsed.
    """
    try:
        rows = await asyncio.to_thread(read_csv_rows, location)
    except pd.errors.EmptyDataError:
        rows = []
    except (OSError, UnicodeDecodeError, ValueError) as e:
        # pandas ParserError is a ValueError subclass; URLError is an OSError
        logger.error(f"[ingest] Failed to load {location}: {e}")
        return None

    if not rows:
        logger.warning(f"[ingest] CSV loaded but empty: {location}")
        return []

    result = normalize_rows(rows)

    if not result.records:
        logger.warning(f"[ingest] No valid animal rows in {location}")

    logger.info(f"[ingest] Loaded animals: {len(result.records)}")
    return result.records
