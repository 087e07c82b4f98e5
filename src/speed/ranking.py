# src/speed/ranking.py
"""Top-N selection of animal records by speed."""

from typing import Sequence, Tuple

from src.speed.ingest import AnimalRecord

TOP_N = 30


def select_top(records: Sequence[AnimalRecord], n: int = TOP_N) -> Tuple[AnimalRecord, ...]:
    """
    Return the n fastest records, fastest first.

    sorted() is stable, so equal speeds keep their input order. The input
    sequence is left untouched.
    """
    if n <= 0:
        return ()
    ranked = sorted(records, key=lambda r: r.speed, reverse=True)
    return tuple(ranked[:n])
