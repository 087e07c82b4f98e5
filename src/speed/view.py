# src/speed/view.py
"""
State holder for the species speed page.

Owns exactly one dataset reference. A load replaces it wholesale; the
ranked selection is derived from it on demand and never patched.

Ordering rules:
- only the most recently started load may commit its result
- after teardown() no load may commit anything
- a failed load leaves the previous dataset in place
"""

from typing import Callable, List, Optional, Tuple

from src.speed.ingest import AnimalRecord, load_animals
from src.speed.ranking import TOP_N, select_top
from src.utils.logger import get_logger

logger = get_logger(__name__)


class AnimalSpeedView:
    def __init__(
        self,
        location: str,
        on_change: Optional[Callable[[Tuple[AnimalRecord, ...]], None]] = None,
        top_n: int = TOP_N,
    ):
        self.location = location
        self.top_n = top_n
        self.on_change = on_change

        self.animals: List[AnimalRecord] = []
        self.cancelled = False
        self._generation = 0

    @property
    def dataset(self) -> Tuple[AnimalRecord, ...]:
        """Top-N selection of the current records, fastest first."""
        return select_top(self.animals, self.top_n)

    async def load(self) -> bool:
        """
        Fetch the CSV and commit the result if it is still wanted.

        Returns True when the dataset reference was replaced.
        """
        self._generation += 1
        generation = self._generation

        records = await load_animals(self.location)

        if self.cancelled:
            logger.debug("[ingest] View torn down; discarding loaded rows")
            return False
        if generation != self._generation:
            logger.debug("[ingest] Superseded by a newer load; discarding")
            return False
        if records is None:
            return False

        self.set_animals(records)
        return True

    def set_animals(self, records: List[AnimalRecord]) -> None:
        # New list object each time: change is detected by reference
        self.animals = list(records)
        if self.on_change is not None:
            self.on_change(self.dataset)

    def teardown(self) -> None:
        self.cancelled = True
