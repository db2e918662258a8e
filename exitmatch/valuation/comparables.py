"""Sources of comparable business sales."""

import random
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional

from exitmatch.models import ComparableBusiness, ValuationStepData
from exitmatch.utils import round_half_up, round_int


class ComparablesSource(ABC):
    """Abstract interface for recent comparable transactions."""

    name: str = "base"

    @abstractmethod
    def find(
        self,
        data: ValuationStepData,
        revenue_multiple: float,
    ) -> list[ComparableBusiness]:
        """
        Find businesses comparable to the one being valued.

        Args:
            data: The wizard answers for the business being valued
            revenue_multiple: Base revenue multiple of its sector

        Returns:
            Comparables, highest multiple first
        """
        pass


class SyntheticComparables(ComparablesSource):
    """Generated comparables, standing in for a transaction database.

    Revenues vary 70-130% around the business's own revenue and multiples
    80-120% around the sector multiple. Pass a seeded ``random.Random`` (or
    a seed) for reproducible output.
    """

    name = "synthetic"

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        count: int = 4,
        now: Optional[datetime] = None,
    ):
        self.rng = rng or random.Random(seed)
        self.count = count
        self.now = now

    def find(
        self,
        data: ValuationStepData,
        revenue_multiple: float,
    ) -> list[ComparableBusiness]:
        base_revenue = data.annual_revenue or 1_000_000
        now = self.now or datetime.now(timezone.utc)

        comparables = []
        for _ in range(self.count):
            revenue = base_revenue * (0.7 + self.rng.random() * 0.6)
            multiple = revenue_multiple * (0.8 + self.rng.random() * 0.4)
            sold_on = now - timedelta(days=self.rng.random() * 365)

            comparables.append(
                ComparableBusiness(
                    sector=data.sector or "General Business",
                    revenue=round_int(revenue),
                    sold_price=round_int(revenue * multiple),
                    multiple=round_half_up(multiple, 1),
                    date=sold_on.date().isoformat(),
                )
            )

        return sorted(comparables, key=lambda c: c.multiple, reverse=True)
