"""UK region lookup used by location matching."""

import json
import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_REGIONS: dict[str, list[str]] = {
    "London": ["London", "Greater London", "Central London", "East London", "West London"],
    "South East": ["Kent", "Surrey", "Sussex", "Hampshire", "Berkshire", "Oxfordshire"],
    "North West": ["Manchester", "Liverpool", "Lancashire", "Cumbria", "Cheshire"],
    "Scotland": ["Edinburgh", "Glasgow", "Aberdeen", "Dundee", "Highlands"],
}


class RegionTable:
    """Region name -> place names, matched as case-insensitive substrings.

    Regions are checked in insertion order and the first region containing
    the business location decides the result.
    """

    def __init__(self, regions: Optional[Mapping[str, Iterable[str]]] = None):
        source = DEFAULT_REGIONS if regions is None else regions
        self._regions: dict[str, list[str]] = {
            name: list(places) for name, places in source.items()
        }

    @property
    def regions(self) -> dict[str, list[str]]:
        return {name: list(places) for name, places in self._regions.items()}

    def extend(self, regions: Mapping[str, Iterable[str]]) -> "RegionTable":
        """Return a new table with extra regions (or extra places for known ones)."""
        merged = self.regions
        for name, places in regions.items():
            existing = merged.setdefault(name, [])
            existing.extend(p for p in places if p not in existing)
        return RegionTable(merged)

    @classmethod
    def from_file(cls, path: Union[str, Path], base: Optional["RegionTable"] = None) -> "RegionTable":
        """Load extra regions from a JSON object of ``{"Region": ["Place", ...]}``.

        The loaded regions extend ``base`` (the default table when omitted).
        Raises ValueError if the file does not hold that shape.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Region table {path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Region table {path} must be a JSON object")
        for name, places in data.items():
            if not isinstance(places, list) or not all(isinstance(p, str) for p in places):
                raise ValueError(f"Region '{name}' in {path} must map to a list of strings")

        logger.info(f"Loaded {len(data)} regions from {path}")
        return (base or cls()).extend(data)

    def region_of(self, location: Optional[str]) -> Optional[str]:
        """Name of the first region whose places appear in ``location``."""
        if not location:
            return None
        lowered = location.lower()
        for name, places in self._regions.items():
            if any(place.lower() in lowered for place in places):
                return name
        return None

    def same_region(self, location: Optional[str], preferred_locations: Iterable[str]) -> bool:
        """Whether any preferred location falls in the business location's region."""
        region = self.region_of(location)
        if region is None:
            return False
        places = [p.lower() for p in self._regions[region]]
        return any(
            any(place in pref.lower() for place in places)
            for pref in preferred_locations
        )

    def __len__(self) -> int:
        return len(self._regions)


def load_region_table(path: Optional[Union[str, Path]] = None) -> RegionTable:
    """Default table, extended from ``path`` when one is configured."""
    if path is None:
        return RegionTable()
    return RegionTable.from_file(path)
