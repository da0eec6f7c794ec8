"""
Seed data loading.

Reads the initial vessels, hotspots and missions from a JSON file. Records
are trusted beyond their basic shape; a missing top-level list is the only
thing rejected.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import DEFAULT_SEED_PATH
from .entities import Mission, PlasticHotspot, Vessel
from .errors import SeedDataError

logger = logging.getLogger(__name__)


REQUIRED_SECTIONS = ("vessels", "hotspots", "missions")

# Persistent accumulation zones used when no hotspot source is reachable
FALLBACK_HOTSPOT_RECORDS: List[Dict[str, Any]] = [
    {"id": "gp-1", "lat": 37.5, "lng": -145.0, "concentration": 15000, "severity": "critical", "area": 1200},
    {"id": "gp-2", "lat": 30.2, "lng": -140.5, "concentration": 8500, "severity": "high", "area": 800},
    {"id": "at-1", "lat": 42.1, "lng": -28.7, "concentration": 12000, "severity": "critical", "area": 950},
    {"id": "io-1", "lat": -15.3, "lng": 78.2, "concentration": 7200, "severity": "high", "area": 680},
    {"id": "med-1", "lat": 40.5, "lng": 15.2, "concentration": 9200, "severity": "high", "area": 340},
    {"id": "pac-2", "lat": 25.8, "lng": -155.3, "concentration": 4200, "severity": "medium", "area": 480},
]


@dataclass
class SeedData:
    """Initial contents of the entity store."""
    vessels: List[Vessel] = field(default_factory=list)
    hotspots: List[PlasticHotspot] = field(default_factory=list)
    missions: List[Mission] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SeedData':
        """Create seed data from a parsed JSON document."""
        if not isinstance(data, dict):
            raise SeedDataError("Seed document must be a JSON object")

        for section in REQUIRED_SECTIONS:
            if not isinstance(data.get(section), list):
                raise SeedDataError(f"Seed data must contain a '{section}' list")

        return cls(
            vessels=[Vessel.from_dict(v) for v in data["vessels"]],
            hotspots=[PlasticHotspot.from_dict(h) for h in data["hotspots"]],
            missions=[Mission.from_dict(m) for m in data["missions"]],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vessels": [v.to_dict() for v in self.vessels],
            "hotspots": [h.to_dict() for h in self.hotspots],
            "missions": [m.to_dict() for m in self.missions],
        }


def load_seed_data(path: Optional[Union[str, Path]] = None) -> SeedData:
    """
    Load seed data from a JSON file.

    Args:
        path: Seed file (defaults to data/seed_fleet.json).

    Returns:
        SeedData with vessels, hotspots and missions.

    Raises:
        FileNotFoundError: If the file does not exist.
        SeedDataError: If the file is not JSON or lacks a required list.
    """
    seed_path = Path(path) if path is not None else DEFAULT_SEED_PATH
    if not seed_path.exists():
        raise FileNotFoundError(f"Seed data not found: {seed_path}")

    with open(seed_path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SeedDataError(f"Seed data is not valid JSON: {e}") from e

    seed = SeedData.from_dict(data)
    logger.info(
        "Loaded seed %s: %d vessels, %d hotspots, %d missions",
        seed_path, len(seed.vessels), len(seed.hotspots), len(seed.missions),
    )
    return seed


def fallback_hotspots(detected_at: Optional[datetime] = None) -> List[PlasticHotspot]:
    """The built-in hotspot set, stamped with `detected_at` (default now)."""
    detected_at = detected_at or datetime.now(timezone.utc)
    hotspots = [PlasticHotspot.from_dict(record) for record in FALLBACK_HOTSPOT_RECORDS]
    for hotspot in hotspots:
        hotspot.detected_at = detected_at
    return hotspots
