"""
Simulation configuration.

Settings come from, in increasing precedence: dataclass defaults, a JSON
file, and OCEANFLEET_* environment variables (a local .env file is loaded
first).
"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


DEFAULT_SEED_PATH = Path(__file__).parent.parent / "data" / "seed_fleet.json"

ENV_PREFIX = "OCEANFLEET_"


@dataclass
class SimulationConfig:
    """
    Tuning for the fleet simulation loop.

    Attributes:
        tick_seconds: Simulated time advanced per vessel tick.
        tick_interval_s: Wall-clock period between ticks when run by the timer.
        mission_update_interval_s: Wall-clock period between mission progress updates.
        max_plan_waypoints: Hotspots assigned per plan.
        trail_limit: Trail positions kept per vessel.
        arrival_threshold_m: Distance under which a waypoint counts as reached.
        min_step_speed_ms: Floor applied to vessel speed before stepping.
        max_events: Events kept in the simulation's log; oldest are dropped.
        seed: Random seed for accumulator updates (None = nondeterministic).
        seed_path: JSON seed file with vessels, hotspots and missions.
    """
    tick_seconds: float = 5.0
    tick_interval_s: float = 5.0
    mission_update_interval_s: float = 10.0
    max_plan_waypoints: int = 3
    trail_limit: int = 200
    arrival_threshold_m: float = 5000.0
    min_step_speed_ms: float = 0.1
    max_events: int = 10_000
    seed: Optional[int] = None
    seed_path: str = str(DEFAULT_SEED_PATH)

    def __post_init__(self) -> None:
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        if self.tick_interval_s <= 0 or self.mission_update_interval_s <= 0:
            raise ValueError("timer intervals must be positive")
        if self.max_plan_waypoints < 1:
            raise ValueError("max_plan_waypoints must be at least 1")
        if self.trail_limit < 1:
            raise ValueError("trail_limit must be at least 1")
        if self.max_events < 1:
            raise ValueError("max_events must be at least 1")

    @classmethod
    def from_json(cls, path: str) -> 'SimulationConfig':
        """Load configuration from JSON file."""
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Simulation config not found: {path}")

        with open(config_path) as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """Create configuration from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_env(cls, base: Optional['SimulationConfig'] = None) -> 'SimulationConfig':
        """
        Overlay OCEANFLEET_* environment variables on a base config.

        e.g. OCEANFLEET_TICK_SECONDS=2.5, OCEANFLEET_SEED=7
        """
        base = base or cls()
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None:
                values[f.name] = getattr(base, f.name)
            elif f.name == "seed":
                values[f.name] = int(raw) if raw.strip() else None
            elif f.name == "seed_path":
                values[f.name] = raw
            elif f.name in ("max_plan_waypoints", "trail_limit", "max_events"):
                values[f.name] = int(raw)
            else:
                values[f.name] = float(raw)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
