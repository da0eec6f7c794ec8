#!/usr/bin/env python3
"""
Fleet Simulation Engine for the ocean cleanup mission.

This module implements the simulation loop that:
- Holds vessels, hotspots and missions in an explicit context object
- Advances every eligible vessel once per tick (default 5 simulated seconds)
- Skips vessels that are not active or not assigned to an active mission
- Publishes an immutable snapshot at the end of every tick
- Updates mission progress on its own schedule

The simulation produces an event log for recording and display.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
import math
import random
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterable, Optional

from .config import SimulationConfig
from .entities import Mission, PlasticHotspot, Vessel
from .integrator import MotionResult, advance_vessel
from .seed import SeedData

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_TICK_SECONDS = 5.0

# Upper bounds of the mission progress random walk
MAX_MISSION_PLASTIC_PER_UPDATE_KG = 50
MAX_EFFICIENCY_SWING = 1.0


# =============================================================================
# EVENT TYPES
# =============================================================================

class SimulationEventType(Enum):
    """Types of events that can occur during simulation."""
    # Lifecycle
    SIMULATION_STARTED = auto()
    SIMULATION_PAUSED = auto()
    SIMULATION_RESUMED = auto()

    # Navigation
    PLAN_CREATED = auto()
    WAYPOINT_REACHED = auto()
    VESSEL_HELD = auto()
    NO_HOTSPOTS = auto()

    # Store changes
    TRAILS_RESET = auto()
    HOTSPOTS_REPLACED = auto()
    MISSION_PROGRESS = auto()


@dataclass
class SimulationEvent:
    """
    An event that occurs during simulation.

    Attributes:
        event_type: The type of event.
        timestamp: Simulated time when the event occurred (seconds).
        vessel_id: Vessel involved (if applicable).
        data: Additional event-specific data.
    """
    event_type: SimulationEventType
    timestamp: float
    vessel_id: Optional[str] = None
    data: dict = field(default_factory=dict)

    def __str__(self) -> str:
        vessel_str = f"[{self.vessel_id}] " if self.vessel_id else ""
        return f"T+{self.timestamp:.1f}s {vessel_str}{self.event_type.name}"

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.name,
            "timestamp": self.timestamp,
            "vessel_id": self.vessel_id,
            "data": self.data,
        }


@dataclass(frozen=True)
class SimulationSnapshot:
    """
    Read-only copy of the entity store taken at a tick boundary.

    Observers read snapshots instead of the live lists, so a tick in
    progress is never visible half-applied.
    """
    tick_count: int
    current_time: float
    running: bool
    vessels: tuple[Vessel, ...]
    hotspots: tuple[PlasticHotspot, ...]
    missions: tuple[Mission, ...]

    def to_dict(self) -> dict:
        return {
            "tick": self.tick_count,
            "time": self.current_time,
            "running": self.running,
            "vessels": [v.to_dict() for v in self.vessels],
            "hotspots": [h.to_dict() for h in self.hotspots],
            "missions": [m.to_dict() for m in self.missions],
        }


# =============================================================================
# MEMBERSHIP
# =============================================================================

def active_vessel_ids(missions: Iterable[Mission]) -> set[str]:
    """Ids of vessels assigned to at least one active mission."""
    assigned: set[str] = set()
    for mission in missions:
        if mission.is_active:
            assigned.update(mission.vessels)
    return assigned


# =============================================================================
# FLEET SIMULATION
# =============================================================================

class FleetSimulation:
    """
    Main fleet simulation engine.

    This class owns the entity store and the tick loop:
    - Mission membership filtering
    - Vessel planning and motion
    - Mission progress updates
    - Event logging and callbacks
    - Snapshot publication

    Usage:
        sim = FleetSimulation(vessels, hotspots, missions, seed=7)
        sim.add_event_callback(print)
        sim.run(ticks=12)
        vessels = sim.get_vessels()

    Attributes:
        config: Tuning parameters.
        current_time: Simulated seconds elapsed.
        tick_count: Ticks executed while running.
        events: Simulation event log.
    """

    def __init__(
        self,
        vessels: Iterable[Vessel] = (),
        hotspots: Iterable[PlasticHotspot] = (),
        missions: Iterable[Mission] = (),
        config: Optional[SimulationConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize the simulation.

        Args:
            vessels: Initial vessels.
            hotspots: Initial hotspots.
            missions: Initial missions.
            config: Tuning parameters (defaults to SimulationConfig()).
            seed: Random seed for reproducibility; overrides config.seed.
            rng: Random source to use directly; overrides seed.
        """
        self.config = config or SimulationConfig()
        if seed is None:
            seed = self.config.seed
        self.rng = rng or random.Random(seed)

        self._vessels: list[Vessel] = list(vessels)
        self._hotspots: list[PlasticHotspot] = list(hotspots)
        self._missions: list[Mission] = list(missions)

        self.current_time: float = 0.0
        self.tick_count: int = 0

        # Event log, oldest entries dropped past config.max_events
        self.events: deque[SimulationEvent] = deque(maxlen=self.config.max_events)
        self._event_callbacks: list[Callable[[SimulationEvent], None]] = []

        # Simulation state
        self._running = True
        self._warned_no_hotspots = False
        self._write_lock = threading.Lock()
        self._snapshot = self._take_snapshot()

    # -------------------------------------------------------------------------
    # Entity Store
    # -------------------------------------------------------------------------

    def get_vessels(self) -> list[Vessel]:
        """Vessels as of the last tick boundary."""
        return list(self._snapshot.vessels)

    def get_hotspots(self) -> list[PlasticHotspot]:
        """Hotspots as of the last tick boundary."""
        return list(self._snapshot.hotspots)

    def get_missions(self) -> list[Mission]:
        """Missions as of the last tick boundary."""
        return list(self._snapshot.missions)

    def get_vessel(self, vessel_id: str) -> Optional[Vessel]:
        """Get a vessel by ID from the latest snapshot."""
        for vessel in self._snapshot.vessels:
            if vessel.vessel_id == vessel_id:
                return vessel
        return None

    def snapshot(self) -> SimulationSnapshot:
        """The latest published snapshot."""
        return self._snapshot

    def set_hotspots(self, hotspots: Iterable[PlasticHotspot]) -> None:
        """
        Replace the hotspot set wholesale.

        Existing plans are kept; new hotspots are used the next time a
        vessel re-plans.
        """
        with self._write_lock:
            self._hotspots = list(hotspots)
            if self._hotspots:
                self._warned_no_hotspots = False
            self._log_event(SimulationEventType.HOTSPOTS_REPLACED, data={
                "count": len(self._hotspots)
            })
            self._publish()

    # -------------------------------------------------------------------------
    # Simulation Loop
    # -------------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    def set_simulation_running(self, running: bool) -> None:
        """Pause or resume ticking. Pausing only stops future mutations."""
        if running == self._running:
            return
        logger.info("Simulation %s at T+%.1fs", "resumed" if running else "paused", self.current_time)
        with self._write_lock:
            self._running = running
            self._log_event(
                SimulationEventType.SIMULATION_RESUMED if running else SimulationEventType.SIMULATION_PAUSED
            )
            self._publish()

    def pause(self) -> None:
        """Pause the simulation."""
        self.set_simulation_running(False)

    def resume(self) -> None:
        """Resume the simulation."""
        self.set_simulation_running(True)

    def run(self, ticks: int, delta_seconds: Optional[float] = None) -> list[MotionResult]:
        """
        Execute a fixed number of ticks back to back.

        Args:
            ticks: Number of ticks.
            delta_seconds: Simulated duration per tick (defaults to config).

        Returns:
            All motion results in order.
        """
        self._log_event(SimulationEventType.SIMULATION_STARTED, data={"ticks": ticks})
        results: list[MotionResult] = []
        for _ in range(ticks):
            results.extend(self.tick(delta_seconds))
        return results

    def tick(self, delta_seconds: Optional[float] = None) -> list[MotionResult]:
        """
        Execute a single vessel tick.

        Vessels that are not active, or not assigned to an active mission,
        are left untouched. Paused simulations and zero-length ticks do
        nothing.

        Args:
            delta_seconds: Simulated duration (defaults to config.tick_seconds).

        Returns:
            Motion results for the vessels that moved.

        Raises:
            ValueError: If delta_seconds is negative or not finite.
        """
        if not self._running:
            return []

        dt = self.config.tick_seconds if delta_seconds is None else delta_seconds
        if not (math.isfinite(dt) and dt >= 0):
            raise ValueError(f"tick duration must be non-negative, got {dt}")
        if dt == 0:
            return []

        with self._write_lock:
            assigned = active_vessel_ids(self._missions)
            results: list[MotionResult] = []

            for vessel in self._vessels:
                if not vessel.is_active or vessel.vessel_id not in assigned:
                    continue
                result = advance_vessel(
                    vessel,
                    self._hotspots,
                    dt,
                    self.rng,
                    max_waypoints=self.config.max_plan_waypoints,
                    arrival_threshold_m=self.config.arrival_threshold_m,
                    min_step_speed_ms=self.config.min_step_speed_ms,
                    trail_limit=self.config.trail_limit,
                )
                self._record_motion(vessel, result)
                results.append(result)

            self.current_time += dt
            self.tick_count += 1
            self._publish()

        return results

    def update_mission_progress(self) -> None:
        """
        Random-walk progress counters of active missions.

        Collected plastic grows by up to MAX_MISSION_PLASTIC_PER_UPDATE_KG;
        efficiency drifts by up to MAX_EFFICIENCY_SWING, kept in [0, 100].
        """
        if not self._running:
            return

        with self._write_lock:
            for mission in self._missions:
                if not mission.is_active:
                    continue
                mission.plastic_collected = math.floor(
                    mission.plastic_collected + self.rng.random() * MAX_MISSION_PLASTIC_PER_UPDATE_KG
                )
                swing = (self.rng.random() - 0.5) * 2 * MAX_EFFICIENCY_SWING
                mission.efficiency = max(0.0, min(100.0, mission.efficiency + swing))
                self._log_event(SimulationEventType.MISSION_PROGRESS, data={
                    "mission_id": mission.mission_id,
                    "plastic_collected": mission.plastic_collected,
                    "efficiency": round(mission.efficiency, 2),
                })
            self._publish()

    def reset_trails(self) -> None:
        """Replace every trail with a single point at the current position."""
        with self._write_lock:
            for vessel in self._vessels:
                vessel.reset_trail()
            self._log_event(SimulationEventType.TRAILS_RESET, data={
                "vessels": len(self._vessels)
            })
            self._publish()

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def _take_snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            tick_count=self.tick_count,
            current_time=self.current_time,
            running=self._running,
            vessels=tuple(copy.deepcopy(self._vessels)),
            hotspots=tuple(copy.deepcopy(self._hotspots)),
            missions=tuple(copy.deepcopy(self._missions)),
        )

    def _publish(self) -> None:
        # Single reference assignment; readers see the old or the new snapshot
        self._snapshot = self._take_snapshot()

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _record_motion(self, vessel: Vessel, result: MotionResult) -> None:
        if result.plan_created:
            plan = vessel.plan or []
            self._log_event(SimulationEventType.PLAN_CREATED, result.vessel_id, data={
                "waypoints": len(plan),
                "hotspot_ids": [w.hotspot_id for w in plan],
            })
            if not self._hotspots:
                self._log_event(SimulationEventType.NO_HOTSPOTS, result.vessel_id)
                if not self._warned_no_hotspots:
                    logger.warning("No hotspots available; active vessels hold position")
                    self._warned_no_hotspots = True
        if result.waypoint_reached:
            self._log_event(SimulationEventType.WAYPOINT_REACHED, result.vessel_id, data={
                "lat": result.target.lat,
                "lng": result.target.lng,
                "hotspot_id": result.target.hotspot_id,
            })
        if result.held:
            self._log_event(SimulationEventType.VESSEL_HELD, result.vessel_id, data={
                "lat": result.new_position[0],
                "lng": result.new_position[1],
            })

    def add_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        """
        Register a callback invoked for every logged event.

        Args:
            callback: Function taking a SimulationEvent.
        """
        self._event_callbacks.append(callback)

    def remove_event_callback(self, callback: Callable[[SimulationEvent], None]) -> None:
        """Remove a previously registered callback."""
        if callback in self._event_callbacks:
            self._event_callbacks.remove(callback)

    def _log_event(
        self,
        event_type: SimulationEventType,
        vessel_id: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> SimulationEvent:
        event = SimulationEvent(
            event_type=event_type,
            timestamp=self.current_time,
            vessel_id=vessel_id,
            data=data or {},
        )
        self.events.append(event)
        for callback in self._event_callbacks:
            callback(event)
        return event

    def get_events_since(self, since_time: float) -> list[SimulationEvent]:
        """Get all events at or after a simulated time."""
        return [e for e in self.events if e.timestamp >= since_time]

    def get_events_for_vessel(self, vessel_id: str) -> list[SimulationEvent]:
        """Get all events involving a vessel."""
        return [e for e in self.events if e.vessel_id == vessel_id]

    def get_events_by_type(self, event_type: SimulationEventType) -> list[SimulationEvent]:
        """Get all events of a given type."""
        return [e for e in self.events if e.event_type == event_type]


def create_simulation_from_seed(
    seed_data: SeedData,
    config: Optional[SimulationConfig] = None,
    seed: Optional[int] = None,
) -> FleetSimulation:
    """
    Build a simulation from loaded seed data.

    Args:
        seed_data: SeedData from oceanfleet.seed.load_seed_data.
        config: Tuning parameters.
        seed: Random seed.

    Returns:
        A running FleetSimulation.
    """
    return FleetSimulation(
        vessels=seed_data.vessels,
        hotspots=seed_data.hotspots,
        missions=seed_data.missions,
        config=config,
        seed=seed,
    )
