"""
Simulation Recorder - Records vessel motion for replay.

Captures:
- Per-tick frames with every vessel's position, battery, collection and target
- All simulation events (plans, arrivals, holds, pauses)
- Run metadata (config, seed, vessel roster)
"""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional

from .simulation import FleetSimulation, SimulationEvent, SimulationSnapshot


@dataclass
class SimulationRecording:
    """Complete recording of a simulation run."""
    recording_version: str = "1.0"
    recorded_at: str = ""
    run_name: str = ""

    config: Dict[str, Any] = field(default_factory=dict)
    vessels: List[Dict[str, Any]] = field(default_factory=list)
    hotspots: List[Dict[str, Any]] = field(default_factory=list)

    events: List[Dict[str, Any]] = field(default_factory=list)

    # Each frame: {"tick": int, "t": float, "vessels": {...}}
    frames: List[Dict[str, Any]] = field(default_factory=list)

    duration_s: float = 0.0
    total_ticks: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


class SimulationRecorder:
    """
    Records a simulation run.

    Usage:
        recorder = SimulationRecorder()
        recorder.start_recording(sim, run_name="pacific")

        for _ in range(ticks):
            sim.tick()
            recorder.record_frame(sim.snapshot())

        recorder.end_recording(sim)
        recorder.save("recordings/pacific.json")
    """

    def __init__(self):
        self.recording = SimulationRecording()
        self.events: List[SimulationEvent] = []
        self._sim: Optional[FleetSimulation] = None
        self._is_recording = False

    @property
    def is_recording(self) -> bool:
        return self._is_recording

    def start_recording(self, sim: FleetSimulation, run_name: str = "") -> None:
        """Attach to a simulation and capture its initial state."""
        snapshot = sim.snapshot()
        self.recording = SimulationRecording(
            recorded_at=datetime.now().isoformat(),
            run_name=run_name,
            config=sim.config.to_dict(),
            vessels=[
                {"id": v.vessel_id, "name": v.name, "type": v.vessel_type.value}
                for v in snapshot.vessels
            ],
            hotspots=[h.to_dict() for h in snapshot.hotspots],
        )
        self.events = []
        self._sim = sim
        sim.add_event_callback(self._record_event)
        self._is_recording = True
        self.record_frame(snapshot)

    def _record_event(self, event: SimulationEvent) -> None:
        if self._is_recording:
            self.events.append(event)

    def record_frame(self, snapshot: SimulationSnapshot) -> None:
        """Record one frame from a snapshot."""
        if not self._is_recording:
            return

        frame: Dict[str, Any] = {
            "tick": snapshot.tick_count,
            "t": snapshot.current_time,
            "vessels": {},
        }
        for vessel in snapshot.vessels:
            frame["vessels"][vessel.vessel_id] = {
                "lat": round(vessel.lat, 6),
                "lng": round(vessel.lng, 6),
                "status": vessel.status.value,
                "battery": round(vessel.battery, 2),
                "plastic": round(vessel.plastic_collected, 1),
                "target": vessel.current_target,
            }
        self.recording.frames.append(frame)

    def end_recording(self, sim: Optional[FleetSimulation] = None) -> None:
        """Detach from the simulation and finalize the recording."""
        sim = sim or self._sim
        if sim is not None:
            sim.remove_event_callback(self._record_event)
            self.recording.duration_s = sim.current_time
            self.recording.total_ticks = sim.tick_count

        self.recording.events = [e.to_dict() for e in self.events]
        self._sim = None
        self._is_recording = False

    def save(self, filepath: str) -> str:
        """Save recording to JSON file."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            f.write(self.recording.to_json())

        return str(path)

    def get_recording(self) -> SimulationRecording:
        """Get the current recording."""
        return self.recording


def create_recording_filename(
    run_name: str = "fleet",
    timestamp: Optional[datetime] = None,
) -> str:
    """Generate a filename for a simulation recording."""
    if timestamp is None:
        timestamp = datetime.now()

    clean = run_name.strip().lower().replace(" ", "_").replace("-", "_")[:30] or "fleet"
    date_str = timestamp.strftime("%Y%m%d_%H%M%S")

    return f"sim_{clean}_{date_str}.json"
