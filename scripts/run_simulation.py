#!/usr/bin/env python3
"""
Run the cleanup fleet simulation.

Usage:
    python scripts/run_simulation.py --ticks 120 --verbose
    python scripts/run_simulation.py --ticks 720 --seed 7 --record recordings/
    python scripts/run_simulation.py --route
    python scripts/run_simulation.py --serve --port 8780
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from oceanfleet.config import SimulationConfig
from oceanfleet.feed import HotspotFeedClient
from oceanfleet.planner import generate_optimal_route
from oceanfleet.recorder import SimulationRecorder, create_recording_filename
from oceanfleet.seed import load_seed_data
from oceanfleet.server import SimulationHttpServer, SimulationRunner
from oceanfleet.simulation import FleetSimulation, create_simulation_from_seed


def print_summary(sim: FleetSimulation) -> None:
    """Print final vessel and mission state."""
    print(f"\n{'='*60}")
    print(f"SIMULATION SUMMARY: {sim.tick_count} ticks, T+{sim.current_time:.0f}s")
    print(f"{'='*60}")
    for vessel in sim.get_vessels():
        remaining = sum(1 for w in (vessel.plan or []) if not w.completed)
        print(
            f"  {vessel.name:<22} {vessel.status.value:<11} "
            f"({vessel.lat:8.4f}, {vessel.lng:9.4f})  "
            f"target={vessel.current_target or '-':<6} "
            f"plan_left={remaining}  battery={vessel.battery:5.1f}%  "
            f"plastic={vessel.plastic_collected:8.1f} kg"
        )
    print()
    for mission in sim.get_missions():
        print(
            f"  {mission.name:<32} {mission.status.value:<9} "
            f"{mission.plastic_collected:>8.0f}/{mission.plastic_target:.0f} kg  "
            f"eff={mission.efficiency:5.1f}%"
        )
    print(f"{'='*60}\n")


def print_routes(sim: FleetSimulation) -> None:
    """Print a full weighted nearest-neighbour tour for every vessel."""
    hotspots = sim.get_hotspots()
    for vessel in sim.get_vessels():
        route = generate_optimal_route(vessel.lat, vessel.lng, hotspots)
        print(f"\n{vessel.name} ({vessel.vessel_id}):")
        for i, waypoint in enumerate(route):
            eta = waypoint.eta.strftime("%Y-%m-%d") if waypoint.eta else "start"
            label = waypoint.hotspot_id or "current position"
            print(f"  {i}. {label:<18} ({waypoint.lat:8.4f}, {waypoint.lng:9.4f})  {eta}")


async def serve(sim: FleetSimulation, host: str, port: int) -> None:
    """Serve the HTTP API with the timers running until interrupted."""
    server = SimulationHttpServer(sim, host=host, port=port, runner=SimulationRunner(sim))
    await server.start()
    print(f"Simulation API running on http://{host}:{port} (Ctrl+C to stop)")
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await server.stop()


def main():
    parser = argparse.ArgumentParser(
        description="Run the ocean cleanup fleet simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/run_simulation.py --ticks 120 --verbose
    python scripts/run_simulation.py --feed --ticks 60
    python scripts/run_simulation.py --serve --port 8780
        """,
    )

    parser.add_argument("--seed-file", help="Seed JSON with vessels, hotspots and missions")
    parser.add_argument("--config", help="Simulation config JSON")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--ticks", type=int, default=60, help="Ticks to run headless (default: 60)")
    parser.add_argument(
        "--tick-seconds",
        type=float,
        default=None,
        help="Simulated seconds per tick (default: 5)",
    )
    parser.add_argument(
        "--mission-every",
        type=int,
        default=2,
        help="Update mission progress every N ticks in headless mode (default: 2)",
    )
    parser.add_argument("--feed", action="store_true", help="Refresh hotspots from the feed first")
    parser.add_argument(
        "--record",
        metavar="PATH",
        help="Save a JSON recording to PATH (a .json file, or a directory for a timestamped name)",
    )
    parser.add_argument("--route", action="store_true", help="Print full route previews and exit")
    parser.add_argument("--serve", action="store_true", help="Serve the HTTP API instead of running headless")
    parser.add_argument("--host", default="localhost", help="HTTP host (default: localhost)")
    parser.add_argument("--port", type=int, default=8780, help="HTTP port (default: 8780)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print every tick")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_json(args.config) if args.config else SimulationConfig()
    config = SimulationConfig.from_env(config)
    if args.tick_seconds is not None:
        try:
            config = replace(config, tick_seconds=args.tick_seconds)
        except ValueError as e:
            parser.error(str(e))

    seed_data = load_seed_data(args.seed_file or config.seed_path)
    sim = create_simulation_from_seed(seed_data, config=config, seed=args.seed)

    if args.feed:
        with HotspotFeedClient() as feed:
            result = feed.fetch_hotspots()
        sim.set_hotspots(result.hotspots)
        source = "fallback zones" if result.used_fallback else result.source
        print(f"Loaded {len(result.hotspots)} hotspots from {source}")
        if result.error:
            print(f"  feed error: {result.error}")

    if args.route:
        print_routes(sim)
        return

    if args.serve:
        try:
            asyncio.run(serve(sim, args.host, args.port))
        except KeyboardInterrupt:
            print("\nStopped.")
        return

    recorder = None
    if args.record:
        recorder = SimulationRecorder()
        recorder.start_recording(sim, run_name="headless")

    if args.verbose:
        sim.add_event_callback(lambda event: print(f"  {event}"))

    for i in range(args.ticks):
        results = sim.tick()
        if args.mission_every > 0 and (i + 1) % args.mission_every == 0:
            sim.update_mission_progress()
        if recorder:
            recorder.record_frame(sim.snapshot())
        if args.verbose:
            moved = ", ".join(f"{r.vessel_id}:{r.distance_to_target_m / 1000:.1f}km" for r in results)
            print(f"T+{sim.current_time:6.0f}s  {moved}")

    print_summary(sim)

    if recorder:
        recorder.end_recording(sim)
        target = Path(args.record)
        if target.suffix != ".json":
            target = target / create_recording_filename("headless")
        path = recorder.save(str(target))
        print(f"Recording saved to {path}")


if __name__ == "__main__":
    main()
