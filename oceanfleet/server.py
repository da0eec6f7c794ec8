"""
HTTP API and periodic runner for the fleet simulation.

Provides:
- SimulationRunner: asyncio timers driving vessel ticks and mission updates
- SimulationHttpServer: REST endpoints for display clients

Endpoints:
- GET  /health, /status
- GET  /vessels, /hotspots, /missions   (latest snapshot)
- POST /simulation/start, /simulation/stop
- POST /trails/reset
- POST /tick                            (optional {"deltaSeconds": n})
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import math
from typing import Any, Dict, Optional

from aiohttp import web

from .simulation import FleetSimulation

logger = logging.getLogger(__name__)


class SimulationRunner:
    """
    Drives a simulation from asyncio timers.

    Vessel ticks and mission progress updates run on independent periods.
    Pausing the simulation leaves the timers running; their calls become
    no-ops until it is resumed.
    """

    def __init__(
        self,
        sim: FleetSimulation,
        tick_interval_s: Optional[float] = None,
        mission_interval_s: Optional[float] = None,
    ):
        """
        Args:
            sim: Simulation to drive.
            tick_interval_s: Wall-clock seconds between ticks (default from config).
            mission_interval_s: Wall-clock seconds between mission updates (default from config).
        """
        self.sim = sim
        self.tick_interval_s = tick_interval_s or sim.config.tick_interval_s
        self.mission_interval_s = mission_interval_s or sim.config.mission_update_interval_s
        self._tasks: list[asyncio.Task] = []

    @property
    def is_started(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> None:
        """Start both timers."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._every(self.tick_interval_s, self.sim.tick)),
            asyncio.create_task(self._every(self.mission_interval_s, self.sim.update_mission_progress)),
        ]
        logger.info(
            "Runner started: tick every %.1fs, missions every %.1fs",
            self.tick_interval_s, self.mission_interval_s,
        )

    async def stop(self) -> None:
        """Cancel the timers."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks = []

    @staticmethod
    async def _every(interval_s: float, action) -> None:
        while True:
            await asyncio.sleep(interval_s)
            try:
                action()
            except Exception:
                logger.exception("Timer action %s failed; continuing", getattr(action, "__name__", action))


class SimulationHttpServer:
    """
    HTTP API server for display clients.

    Reads are served from the simulation's latest snapshot.
    """

    def __init__(
        self,
        sim: FleetSimulation,
        host: str = "localhost",
        port: int = 8780,
        runner: Optional[SimulationRunner] = None,
    ):
        """
        Initialize HTTP server.

        Args:
            sim: Simulation to expose
            host: Host to bind to
            port: Port to listen on
            runner: Timer runner started and stopped with the server (optional)
        """
        self.sim = sim
        self.host = host
        self.port = port
        self.runner = runner

        self._app: Optional[web.Application] = None
        self._app_runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    def create_app(self) -> web.Application:
        """Build the aiohttp application with all routes."""
        app = web.Application()
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/status", self._handle_status)
        app.router.add_get("/vessels", self._handle_vessels)
        app.router.add_get("/hotspots", self._handle_hotspots)
        app.router.add_get("/missions", self._handle_missions)
        app.router.add_post("/simulation/start", self._handle_start)
        app.router.add_post("/simulation/stop", self._handle_stop)
        app.router.add_post("/trails/reset", self._handle_reset_trails)
        app.router.add_post("/tick", self._handle_tick)
        return app

    async def start(self) -> None:
        """Start the HTTP server (and the runner, if any)."""
        self._app = self.create_app()
        self._app_runner = web.AppRunner(self._app)
        await self._app_runner.setup()

        self._site = web.TCPSite(self._app_runner, self.host, self.port)
        await self._site.start()

        if self.runner is not None:
            await self.runner.start()

        logger.info("Simulation API running on http://%s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self.runner is not None:
            await self.runner.stop()
        if self._site:
            await self._site.stop()
        if self._app_runner:
            await self._app_runner.cleanup()

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response({"status": "ok"})

    async def _handle_status(self, request: web.Request) -> web.Response:
        snapshot = self.sim.snapshot()
        return web.json_response({
            "running": snapshot.running,
            "tick": snapshot.tick_count,
            "time": snapshot.current_time,
            "vessels": len(snapshot.vessels),
            "hotspots": len(snapshot.hotspots),
            "missions": len(snapshot.missions),
        })

    async def _handle_vessels(self, request: web.Request) -> web.Response:
        return web.json_response([v.to_dict() for v in self.sim.snapshot().vessels])

    async def _handle_hotspots(self, request: web.Request) -> web.Response:
        return web.json_response([h.to_dict() for h in self.sim.snapshot().hotspots])

    async def _handle_missions(self, request: web.Request) -> web.Response:
        return web.json_response([m.to_dict() for m in self.sim.snapshot().missions])

    async def _handle_start(self, request: web.Request) -> web.Response:
        self.sim.set_simulation_running(True)
        return web.json_response({"running": True})

    async def _handle_stop(self, request: web.Request) -> web.Response:
        self.sim.set_simulation_running(False)
        return web.json_response({"running": False})

    async def _handle_reset_trails(self, request: web.Request) -> web.Response:
        self.sim.reset_trails()
        return web.json_response({"reset": len(self.sim.snapshot().vessels)})

    async def _handle_tick(self, request: web.Request) -> web.Response:
        """Advance one tick now. Body: {"deltaSeconds": float} (optional)."""
        delta: Optional[float] = None
        if request.can_read_body:
            try:
                body: Dict[str, Any] = await request.json()
            except json.JSONDecodeError:
                return web.json_response({"error": "Invalid JSON"}, status=400)
            if not isinstance(body, dict):
                return web.json_response({"error": "Body must be an object"}, status=400)
            if "deltaSeconds" in body:
                try:
                    delta = float(body["deltaSeconds"])
                except (TypeError, ValueError):
                    return web.json_response({"error": "deltaSeconds must be a number"}, status=400)
                if not (math.isfinite(delta) and delta > 0):
                    return web.json_response({"error": "deltaSeconds must be positive"}, status=400)

        results = self.sim.tick(delta)
        snapshot = self.sim.snapshot()
        return web.json_response({
            "tick": snapshot.tick_count,
            "time": snapshot.current_time,
            "moved": [r.vessel_id for r in results],
            "reached": [r.vessel_id for r in results if r.waypoint_reached],
        })
