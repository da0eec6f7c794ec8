"""
Tests for the HTTP API and the timer runner.

The aiohttp test server runs inside asyncio.run, so no async pytest plugin
is needed.
"""

import asyncio

import pytest
from aiohttp import test_utils

from oceanfleet.seed import load_seed_data
from oceanfleet.server import SimulationHttpServer, SimulationRunner
from oceanfleet.simulation import SimulationEventType, create_simulation_from_seed


@pytest.fixture
def sim():
    return create_simulation_from_seed(load_seed_data(), seed=11)


def call(sim, method, path, **kwargs):
    """Issue one request against a fresh app and return (status, json)."""
    async def _call():
        app = SimulationHttpServer(sim).create_app()
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            response = await client.request(method, path, **kwargs)
            return response.status, await response.json()
    return asyncio.run(_call())


# =============================================================================
# READ ENDPOINTS
# =============================================================================

class TestReadEndpoints:

    def test_health(self, sim):
        assert call(sim, "GET", "/health") == (200, {"status": "ok"})

    def test_status(self, sim):
        status, body = call(sim, "GET", "/status")
        assert status == 200
        assert body == {"running": True, "tick": 0, "time": 0.0, "vessels": 5, "hotspots": 6, "missions": 4}

    def test_vessels(self, sim):
        sim.tick()
        status, body = call(sim, "GET", "/vessels")

        assert status == 200
        assert [v["id"] for v in body] == ["os-001", "os-002", "os-003", "os-004", "os-005"]
        assert len(body[0]["plan"]) == 3
        assert len(body[0]["route"]) == 2

    def test_hotspots_and_missions(self, sim):
        _, hotspots = call(sim, "GET", "/hotspots")
        _, missions = call(sim, "GET", "/missions")
        assert hotspots[0]["id"] == "gp-1"
        assert missions[3]["status"] == "paused"


# =============================================================================
# CONTROL ENDPOINTS
# =============================================================================

class TestControlEndpoints:

    def test_stop_and_start(self, sim):
        assert call(sim, "POST", "/simulation/stop") == (200, {"running": False})
        assert not sim.is_running

        assert call(sim, "POST", "/simulation/start") == (200, {"running": True})
        assert sim.is_running

    def test_tick_default_duration(self, sim):
        status, body = call(sim, "POST", "/tick")

        assert status == 200
        assert body["tick"] == 1
        assert body["time"] == 5.0
        assert sorted(body["moved"]) == ["os-001", "os-002", "os-003"]
        assert body["reached"] == []

    def test_tick_custom_duration(self, sim):
        status, body = call(sim, "POST", "/tick", json={"deltaSeconds": 60})
        assert status == 200
        assert body["time"] == 60.0

    @pytest.mark.parametrize("payload", [{"deltaSeconds": -1}, {"deltaSeconds": "soon"}, [1, 2]])
    def test_tick_rejects_bad_body(self, sim, payload):
        status, body = call(sim, "POST", "/tick", json=payload)
        assert status == 400
        assert "error" in body
        assert sim.tick_count == 0

    def test_tick_rejects_invalid_json(self, sim):
        status, _ = call(sim, "POST", "/tick", data="{oops", headers={"Content-Type": "application/json"})
        assert status == 400

    def test_tick_while_stopped(self, sim):
        sim.pause()
        status, body = call(sim, "POST", "/tick")
        assert status == 200
        assert body["moved"] == []
        assert body["tick"] == 0

    def test_reset_trails(self, sim):
        sim.run(ticks=3)
        assert call(sim, "POST", "/trails/reset") == (200, {"reset": 5})
        assert all(len(v.trail) == 1 for v in sim.get_vessels())


# =============================================================================
# RUNNER
# =============================================================================

class TestRunner:

    def test_runner_ticks_and_stops(self, sim):
        runner = SimulationRunner(sim, tick_interval_s=0.01, mission_interval_s=0.02)

        async def _run():
            await runner.start()
            assert runner.is_started
            await asyncio.sleep(0.2)
            await runner.stop()

        asyncio.run(_run())

        assert not runner.is_started
        assert sim.tick_count > 0
        assert sim.get_events_by_type(SimulationEventType.MISSION_PROGRESS)

    def test_failing_action_keeps_timer_alive(self, sim, monkeypatch):
        calls = []

        def flaky_tick():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("callback failed")

        monkeypatch.setattr(sim, "tick", flaky_tick)
        runner = SimulationRunner(sim, tick_interval_s=0.01, mission_interval_s=10.0)

        async def _run():
            await runner.start()
            await asyncio.sleep(0.1)
            await runner.stop()

        asyncio.run(_run())

        assert len(calls) > 1
        assert not runner.is_started

    def test_paused_runner_does_not_tick(self, sim):
        sim.pause()
        runner = SimulationRunner(sim, tick_interval_s=0.01, mission_interval_s=0.01)

        async def _run():
            await runner.start()
            await asyncio.sleep(0.1)
            await runner.stop()

        asyncio.run(_run())
        assert sim.tick_count == 0

    def test_runner_defaults_from_config(self, sim):
        runner = SimulationRunner(sim)
        assert runner.tick_interval_s == sim.config.tick_interval_s
        assert runner.mission_interval_s == sim.config.mission_update_interval_s

    def test_server_starts_runner(self, sim):
        runner = SimulationRunner(sim, tick_interval_s=0.01, mission_interval_s=0.01)
        server = SimulationHttpServer(sim, port=0, runner=runner)

        async def _run():
            await server.start()
            started = runner.is_started
            await asyncio.sleep(0.05)
            await server.stop()
            return started

        assert asyncio.run(_run()) is True
        assert not runner.is_started
