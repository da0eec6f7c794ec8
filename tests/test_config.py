"""Tests for SimulationConfig loading and validation."""

import json

import pytest

from oceanfleet.config import DEFAULT_SEED_PATH, SimulationConfig


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any OCEANFLEET_* overrides inherited from the shell or .env."""
    for name in SimulationConfig.__dataclass_fields__:
        monkeypatch.delenv("OCEANFLEET_" + name.upper(), raising=False)
    return monkeypatch


class TestDefaults:

    def test_default_values(self):
        config = SimulationConfig()
        assert config.tick_seconds == 5.0
        assert config.max_plan_waypoints == 3
        assert config.trail_limit == 200
        assert config.arrival_threshold_m == 5000.0
        assert config.min_step_speed_ms == 0.1
        assert config.seed is None

    def test_default_seed_path_exists(self):
        assert DEFAULT_SEED_PATH.exists()
        assert SimulationConfig().seed_path == str(DEFAULT_SEED_PATH)

    @pytest.mark.parametrize("kwargs", [
        {"tick_seconds": 0},
        {"tick_interval_s": -1},
        {"mission_update_interval_s": 0},
        {"max_plan_waypoints": 0},
        {"trail_limit": 0},
        {"max_events": 0},
    ])
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)


class TestLoading:

    def test_from_dict_ignores_unknown_keys(self):
        config = SimulationConfig.from_dict({"tick_seconds": 2.0, "colour": "blue"})
        assert config.tick_seconds == 2.0

    def test_from_json(self, tmp_path):
        path = tmp_path / "sim.json"
        path.write_text(json.dumps({"trail_limit": 50, "seed": 9}))

        config = SimulationConfig.from_json(str(path))

        assert config.trail_limit == 50
        assert config.seed == 9

    def test_from_json_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SimulationConfig.from_json(str(tmp_path / "missing.json"))

    def test_to_dict_round_trip(self):
        config = SimulationConfig(tick_seconds=1.5, seed=3)
        assert SimulationConfig.from_dict(config.to_dict()) == config


class TestEnvironment:

    def test_env_overrides(self, clean_env):
        clean_env.setenv("OCEANFLEET_TICK_SECONDS", "2.5")
        clean_env.setenv("OCEANFLEET_SEED", "7")
        clean_env.setenv("OCEANFLEET_MAX_PLAN_WAYPOINTS", "5")

        config = SimulationConfig.from_env()

        assert config.tick_seconds == 2.5
        assert config.seed == 7
        assert config.max_plan_waypoints == 5

    def test_env_overlays_base(self, clean_env):
        clean_env.setenv("OCEANFLEET_TRAIL_LIMIT", "10")
        base = SimulationConfig(tick_seconds=3.0)

        config = SimulationConfig.from_env(base)

        assert config.tick_seconds == 3.0
        assert config.trail_limit == 10

    def test_blank_seed_means_random(self, clean_env):
        clean_env.setenv("OCEANFLEET_SEED", "")
        assert SimulationConfig.from_env(SimulationConfig(seed=4)).seed is None

    def test_invalid_env_value(self, clean_env):
        clean_env.setenv("OCEANFLEET_TICK_SECONDS", "-1")
        with pytest.raises(ValueError):
            SimulationConfig.from_env()
