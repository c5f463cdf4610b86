import importlib

import pytest

from track_compression import config


@pytest.fixture
def reload_config(monkeypatch):
    """Reload config after patching env vars, restoring defaults afterwards."""

    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(config)

    yield _reload
    for key in (
        "COMPRESSION_EPSILON_M",
        "COMPRESSION_PRESERVE_ELEVATION",
        "COMPRESSION_MAX_WORKERS",
    ):
        monkeypatch.delenv(key, raising=False)
    importlib.reload(config)


def test_environment_overrides_defaults(reload_config):
    cfg = reload_config(
        COMPRESSION_EPSILON_M="2.5",
        COMPRESSION_PRESERVE_ELEVATION="off",
        COMPRESSION_MAX_WORKERS="4",
    )
    assert cfg.COMPRESSION_EPSILON_M == 2.5
    assert cfg.COMPRESSION_PRESERVE_ELEVATION is False
    assert cfg.COMPRESSION_MAX_WORKERS == 4


def test_invalid_values_fall_back_to_defaults(reload_config):
    cfg = reload_config(
        COMPRESSION_EPSILON_M="tight",
        COMPRESSION_PRESERVE_ELEVATION="maybe",
        COMPRESSION_MAX_WORKERS="2.5",
    )
    assert cfg.COMPRESSION_EPSILON_M == 5.0
    assert cfg.COMPRESSION_PRESERVE_ELEVATION is True
    assert cfg.COMPRESSION_MAX_WORKERS == 1


def test_fixed_thresholds_are_not_configurable(reload_config):
    cfg = reload_config(EARTH_RADIUS_M="1000")
    assert cfg.EARTH_RADIUS_M == 6371000.0
    assert cfg.TURN_ANGLE_THRESHOLD_DEG == 30.0
    assert cfg.SPEED_CHANGE_THRESHOLD_MPS == 2.0
