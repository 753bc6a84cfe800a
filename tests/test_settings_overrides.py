from __future__ import annotations

from pathlib import Path
from typing import Iterable

from sensors.tmp102 import Tmp102Sensor
from services.dispatcher import HttpDestination
from services.pipeline import build_default_pipeline
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    archive_root = tmp_path / "archive"

    monkeypatch.setenv("SAMPLE_INTERVAL_SECONDS", "0.5")
    monkeypatch.setenv("ARCHIVE_BATCH_SIZE", "25")
    monkeypatch.setenv("ARCHIVE_WAIT_TIMEOUT_SECONDS", "0.2")
    monkeypatch.setenv("ARCHIVE_ROOT_PATH", str(archive_root))
    monkeypatch.setenv("REALTIME_ENABLED", "yes")
    monkeypatch.setenv("REALTIME_CLIENT_URL", "http://client.local/readings")
    monkeypatch.setenv("REALTIME_WORKER_COUNT", "3")
    monkeypatch.setenv("SENSOR_SOURCE", "TMP102")
    monkeypatch.setenv("SENSOR_I2C_BUS", "0")
    monkeypatch.setenv("SENSOR_I2C_ADDRESS", "0x48")

    caches = (get_settings, build_default_pipeline)
    _clear_caches(caches)

    pipeline = build_default_pipeline()

    try:
        assert pipeline.sensor_loop.interval == 0.5
        assert pipeline.sensor_loop.realtime is True
        assert pipeline.writer.batch_size == 25
        assert pipeline.writer.wait_timeout == 0.2
        assert pipeline.store.root_path == Path(archive_root)
        assert pipeline.dispatcher.executor._max_workers == 3
        assert isinstance(pipeline.destination, HttpDestination)
        assert pipeline.destination.url == "http://client.local/readings"
        sensor = pipeline.sensor_loop.sensor
        assert isinstance(sensor, Tmp102Sensor)
        assert (sensor.bus, sensor.address) == (0, 0x48)
    finally:
        pipeline.stop()
        _clear_caches(caches)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("SAMPLE_INTERVAL_SECONDS", "soon")
    monkeypatch.setenv("ARCHIVE_BATCH_SIZE", "0")
    monkeypatch.setenv("REALTIME_ENABLED", "maybe")
    monkeypatch.setenv("REALTIME_CLIENT_URL", "   ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.sample_interval == 1.0
        assert settings.batch_size == 10
        assert settings.realtime_enabled is False
        assert settings.realtime_client_url is None
        assert settings.sensor_source == "simulated"
        assert settings.i2c_address == 0x49
        assert settings.log_level == "DEBUG"
    finally:
        get_settings.cache_clear()
