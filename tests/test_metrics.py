from __future__ import annotations

from opentelemetry.sdk.metrics import MeterProvider

from WorkshopProvisioner.metrics import MetricsEmitter
from WorkshopProvisioner.telemetry import _parse_headers, configure_otel


def test_emitter_buffers_points_without_otel() -> None:
    emitter = MetricsEmitter(env={})
    emitter.emit("provisioner.script.passed", 1.0, script="01.sh")

    assert not emitter.enabled
    (point,) = emitter.points()
    assert point.tags == {"script": "01.sh"}
    assert emitter.flush() == (point,)
    assert emitter.points() == ()


def test_configure_otel_is_noop_unless_enabled() -> None:
    assert configure_otel(env={}) is None
    assert configure_otel(env={"WP_ENABLE_OTEL": "1"}) is None


def test_parse_headers_skips_malformed_pairs() -> None:
    assert _parse_headers("a=1, b = 2 ,broken,") == {"a": "1", "b": "2"}
    assert _parse_headers(None) == {}


def test_configure_otel_installs_meter_provider() -> None:
    env = {"WP_ENABLE_OTEL": "1", "OTEL_EXPORTER_OTLP_ENDPOINT": "http://localhost:4317"}
    provider = configure_otel(env=env)
    try:
        assert isinstance(provider, MeterProvider)
    finally:
        if provider is not None:
            provider.shutdown(timeout_millis=1000)
