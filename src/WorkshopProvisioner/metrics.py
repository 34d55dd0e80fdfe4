"""Metric emission for provisioning and verification runs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from opentelemetry import metrics as otel_metrics


@dataclass
class MetricPoint:
    """Represents a single metric measurement."""

    name: str
    value: float
    tags: Mapping[str, str] = field(default_factory=dict)


class MetricsEmitter:
    """Telemetry emitter for provisioner metrics.

    Records through the OpenTelemetry meter when ``WP_ENABLE_OTEL=1``. Every
    point is also buffered so that it can be written into the run report.
    """

    def __init__(
        self,
        namespace: str = "workshop_provisioner",
        env: Mapping[str, str] | None = None,
    ) -> None:
        env = os.environ if env is None else env
        self._namespace = namespace
        self._buffer: list[MetricPoint] = []
        self._recorders: dict[str, object] = {}
        self._meter = None
        if env.get("WP_ENABLE_OTEL", "0") == "1":
            self._meter = otel_metrics.get_meter_provider().get_meter(namespace)

    @property
    def enabled(self) -> bool:
        return self._meter is not None

    def emit(self, name: str, value: float, **tags: str) -> None:
        if self._meter is not None:
            recorder = self._recorders.get(name)
            if recorder is None:
                recorder = self._meter.create_histogram(name)
                self._recorders[name] = recorder
            recorder.record(value, tags)  # type: ignore[attr-defined]
        self._buffer.append(MetricPoint(name=name, value=value, tags=dict(tags)))

    def points(self) -> Sequence[MetricPoint]:
        return tuple(self._buffer)

    def flush(self) -> Sequence[MetricPoint]:
        data = tuple(self._buffer)
        self._buffer.clear()
        return data
