"""Telemetry bootstrap for the provisioner."""

from __future__ import annotations

import logging
import os
from typing import Mapping

from opentelemetry import metrics as otel_metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

logger = logging.getLogger(__name__)


def _parse_headers(raw: str | None) -> Mapping[str, str]:
    if not raw:
        return {}
    pairs = [segment.strip() for segment in raw.split(",") if segment.strip()]
    result: dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        result[key.strip()] = value.strip()
    return result


def configure_otel(
    service_name: str = "workshop_provisioner",
    env: Mapping[str, str] | None = None,
) -> MeterProvider | None:
    """Install an OTLP meter provider when metrics are enabled and an endpoint is set."""

    env = os.environ if env is None else env
    if env.get("WP_ENABLE_OTEL", "0") != "1":
        return None
    endpoint = env.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        return None
    headers = _parse_headers(env.get("OTEL_EXPORTER_OTLP_HEADERS"))
    exporter = OTLPMetricExporter(endpoint=endpoint, headers=headers or None)
    reader = PeriodicExportingMetricReader(exporter)
    resource = Resource.create({"service.name": service_name})
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    otel_metrics.set_meter_provider(provider)
    logger.debug("OpenTelemetry metrics exporter configured", extra={"endpoint": endpoint})
    return provider


__all__ = ["configure_otel"]
