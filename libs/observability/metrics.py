"""
Metrics initialization and meter provider for OpenTelemetry.

`init_metrics` installs a process-wide MeterProvider with an OTLP reader.
Instruments created from `get_meter` before that (or when export is
disabled) are no-ops, so components can create them unconditionally.
"""

from typing import Optional

from opentelemetry import metrics
from opentelemetry.metrics import Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

from libs.config import OTELConfig
from libs.observability.otlp_exporter import build_metric_exporter
from libs.observability.resource import build_resource

_provider: Optional[MeterProvider] = None


def init_metrics(cfg: OTELConfig) -> None:
    """
    Initialize the OTel MeterProvider. Idempotent.
    """
    global _provider

    if _provider is not None:
        return

    reader = PeriodicExportingMetricReader(build_metric_exporter(cfg))
    _provider = MeterProvider(resource=build_resource(cfg), metric_readers=[reader])
    metrics.set_meter_provider(_provider)


def get_meter(name: str = "ordersim") -> Meter:
    return metrics.get_meter(name)
