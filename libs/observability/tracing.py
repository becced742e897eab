"""
OpenTelemetry tracing initialization and tracer helper.
"""

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Tracer

from libs.config import OTELConfig
from libs.observability.otlp_exporter import build_trace_exporter
from libs.observability.resource import build_resource


def init_tracing(cfg: OTELConfig) -> None:
    """
    Install a global TracerProvider exporting spans over OTLP.

    Until this runs, tracers returned by `get_tracer` are no-ops.
    """
    provider = TracerProvider(resource=build_resource(cfg))
    provider.add_span_processor(BatchSpanProcessor(build_trace_exporter(cfg)))
    trace.set_tracer_provider(provider)


def get_tracer(name: str = "ordersim") -> Tracer:
    return trace.get_tracer(name)
