"""
Factory functions for OTLP exporters (gRPC logging, metrics, trace).
"""

from typing import Dict, Optional

from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

from libs.config import OTELConfig
from libs.observability.resource import parse_attributes


def _common_kwargs(cfg: OTELConfig) -> Dict[str, object]:
    """
    Endpoint, headers and insecure flag shared by every exporter.

    Headers use the same ``k=v,k=v`` syntax as resource attributes.
    """
    headers: Optional[Dict[str, str]] = (
        parse_attributes(cfg.otlp_headers) if cfg.otlp_headers else None
    )
    return {
        "endpoint": cfg.otlp_endpoint,
        "headers": headers,
        "insecure": cfg.otlp_endpoint.startswith("http://"),
    }


def build_trace_exporter(cfg: OTELConfig) -> OTLPSpanExporter:
    return OTLPSpanExporter(**_common_kwargs(cfg))


def build_metric_exporter(cfg: OTELConfig) -> OTLPMetricExporter:
    return OTLPMetricExporter(**_common_kwargs(cfg))


def build_log_exporter(cfg: OTELConfig) -> OTLPLogExporter:
    return OTLPLogExporter(**_common_kwargs(cfg))
