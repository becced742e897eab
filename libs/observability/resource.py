"""
OpenTelemetry resource shared by the log, trace and metric pipelines.
"""

from typing import Dict

from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.attributes.service_attributes import SERVICE_NAME

from libs.config import OTELConfig


def parse_attributes(raw: str) -> Dict[str, str]:
    """
    Parse an OTEL-style ``k1=v1,k2=v2`` attribute string.

    Entries without ``=`` are ignored.
    """
    attrs: Dict[str, str] = {}
    for pair in raw.split(","):
        if "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        attrs[key.strip()] = value.strip()
    return attrs


def build_resource(cfg: OTELConfig) -> Resource:
    """Create the Resource describing this ordersim process."""
    return Resource.create(
        {SERVICE_NAME: cfg.service_name, **parse_attributes(cfg.resource_attributes)}
    )
