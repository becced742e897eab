"""
Structured JSON logging with optional OpenTelemetry log export.

This module configures:
- stdout JSON logs, one object per line
- trace/span correlation in every log line
- an OTLP log pipeline when OTEL export is enabled
"""

import json
import logging
import sys
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor

from libs.config import OTELConfig
from libs.observability.otlp_exporter import build_log_exporter
from libs.observability.resource import build_resource

# Attributes every LogRecord carries; anything else came from `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class JsonTraceFormatter(logging.Formatter):
    """
    JSON formatter including trace_id and span_id.

    Each line holds level, logger, message, time, service, the active
    trace/span ids (or null), and the JSON-serializable fields passed via
    ``extra``. Values that cannot be serialized are rendered with ``repr``.
    """

    def __init__(self, service_name: str = "ordersim") -> None:
        super().__init__()
        self._service = service_name

    def format(self, record: logging.LogRecord) -> str:
        span_ctx = trace.get_current_span().get_span_context()

        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "service": self._service,
            "trace_id": f"{span_ctx.trace_id:032x}" if span_ctx.is_valid else None,
            "span_id": f"{span_ctx.span_id:016x}" if span_ctx.is_valid else None,
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_") or key in payload:
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = repr(value)
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, separators=(",", ":"))


def init_logging(level: int = logging.INFO, cfg: Optional[OTELConfig] = None) -> None:
    """
    Configure the root logger for the current process.

    Args:
        level: Minimum log level for the root logger.
        cfg: OTEL settings. When None or disabled only stdout JSON is set up.
    """
    service_name = cfg.service_name if cfg else "ordersim"

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(JsonTraceFormatter(service_name))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(stdout_handler)
    root.setLevel(level)

    if cfg is None or not cfg.enabled:
        return

    logger_provider = LoggerProvider(resource=build_resource(cfg))
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(build_log_exporter(cfg))
    )
    root.addHandler(LoggingHandler(level=level, logger_provider=logger_provider))


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a module- or component-level logger.

    This helper is the canonical way for application code to obtain a logger.
    """
    return logging.getLogger(name)
