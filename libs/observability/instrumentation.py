"""
Observability bootstrap: one entrypoint for logging, tracing and metrics.
"""

import logging
from typing import Optional

from libs.config import OTELConfig
from libs.observability.logging import init_logging
from libs.observability.metrics import init_metrics
from libs.observability.tracing import init_tracing


def init_observability(level: int = logging.INFO, cfg: Optional[OTELConfig] = None) -> None:
    """
    Initialize logging, tracing, and metrics for the current process.

    Call once during startup. With no config, or with export disabled,
    only JSON stdout logging is configured and spans/instruments stay no-op.

    Args:
        level: Logging verbosity level for the root logger.
        cfg: OTEL export settings.
    """
    init_logging(level=level, cfg=cfg)
    if cfg is None or not cfg.enabled:
        return
    init_tracing(cfg)
    init_metrics(cfg)
