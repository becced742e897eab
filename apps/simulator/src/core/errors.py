"""
Error taxonomy for synthesis runs.

Every error here is non-fatal: it aborts the current run, gets logged with
its stage and context, and the scheduler is re-armed regardless.
"""

from typing import Any, Dict, Optional


class SimulationError(Exception):
    """Base class for failures that abort a single synthesis run."""

    stage: str = "synthesis"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context: Dict[str, Any] = context

    def log_extra(self) -> Dict[str, Any]:
        """Structured fields for `logger.*(..., extra=...)`."""
        extra: Dict[str, Any] = {"stage": self.stage, "error": type(self).__name__}
        if self.__cause__ is not None:
            extra["cause"] = type(self.__cause__).__name__
        extra.update(self.context)
        return extra


class NoProductsAvailable(SimulationError):
    stage = "resolve_products"


class NoCandidateRows(SimulationError):
    stage = "create_customer"


class UserCreationExhausted(SimulationError):
    stage = "create_customer"


class NoCustomersAvailable(SimulationError):
    stage = "pick_customer"


class CustomerResolutionFailed(SimulationError):
    stage = "resolve_customer"


class OrderCreationFailed(SimulationError):
    stage = "submit_order"


class HostError(Exception):
    """
    A host commerce call failed (transport error or rejected request).

    Raised by adapters; the synthesizer translates it into the
    SimulationError of the stage that made the call.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
