"""
Fire-time scheduling for synthesis runs.

The gap before the next order is drawn uniformly from whole seconds in
[1, 2 * average gap], which spreads `orders_per_period` orders over the
configured period with a mean close to the target rate.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Optional, Tuple

from apps.simulator.src.core.config import SimulatorSettings
from apps.simulator.src.domain.ports import TimerFacility


def delay_bounds(cfg: SimulatorSettings) -> Optional[Tuple[int, int]]:
    """
    Inclusive bounds, in seconds, for the delay before the next fire event.

    Returns None when `orders_per_period` is zero: nothing should be armed.
    """
    if cfg.orders_per_period <= 0:
        return None
    period_seconds = cfg.time_period_hours * 3600
    avg_gap = period_seconds / cfg.orders_per_period
    return 1, max(1, int(round(avg_gap * 2)))


class Scheduler:
    """
    Arms the host timer for the next synthesis run.

    At most one fire time is ever pending: `schedule_next` clears before it
    arms, and `ensure_scheduled` never arms over a pending entry.
    """

    def __init__(
        self,
        timer: TimerFacility,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._timer = timer
        self._rng = rng or random.Random()
        self._clock = clock
        self._log = logger or logging.getLogger("Scheduler")

    def schedule_next(self, cfg: SimulatorSettings) -> Optional[int]:
        """
        Draw the next fire time and arm the timer for it.

        Returns:
            The armed fire time in epoch seconds, or None when the configured
            rate is zero (a deliberate no-op).
        """
        bounds = delay_bounds(cfg)
        if bounds is None:
            self._log.info(
                "Order rate is zero, nothing scheduled",
                extra={"orders_per_period": cfg.orders_per_period},
            )
            return None

        delay = self._rng.randint(*bounds)
        fire_at = int(self._clock()) + delay

        self._timer.clear()
        self._timer.schedule(fire_at)

        self._log.info(
            "Next order scheduled",
            extra={"fire_at": fire_at, "delay_sec": delay, "max_delay_sec": bounds[1]},
        )
        return fire_at

    def ensure_scheduled(self, cfg: SimulatorSettings) -> Optional[int]:
        """Arm the timer only if nothing is pending; return the pending fire time."""
        pending = self._timer.next_scheduled()
        if pending is not None:
            return pending
        return self.schedule_next(cfg)

    def cancel(self) -> None:
        self._timer.clear()
        self._log.info("Pending order schedule cleared")
