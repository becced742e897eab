"""
Order simulator service.

Responsibilities:
- Install/uninstall: seed the identity pool, arm or clear the fire event
- Run loop: wait for the pending fire time, run one synthesis, repeat
- Manual trigger: run one synthesis immediately
"""

from __future__ import annotations

import logging
import signal
import sys
import threading
import time
from typing import Callable, Optional

from apps.simulator.src.core.config import SimulatorSettings
from apps.simulator.src.domain.ports import TimerFacility
from apps.simulator.src.infra.identity_pool import CsvIdentityPool
from apps.simulator.src.service.scheduler import Scheduler
from apps.simulator.src.service.synthesizer import OrderSynthesizer
from libs.models.orders import SynthesisResult


class SimulatorService:
    """
    Drives the synthesizer from a single pending fire event.

    Runs are serialized by a lock, so a manual trigger arriving while the
    loop is mid-run waits for it to finish.
    """

    def __init__(
        self,
        settings_loader: Callable[[], SimulatorSettings],
        synthesizer: OrderSynthesizer,
        scheduler: Scheduler,
        timer: TimerFacility,
        identity_pool: CsvIdentityPool,
        logger: logging.Logger,
        poll_interval_sec: float = 60.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Create a new SimulatorService.

        Args:
            settings_loader: Returns fresh settings; called before every run.
            synthesizer: Builds one order per call.
            scheduler: Arms the next fire event.
            timer: Timer facility holding the pending fire event.
            identity_pool: Candidate identities, seeded on install.
            logger: Logger instance.
            poll_interval_sec: Longest sleep between timer checks.
            clock: Wall clock in epoch seconds.
            sleep: Sleep function, replaceable in tests.
        """
        self._load_settings = settings_loader
        self._synthesizer = synthesizer
        self._scheduler = scheduler
        self._timer = timer
        self._identity_pool = identity_pool
        self._log = logger
        self._poll_interval = poll_interval_sec
        self._clock = clock
        self._sleep = sleep

        self._run_lock = threading.Lock()
        self._running: bool = False

    def install(self, generate: Optional[int] = None, seed: Optional[int] = None) -> Optional[int]:
        """
        Seed the identity pool if empty and arm a fresh fire event.

        Returns:
            The armed fire time, or None when the order rate is zero.
        """
        rows = self._identity_pool.ensure_seeded(generate=generate, seed=seed)
        self._scheduler.cancel()
        fire_at = self._scheduler.schedule_next(self._load_settings())
        self._log.info("Simulator installed", extra={"row_count": rows, "fire_at": fire_at})
        return fire_at

    def uninstall(self) -> None:
        self._scheduler.cancel()
        self._log.info("Simulator uninstalled")

    def _synthesize(self, trigger: str) -> SynthesisResult:
        with self._run_lock:
            cfg = self._load_settings()
            self._log.info("Synthesis run started", extra={"trigger": trigger})
            return self._synthesizer.synthesize_order(cfg)

    def generate_now(self) -> SynthesisResult:
        """Manual trigger: synthesize one order immediately."""
        return self._synthesize("manual")

    def tick(self) -> Optional[SynthesisResult]:
        """
        Fire the pending event if it is due.

        The pending entry is cleared before the run, and the run re-arms the
        timer when it finishes. When nothing is pending (e.g. the rate was
        zero and has since been raised) the re-entry guard arms one.
        """
        fire_at = self._timer.next_scheduled()
        if fire_at is None:
            self._scheduler.ensure_scheduled(self._load_settings())
            return None
        if fire_at > self._clock():
            return None

        self._timer.clear()
        return self._synthesize("timer")

    def _seconds_until_due(self) -> float:
        fire_at = self._timer.next_scheduled()
        if fire_at is None:
            return self._poll_interval
        return min(self._poll_interval, max(fire_at - self._clock(), 0.0))

    def _stop(self, *_: object) -> None:
        """
        Signal handler to stop the run loop.

        Exits at once while the loop is idle. A run in flight always
        completes; the loop returns once it sees the cleared flag.
        """
        self._running = False
        if self._run_lock.locked():
            self._log.info("Shutdown signal received. Finishing the current run first.")
            return
        self._log.info("Shutdown signal received. Stopping simulator.")
        sys.exit(0)

    def run(self, max_runs: Optional[int] = None) -> None:
        """
        Main loop: sleep until the pending fire time, synthesize, repeat.

        Args:
            max_runs: Stop after this many timer-triggered runs. None loops
                until a shutdown signal arrives.
        """
        signal.signal(signal.SIGINT, self._stop)
        signal.signal(signal.SIGTERM, self._stop)

        self._running = True
        fire_at = self._scheduler.ensure_scheduled(self._load_settings())
        self._log.info(
            "Order simulator started.",
            extra={"fire_at": fire_at, "poll_interval_sec": self._poll_interval},
        )

        runs = 0
        while self._running:
            try:
                result = self.tick()
            except Exception:  # noqa: BLE001
                self._log.exception("Unexpected error during synthesis run.")
                self._sleep(self._poll_interval)
                continue

            if result is not None:
                runs += 1
                if max_runs is not None and runs >= max_runs:
                    break
                continue

            self._sleep(self._seconds_until_due())

        self._running = False
        self._log.info("Order simulator stopped.", extra={"runs": runs})
