"""
Bootstrap wiring for the order simulator.

Responsible for:
- Loading runtime and host settings
- Choosing the host backend (WooCommerce REST or in-memory)
- Constructing the timer, scheduler, synthesizer and SimulatorService
"""

import random
from typing import Final, Optional

from apps.simulator.src.core.config import (
    RuntimeSettings,
    get_runtime_settings,
    get_woocommerce_settings,
    load_simulator_settings,
)
from apps.simulator.src.infra.identity_pool import CsvIdentityPool
from apps.simulator.src.infra.memory_store import InMemoryStore
from apps.simulator.src.infra.timer import LocalTimer
from apps.simulator.src.infra.woocommerce_client import WooCommerceClient
from apps.simulator.src.service.customer_cache import CustomerCache
from apps.simulator.src.service.scheduler import Scheduler
from apps.simulator.src.service.simulator_service import SimulatorService
from apps.simulator.src.service.synthesizer import OrderSynthesizer
from libs.observability import get_logger


def build_host(runtime_cfg: RuntimeSettings):
    """
    Build the host commerce adapter selected by `RUNTIME__BACKEND`.

    The returned object serves as catalog, customer directory and checkout.
    """
    if runtime_cfg.backend == "woocommerce":
        return WooCommerceClient(
            cfg=get_woocommerce_settings(),
            logger=get_logger("WooCommerceClient"),
        )
    return InMemoryStore.with_demo_catalog()


def bootstrap(runtime_cfg: Optional[RuntimeSettings] = None) -> SimulatorService:
    """
    Build a fully wired SimulatorService instance.

    Returns:
        SimulatorService: Ready-to-run service.
    """
    log = get_logger("simulator-bootstrap")
    cfg: Final[RuntimeSettings] = runtime_cfg or get_runtime_settings()
    log.info("Bootstrapping order simulator", extra={"backend": cfg.backend})

    rng = random.Random(cfg.seed)
    host = build_host(cfg)
    timer = LocalTimer(state_path=cfg.timer_state_path, logger=get_logger("LocalTimer"))
    identity_pool = CsvIdentityPool(cfg.identity_pool_path, logger=get_logger("CsvIdentityPool"))
    scheduler = Scheduler(timer=timer, rng=rng, logger=get_logger("Scheduler"))

    synthesizer = OrderSynthesizer(
        catalog=host,
        directory=host,
        identities=identity_pool,
        checkout=host,
        scheduler=scheduler,
        customer_cache=CustomerCache(ttl_sec=cfg.customer_cache_ttl_sec),
        rng=rng,
        logger=get_logger("OrderSynthesizer"),
    )

    service = SimulatorService(
        settings_loader=load_simulator_settings,
        synthesizer=synthesizer,
        scheduler=scheduler,
        timer=timer,
        identity_pool=identity_pool,
        logger=get_logger("SimulatorService"),
        poll_interval_sec=cfg.poll_interval_sec,
    )

    log.info("Order simulator initialized")
    return service
