"""
Shared pytest fixtures for the order simulator tests.
"""

import random

import pytest

from apps.simulator.src.core.config import SimulatorSettings
from apps.simulator.src.infra.memory_store import InMemoryStore
from apps.simulator.src.infra.timer import LocalTimer
from apps.simulator.src.service.scheduler import Scheduler
from apps.simulator.src.service.synthesizer import OrderSynthesizer
from tests.helpers import NOW, ListIdentityPool, make_customer


@pytest.fixture
def make_settings():
    def _make(**overrides) -> SimulatorSettings:
        return SimulatorSettings(**overrides)

    return _make


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(
        products={1: "publish", 2: "publish", 3: "publish"},
        customers=[make_customer(100, "existing")],
    )


@pytest.fixture
def timer() -> LocalTimer:
    return LocalTimer()


@pytest.fixture
def scheduler(timer) -> Scheduler:
    return Scheduler(timer=timer, rng=random.Random(7), clock=lambda: NOW)


@pytest.fixture
def make_synthesizer(store, scheduler):
    def _make(rng=None, identities=(), checkout=None, **kwargs) -> OrderSynthesizer:
        return OrderSynthesizer(
            catalog=store,
            directory=store,
            identities=ListIdentityPool(identities),
            checkout=checkout or store,
            scheduler=scheduler,
            rng=rng or random.Random(1),
            **kwargs,
        )

    return _make
