"""
Service-specific configuration for the order simulator.

This module ONLY handles:
- Order synthesis settings (rate, product counts, status weights, pool)
- Host connection settings (which backend, WooCommerce credentials)
- Runtime settings (poll interval, state files, cache lifetime)

Values are read from namespaced environment variables:

    SIMULATOR__TIME_PERIOD_HOURS=24
    SIMULATOR__ORDERS_PER_PERIOD=30
    SIMULATOR__STATUS_WEIGHTS__COMPLETED_PCT=40
    SIMULATOR__PRODUCT_POOL=[12,15]
    SIMULATOR__SETTINGS_FILE=/var/lib/ordersim/settings.json

    WOOCOMMERCE__URL=https://shop.example.com
    WOOCOMMERCE__CONSUMER_KEY=ck_...
    WOOCOMMERCE__CONSUMER_SECRET=cs_...

    RUNTIME__BACKEND=woocommerce
    RUNTIME__POLL_INTERVAL_SEC=60
    RUNTIME__TIMER_STATE_PATH=.ordersim/timer.json

Synthesis settings may also be persisted in a JSON file named by
``SIMULATOR__SETTINGS_FILE``; environment variables win over the file, and
the file wins over field defaults.
"""

import os
from functools import lru_cache
from typing import List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

SETTINGS_FILE_ENV = "SIMULATOR__SETTINGS_FILE"
DEFAULT_TIMER_STATE_PATH = ".ordersim/timer.json"


class StatusWeights(BaseModel):
    """
    Percent chances for each terminal order status.

    They need not sum to 100: whatever completed + processing leave
    uncovered falls to failed, and failed_pct itself is informational.
    """

    completed_pct: float = Field(default=40, ge=0, le=100)
    processing_pct: float = Field(default=50, ge=0, le=100)
    failed_pct: float = Field(default=10, ge=0, le=100)


class SimulatorSettings(BaseSettings):
    """
    Settings controlling when orders are synthesized and what they contain.

    Immutable for the duration of one synthesis run; the service reloads
    them between runs.
    """

    time_period_hours: float = Field(default=24, gt=0)
    orders_per_period: int = Field(default=30, ge=0)

    min_products: int = Field(default=1, ge=1)
    max_products: int = Field(default=5, ge=1)

    create_users: bool = True
    status_weights: StatusWeights = Field(default_factory=StatusWeights)

    product_pool: List[int] = Field(
        default_factory=list,
        description="Product ids to draw from; ids not published are skipped. Empty means every published product.",
    )

    settings_file: Optional[str] = Field(
        default=None,
        description="JSON file holding persisted operator settings.",
    )

    model_config = SettingsConfigDict(
        env_prefix="SIMULATOR__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="after")
    def _check_product_range(self) -> "SimulatorSettings":
        if self.min_products > self.max_products:
            raise ValueError(
                f"min_products ({self.min_products}) exceeds max_products ({self.max_products})"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        sources: List[PydanticBaseSettingsSource] = [init_settings, env_settings, dotenv_settings]
        settings_file = os.getenv(SETTINGS_FILE_ENV)
        if settings_file:
            sources.append(JsonConfigSettingsSource(settings_cls, json_file=settings_file))
        return tuple(sources)


class WooCommerceSettings(BaseSettings):
    """
    WooCommerce REST API credentials.

    Values come from environment variables prefixed with `WOOCOMMERCE__`.
    """

    url: str = Field(default="http://localhost:8080", description="Store base URL.")
    consumer_key: str = Field(default="")
    consumer_secret: str = Field(default="")
    api_prefix: str = Field(default="/wp-json/wc/v3")
    timeout_sec: float = Field(default=10.0, gt=0)
    page_size: int = Field(default=100, ge=1, le=100)

    model_config = SettingsConfigDict(
        env_prefix="WOOCOMMERCE__",
        case_sensitive=False,
        extra="ignore",
    )


class RuntimeSettings(BaseSettings):
    """
    Process-level settings for the simulator loop.

    Values come from environment variables prefixed with `RUNTIME__`.
    """

    backend: Literal["memory", "woocommerce"] = Field(
        default="memory",
        description="Host commerce backend the simulator talks to.",
    )
    poll_interval_sec: float = Field(
        default=60.0,
        gt=0,
        description="Longest sleep between checks of the pending fire time.",
    )
    timer_state_path: Optional[str] = Field(
        default=DEFAULT_TIMER_STATE_PATH,
        description=(
            "JSON file persisting the pending fire time across restarts and between "
            "CLI invocations. Relative to the working directory; empty keeps it in memory."
        ),
    )
    identity_pool_path: Optional[str] = Field(
        default=None,
        description="Candidate identity CSV. Defaults to the bundled dataset.",
    )
    customer_cache_ttl_sec: Optional[float] = Field(
        default=None,
        gt=0,
        description="Lifetime of the existing-customer cache. None keeps it for the process.",
    )
    seed: Optional[int] = Field(default=None, description="Seed for reproducible runs.")

    model_config = SettingsConfigDict(
        env_prefix="RUNTIME__",
        case_sensitive=False,
        extra="ignore",
    )


def load_simulator_settings() -> SimulatorSettings:
    """
    Read SimulatorSettings fresh from the settings file and environment.

    Raises:
        RuntimeError: If any value fails validation.
    """
    try:
        return SimulatorSettings()
    except ValidationError as exc:
        raise RuntimeError("Invalid configuration values.") from exc


@lru_cache()
def get_simulator_settings() -> SimulatorSettings:
    """
    Cached accessor for SimulatorSettings as loaded at startup.
    """
    return load_simulator_settings()


@lru_cache()
def get_woocommerce_settings() -> WooCommerceSettings:
    """
    Cached accessor for WooCommerceSettings.
    """
    return WooCommerceSettings()


@lru_cache()
def get_runtime_settings() -> RuntimeSettings:
    """
    Cached accessor for RuntimeSettings.
    """
    return RuntimeSettings()
