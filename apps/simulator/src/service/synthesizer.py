"""
Order synthesis: one run produces one order or one logged failure.

A run resolves the product pool, draws a line-item count, picks or creates a
customer, fills a cart, submits the order through the host checkout and
assigns a weighted-random terminal status. Whatever happens, the cart is
emptied and the scheduler re-armed before the run returns.
"""

from __future__ import annotations

import logging
import random
import secrets
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from apps.simulator.src.core.config import SimulatorSettings, StatusWeights
from apps.simulator.src.core.errors import (
    CustomerResolutionFailed,
    HostError,
    NoCandidateRows,
    NoCustomersAvailable,
    NoProductsAvailable,
    OrderCreationFailed,
    SimulationError,
    UserCreationExhausted,
)
from apps.simulator.src.domain.ports import (
    CheckoutService,
    CustomerDirectory,
    IdentityPool,
    ProductCatalog,
)
from apps.simulator.src.infra.metrics import SimulatorInstruments, get_simulator_instruments
from apps.simulator.src.service.cart import Cart
from apps.simulator.src.service.customer_cache import CustomerCache
from apps.simulator.src.service.scheduler import Scheduler
from libs.models.orders import (
    CUSTOMER_ROLE,
    Customer,
    NewCustomer,
    OrderDraft,
    OrderStatus,
    SynthesisResult,
)
from libs.observability.tracing import get_tracer

MAX_LOGIN_ATTEMPTS = 5


def assign_status(weights: StatusWeights, roll: int) -> OrderStatus:
    """
    Map a roll in [1, 100] to a terminal status.

    Completed covers rolls up to `completed_pct`, processing the next
    `processing_pct`, failed the rest. When the first two reach 100 or more,
    failed cannot occur.
    """
    completed = weights.completed_pct
    processing = completed + weights.processing_pct
    if roll <= completed:
        return OrderStatus.COMPLETED
    if roll <= processing:
        return OrderStatus.PROCESSING
    return OrderStatus.FAILED


class OrderSynthesizer:
    """
    Builds synthesized orders against a host commerce backend.
    """

    def __init__(
        self,
        catalog: ProductCatalog,
        directory: CustomerDirectory,
        identities: IdentityPool,
        checkout: CheckoutService,
        scheduler: Scheduler,
        customer_cache: Optional[CustomerCache] = None,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
        instruments: Optional[SimulatorInstruments] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._catalog = catalog
        self._directory = directory
        self._identities = identities
        self._checkout = checkout
        self._scheduler = scheduler
        self._customers = customer_cache or CustomerCache()
        self._rng = rng or random.Random()
        self._log = logger or logging.getLogger("OrderSynthesizer")
        self._metrics = instruments or get_simulator_instruments()
        self._now = now
        self._tracer = get_tracer("ordersim.synthesizer")

    def resolve_product_pool(self, cfg: SimulatorSettings) -> List[int]:
        """
        Published products to draw from: the configured pool restricted to
        ids the catalog still publishes, or the whole catalog.
        """
        try:
            product_ids = self._catalog.list_published_products(include=cfg.product_pool or None)
        except HostError as exc:
            raise NoProductsAvailable("Product catalog query failed.") from exc

        if not product_ids:
            raise NoProductsAvailable(
                "No products found to create an order.",
                configured_pool=len(cfg.product_pool),
            )
        return product_ids

    def draw_line_item_count(self, cfg: SimulatorSettings) -> int:
        # min_products <= max_products is enforced when settings load
        return self._rng.randint(cfg.min_products, cfg.max_products)

    def create_new_customer(self) -> Customer:
        """
        Materialize a customer account from a random candidate identity.

        Samples up to MAX_LOGIN_ATTEMPTS rows looking for one whose login is
        not registered yet. No account is created when every sample collides.
        """
        rows = self._identities.rows()
        if not rows:
            raise NoCandidateRows("Candidate identity pool is empty.")

        candidate = None
        for attempt in range(1, MAX_LOGIN_ATTEMPTS + 1):
            row = self._rng.choice(rows)
            if not self._directory.login_exists(row.username):
                candidate = row
                break
            self._log.debug(
                "Candidate login already registered",
                extra={"username": row.username, "attempt": attempt},
            )

        if candidate is None:
            raise UserCreationExhausted(
                f"Failed to find a unique username after {MAX_LOGIN_ATTEMPTS} attempts.",
                attempts=MAX_LOGIN_ATTEMPTS,
            )

        address = candidate.to_address()
        customer = self._directory.create_customer(
            NewCustomer(
                username=candidate.username,
                email=candidate.email,
                first_name=candidate.given_name,
                last_name=candidate.surname,
                password=secrets.token_urlsafe(12),
                role=CUSTOMER_ROLE,
                billing=address,
                shipping=address,
            )
        )
        self._metrics.customers_created.add(1)
        self._log.info(
            "Customer created from identity pool",
            extra={"customer_id": customer.id, "username": customer.username},
        )
        return customer

    def pick_existing_customer(self) -> Customer:
        customer_ids = self._customers.get(
            lambda: self._directory.list_customer_ids(CUSTOMER_ROLE)
        )
        if not customer_ids:
            raise NoCustomersAvailable("No customer accounts to pick from.")
        return self._directory.get_customer(self._rng.choice(customer_ids))

    def resolve_customer(self, cfg: SimulatorSettings) -> Customer:
        """
        Pick an existing customer, or with `create_users` a coin flip
        between creating a new one and picking an existing one.
        """
        create = cfg.create_users and self._rng.randint(0, 1) == 1
        try:
            return self.create_new_customer() if create else self.pick_existing_customer()
        except (NoCandidateRows, UserCreationExhausted, NoCustomersAvailable, HostError) as exc:
            raise CustomerResolutionFailed(
                "Failed to get or create a user for the order.",
                path="create" if create else "existing",
            ) from exc

    def roll_status(self, weights: StatusWeights) -> OrderStatus:
        return assign_status(weights, self._rng.randint(1, 100))

    def _submit(self, draft: OrderDraft) -> int:
        try:
            return self._checkout.create_order(draft)
        except HostError as exc:
            raise OrderCreationFailed(
                "Failed to create order.",
                customer_id=draft.customer_id,
                status_code=exc.status_code,
            ) from exc

    def _finalize(self, order_id: int, customer: Customer, status: OrderStatus, draft: OrderDraft) -> datetime:
        created_at = self._now()
        meta = {
            "ordersim_customer_user": str(customer.id),
            "ordersim_payment_method": draft.payment_method,
            "ordersim_payment_method_title": draft.payment_method_title,
        }
        try:
            self._checkout.finalize_order(order_id, status, created_at, meta)
        except HostError as exc:
            raise OrderCreationFailed(
                "Order created but its status could not be set.",
                order_id=order_id,
                status_code=exc.status_code,
            ) from exc
        return created_at

    def synthesize_order(self, cfg: SimulatorSettings) -> SynthesisResult:
        """
        Run one synthesis attempt.

        Never raises for SimulationError: failures are logged, counted and
        returned as a failed SynthesisResult. The scheduler is re-armed
        in every case.
        """
        started = time.perf_counter()
        cart = Cart()
        result: Optional[SynthesisResult] = None

        with self._tracer.start_as_current_span("synthesize_order") as span:
            try:
                product_ids = self.resolve_product_pool(cfg)
                count = self.draw_line_item_count(cfg)
                customer = self.resolve_customer(cfg)

                for _ in range(count):
                    cart.add(self._rng.choice(product_ids))

                draft = OrderDraft(
                    customer_id=customer.id,
                    line_items=cart.line_items(),
                    billing=customer.billing,
                    shipping=customer.shipping,
                )
                order_id = self._submit(draft)
                status = self.roll_status(cfg.status_weights)
                created_at = self._finalize(order_id, customer, status, draft)

                span.set_attribute("ordersim.order_id", order_id)
                span.set_attribute("ordersim.status", status.value)
                self._metrics.orders_created.add(1, {"status": status.value})
                self._log.info(
                    "Order created",
                    extra={
                        "order_id": order_id,
                        "customer_id": customer.id,
                        "order_status": status.value,
                        "item_count": cart.item_count(),
                    },
                )
                result = SynthesisResult(
                    ok=True,
                    order_id=order_id,
                    customer_id=customer.id,
                    status=status,
                    line_items=draft.line_items,
                    created_at=created_at,
                )
            except SimulationError as exc:
                extra = exc.log_extra()
                span.set_attribute("ordersim.error", extra["error"])
                self._metrics.run_failures.add(1, {"stage": exc.stage})
                self._log.error("Order synthesis failed: %s", exc, extra=extra)
                result = SynthesisResult(
                    ok=False,
                    error=extra["error"],
                    cause=extra.get("cause"),
                    stage=exc.stage,
                    message=str(exc),
                )
            finally:
                cart.empty()
                next_fire_at = self._scheduler.schedule_next(cfg)
                self._metrics.run_latency.record((time.perf_counter() - started) * 1000)

        return result.model_copy(update={"next_fire_at": next_fire_at})
