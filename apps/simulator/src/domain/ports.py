"""
Capabilities the simulator needs from its host environment.

The synthesis core depends only on these protocols; `infra` provides the
WooCommerce REST, in-memory and local-timer implementations.
"""

from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

from libs.models.orders import (
    CandidateIdentity,
    Customer,
    NewCustomer,
    OrderDraft,
    OrderStatus,
)


class TimerFacility(Protocol):
    """One-shot timer holding at most one pending fire time (epoch seconds)."""

    def schedule(self, fire_at: int) -> None: ...

    def next_scheduled(self) -> Optional[int]: ...

    def clear(self) -> None: ...


class ProductCatalog(Protocol):
    def list_published_products(self, include: Optional[Sequence[int]] = None) -> List[int]:
        """Published product ids, optionally restricted to `include`."""
        ...


class CustomerDirectory(Protocol):
    def list_customer_ids(self, role: str) -> List[int]: ...

    def login_exists(self, login: str) -> bool: ...

    def create_customer(self, customer: NewCustomer) -> Customer: ...

    def get_customer(self, customer_id: int) -> Customer: ...


class IdentityPool(Protocol):
    def rows(self) -> Sequence[CandidateIdentity]: ...


class CheckoutService(Protocol):
    def create_order(self, draft: OrderDraft) -> int:
        """Persist the order and return its id."""
        ...

    def finalize_order(
        self,
        order_id: int,
        status: OrderStatus,
        created_at: datetime,
        meta: Dict[str, str],
    ) -> None:
        """Set terminal status, creation timestamp and metadata."""
        ...
