"""
In-memory host commerce store.

Implements ProductCatalog, CustomerDirectory and CheckoutService over plain
dicts. Used by the `memory` backend for dry runs and by the test-suite.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from apps.simulator.src.core.errors import HostError
from libs.models.orders import Customer, NewCustomer, OrderDraft, OrderStatus


@dataclass
class StoredOrder:
    id: int
    draft: OrderDraft
    status: str = "pending"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    meta: Dict[str, str] = field(default_factory=dict)


class InMemoryStore:
    """
    Dict-backed stand-in for a storefront.

    Products map id -> post status ("publish", "draft", ...). Ids for
    customers and orders are allocated from one shared counter, like posts
    and users in a small WordPress install.
    """

    def __init__(
        self,
        products: Optional[Dict[int, str]] = None,
        customers: Iterable[Customer] = (),
    ) -> None:
        self.products: Dict[int, str] = dict(products or {})
        self.customers: Dict[int, Customer] = {c.id: c for c in customers}
        self.orders: Dict[int, StoredOrder] = {}
        start = max([0, *self.products, *self.customers]) + 1
        self._ids = itertools.count(start)

    @classmethod
    def with_demo_catalog(cls, product_count: int = 20) -> "InMemoryStore":
        """Store pre-filled with `product_count` published products."""
        return cls(products={i: "publish" for i in range(1, product_count + 1)})

    def list_published_products(self, include: Optional[Sequence[int]] = None) -> List[int]:
        wanted = set(include) if include else None
        return [
            pid
            for pid, status in self.products.items()
            if status == "publish" and (wanted is None or pid in wanted)
        ]

    def list_customer_ids(self, role: str) -> List[int]:
        return [c.id for c in self.customers.values() if c.role == role]

    def login_exists(self, login: str) -> bool:
        return any(c.username == login for c in self.customers.values())

    def create_customer(self, customer: NewCustomer) -> Customer:
        if self.login_exists(customer.username):
            raise HostError(f"Login {customer.username!r} is already registered.", status_code=400)
        created = Customer(
            id=next(self._ids),
            **customer.model_dump(exclude={"password"}),
        )
        self.customers[created.id] = created
        return created

    def get_customer(self, customer_id: int) -> Customer:
        try:
            return self.customers[customer_id]
        except KeyError:
            raise HostError(f"Unknown customer {customer_id}.", status_code=404) from None

    def create_order(self, draft: OrderDraft) -> int:
        if not draft.line_items:
            raise HostError("Cannot create an order without line items.", status_code=400)
        order = StoredOrder(id=next(self._ids), draft=draft)
        self.orders[order.id] = order
        return order.id

    def finalize_order(
        self,
        order_id: int,
        status: OrderStatus,
        created_at: datetime,
        meta: Dict[str, str],
    ) -> None:
        try:
            order = self.orders[order_id]
        except KeyError:
            raise HostError(f"Unknown order {order_id}.", status_code=404) from None
        order.status = status.value
        order.created_at = created_at
        order.meta.update(meta)
