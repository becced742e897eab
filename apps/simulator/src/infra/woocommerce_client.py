"""
WooCommerce REST API client.

This client is the simulator's host adapter for a real storefront:
- list published products (optionally a configured subset)
- list, look up and create customer accounts
- create orders and set their terminal status and metadata

Every transport failure, non-2xx response or malformed response body is
logged and raised as HostError.

The REST API treats an order's `date_created` as read-only, so the store
keeps its own creation time (the moment `create_order` posts). The synthesis
timestamp is written to the `ordersim_created_at` meta entry instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import requests

from apps.simulator.src.core.config import WooCommerceSettings
from apps.simulator.src.core.errors import HostError
from libs.models.orders import Customer, NewCustomer, OrderDraft, OrderStatus

T = TypeVar("T")

CREATED_AT_META_KEY = "ordersim_created_at"


class WooCommerceClient:
    """
    Thin wrapper around the WooCommerce REST API (v3).
    """

    def __init__(
        self,
        cfg: WooCommerceSettings,
        logger: logging.Logger,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Create a new WooCommerceClient.

        Args:
            cfg: Store URL, API prefix and consumer key/secret.
            logger: Logger instance for structured logging.
            session: HTTP session to reuse; a new one is created when None.
        """
        self._base_url = cfg.url.rstrip("/") + "/" + cfg.api_prefix.strip("/")
        self._timeout = cfg.timeout_sec
        self._page_size = cfg.page_size
        self._log = logger
        self._session = session or requests.Session()
        self._session.auth = (cfg.consumer_key, cfg.consumer_secret)

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        try:
            resp = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            self._log.exception(
                "WooCommerce request failed",
                extra={"method": method, "url": url},
            )
            raise HostError(f"{method} {path} failed: {exc}") from exc

        if resp.status_code not in (200, 201):
            self._log.error(
                "Unexpected status code from WooCommerce",
                extra={
                    "method": method,
                    "url": url,
                    "status_code": resp.status_code,
                    "body": resp.text[:500],
                },
            )
            raise HostError(
                f"{method} {path} returned {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            self._log.error(
                "WooCommerce response is not JSON",
                extra={"method": method, "url": url, "body": resp.text[:500]},
            )
            raise HostError(
                f"{method} {path} returned a non-JSON body",
                status_code=resp.status_code,
            ) from exc

    def _parse(self, path: str, body: Any, parser: Callable[[Any], T]) -> T:
        """Apply `parser` to a decoded body; any shape mismatch becomes HostError."""
        try:
            return parser(body)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            # pydantic's ValidationError is a ValueError
            self._log.error(
                "Malformed WooCommerce response",
                extra={"path": path, "error": str(exc)},
            )
            raise HostError(f"{path} returned a malformed body: {exc}") from exc

    def _paginate(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Collect every page of a list endpoint."""
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self._request(
                "GET", path, params={**params, "per_page": self._page_size, "page": page}
            )
            if not isinstance(batch, list):
                self._log.error(
                    "Malformed WooCommerce response",
                    extra={"path": path, "error": "not a list"},
                )
                raise HostError(f"{path} returned {type(batch).__name__}, expected a list")
            items.extend(batch)
            if len(batch) < self._page_size:
                return items
            page += 1

    def list_published_products(self, include: Optional[Sequence[int]] = None) -> List[int]:
        params: Dict[str, Any] = {"status": "publish"}
        if include:
            params["include"] = ",".join(str(pid) for pid in include)
        products = self._paginate("/products", params)
        return self._parse("/products", products, _ids)

    def list_customer_ids(self, role: str) -> List[int]:
        customers = self._paginate("/customers", {"role": role})
        return self._parse("/customers", customers, _ids)

    def login_exists(self, login: str) -> bool:
        matches = self._request("GET", "/customers", params={"search": login, "role": "all"})
        return self._parse(
            "/customers",
            matches,
            lambda body: any(str(c.get("username", "")).lower() == login.lower() for c in body),
        )

    def create_customer(self, customer: NewCustomer) -> Customer:
        payload = customer.model_dump(exclude={"role"})
        created = self._parse(
            "/customers",
            self._request("POST", "/customers", json=payload),
            Customer.model_validate,
        )
        self._log.info(
            "Customer created",
            extra={"customer_id": created.id, "username": customer.username},
        )
        return created

    def get_customer(self, customer_id: int) -> Customer:
        path = f"/customers/{customer_id}"
        return self._parse(path, self._request("GET", path), Customer.model_validate)

    def create_order(self, draft: OrderDraft) -> int:
        payload = {
            "customer_id": draft.customer_id,
            "payment_method": draft.payment_method,
            "payment_method_title": draft.payment_method_title,
            "set_paid": False,
            "billing": draft.billing.model_dump(),
            "shipping": draft.shipping.model_dump(exclude={"email"}),
            "line_items": [item.model_dump() for item in draft.line_items],
        }
        created = self._request("POST", "/orders", json=payload)
        return self._parse("/orders", created, lambda body: int(body["id"]))

    def finalize_order(
        self,
        order_id: int,
        status: OrderStatus,
        created_at: datetime,
        meta: Dict[str, str],
    ) -> None:
        meta_data = [{"key": key, "value": value} for key, value in meta.items()]
        meta_data.append(
            {
                "key": CREATED_AT_META_KEY,
                "value": created_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"),
            }
        )
        self._request(
            "PUT",
            f"/orders/{order_id}",
            json={"status": status.value, "meta_data": meta_data},
        )


def _ids(items: List[Dict[str, Any]]) -> List[int]:
    return [int(item["id"]) for item in items]
