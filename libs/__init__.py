"""
ordersim shared library package.

This package contains:
- shared Pydantic models (orders, customers, candidate identities)
- observability utilities (logging, tracing, metrics)
- global config shared by every ordersim process
"""

from libs.models.orders import (
    Address,
    CandidateIdentity,
    Customer,
    LineItem,
    NewCustomer,
    OrderDraft,
    OrderStatus,
    SynthesisResult,
)

__all__ = [
    "Address",
    "CandidateIdentity",
    "Customer",
    "LineItem",
    "NewCustomer",
    "OrderDraft",
    "OrderStatus",
    "SynthesisResult",
]
