# libs/models/orders.py
"""
Order, customer and identity models for the order simulator.

These define the typed contract between the synthesis core and the host
commerce adapters (WooCommerce REST, in-memory store). Address fields follow
the WooCommerce billing/shipping schema so they can be sent as-is.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

PAYMENT_METHOD = "bacs"
PAYMENT_METHOD_TITLE = "Direct Bank Transfer"
CUSTOMER_ROLE = "customer"


class OrderStatus(str, Enum):
    COMPLETED = "completed"
    PROCESSING = "processing"
    FAILED = "failed"


class Address(BaseModel):
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    email: str = ""
    phone: str = ""


class CandidateIdentity(BaseModel):
    """
    One row of the bundled identity dataset.

    Aliases match the dataset's column headers, so rows can be validated
    straight from ``csv.DictReader``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    gender: str = ""
    given_name: str = Field(alias="givenname")
    surname: str
    street_address: str = Field(alias="streetaddress")
    city: str
    state: str
    zip_code: str = Field(alias="zipcode")
    country: str
    country_full: str = Field(default="", alias="countryfull")
    email: str = Field(alias="emailaddress")
    username: str
    password: str = ""
    telephone: str = Field(default="", alias="telephonenumber")
    maiden_name: str = Field(default="", alias="maidenname")
    birthday: str = ""
    company: str = ""

    def to_address(self) -> Address:
        """Profile address built from this identity; used for billing and shipping alike."""
        return Address(
            first_name=self.given_name,
            last_name=self.surname,
            address_1=self.street_address,
            city=self.city,
            state=self.state,
            postcode=self.zip_code,
            country=self.country,
            email=self.email,
            phone=self.telephone,
        )


class NewCustomer(BaseModel):
    username: str
    email: str
    first_name: str
    last_name: str
    password: str
    role: str = CUSTOMER_ROLE
    billing: Address
    shipping: Address


class Customer(BaseModel):
    id: int
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    role: str = CUSTOMER_ROLE
    billing: Address = Field(default_factory=Address)
    shipping: Address = Field(default_factory=Address)


class LineItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class OrderDraft(BaseModel):
    """Everything the host checkout needs to persist one order."""

    customer_id: int
    line_items: List[LineItem]
    billing: Address
    shipping: Address
    payment_method: str = PAYMENT_METHOD
    payment_method_title: str = PAYMENT_METHOD_TITLE


class SynthesisResult(BaseModel):
    """
    Outcome of one synthesis run.

    On failure ``error`` names the raised error class and ``cause`` the
    underlying one when the error was chained (e.g. a
    CustomerResolutionFailed caused by UserCreationExhausted).
    """

    ok: bool
    order_id: Optional[int] = None
    customer_id: Optional[int] = None
    status: Optional[OrderStatus] = None
    line_items: List[LineItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    next_fire_at: Optional[int] = None
    error: Optional[str] = None
    cause: Optional[str] = None
    stage: Optional[str] = None
    message: Optional[str] = None
