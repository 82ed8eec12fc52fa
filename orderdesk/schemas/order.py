"""
orderdesk/schemas/order.py

Purpose: Order schemas

- One canonical order status enumeration (spaced spellings)
- Order record as returned by /api/orders, normalized at the boundary
- The single order-creation contract (product + quantity + delivery charge)
- Partial order updates
"""

import re
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderdesk.schemas.common import IdStr, NormalizedEnum
from orderdesk.utils.constants import NAME_REGEX
from orderdesk.utils.validation_utils import sanitize_input, validate_email, validate_phone_number


class OrderStatus(NormalizedEnum):
    """
    Order lifecycle statuses. Hyphenated variants such as
    "Pending-Moderator" resolve to the same member.
    """
    PENDING_MODERATOR = "Pending Moderator"
    PACKAGE_TO_CONFIRMATION = "Package to Confirmation"
    IN_REVIEW = "In Review"
    PENDING = "Pending"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    OFFICE_RECEIVED = "Office Received"


# Statuses after which an order no longer needs a courier tracking id
CLOSED_ORDER_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class OrderSource(NormalizedEnum):
    MESSENGER = "Messenger"
    CALL = "Call"
    WHATSAPP = "WhatsApp"
    WEBSITE = "Website"


class Order(BaseModel):
    """
    Order as cached from the API. Monetary fields are informational;
    the backend remains authoritative.
    """
    model_config = ConfigDict(extra="allow")

    id: IdStr
    order_id: Optional[str] = None
    customer_name: str = ""
    mobile_number: str = ""
    email: Optional[str] = None
    address: str = ""
    moderator_id: Optional[IdStr] = None
    product_id: Optional[IdStr] = None
    quantity: int = 1
    delivery_charge: float = 0.0
    order_source: Optional[OrderSource] = None
    notes: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING_MODERATOR
    total_amount: Optional[float] = None
    fraud_result: Optional[Any] = None
    steadfast_tracking_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("delivery_charge", mode="before")
    @classmethod
    def default_delivery_charge(cls, v):
        return 0.0 if v in (None, "") else v

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, v):
        return 1 if v in (None, "") else v

    @field_validator("order_source", mode="before")
    @classmethod
    def blank_source(cls, v):
        return None if v == "" else v

    @property
    def display_id(self) -> str:
        return self.order_id or self.id

    @property
    def has_fraud_check(self) -> bool:
        return bool(self.fraud_result) and self.fraud_result != "{}"

    @property
    def needs_tracking(self) -> bool:
        return not self.steadfast_tracking_id and self.status not in CLOSED_ORDER_STATUSES


def _check_customer_name(value: str) -> str:
    value = sanitize_input(value)
    if not 2 <= len(value) <= 100:
        raise ValueError("Customer name must be between 2 and 100 characters")
    if not re.match(NAME_REGEX, value):
        raise ValueError("Customer name contains invalid characters")
    return value


def _check_address(value: str) -> str:
    value = sanitize_input(value)
    if not 10 <= len(value) <= 500:
        raise ValueError("Address must be between 10 and 500 characters")
    return value


def _check_optional_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = sanitize_input(value)
    if value and not validate_email(value):
        raise ValueError("Please enter a valid email address")
    return value


def _check_mobile(value: str) -> str:
    if not validate_phone_number(value):
        raise ValueError("Please enter a valid Bangladesh phone number")
    return value.strip()


def _check_notes(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = sanitize_input(value)
    if len(value) > 1000:
        raise ValueError("Notes must be less than 1000 characters")
    return value


class OrderCreate(BaseModel):
    """
    The order-creation form. Validated and sanitized before any request is made.
    """
    customer_name: str
    mobile_number: str
    email: Optional[str] = ""
    address: str
    product_id: IdStr = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1, le=999)
    delivery_charge: float = Field(default=0.0, ge=0, le=1000)
    order_source: OrderSource
    notes: Optional[str] = ""
    status: OrderStatus = OrderStatus.PENDING_MODERATOR
    moderator_id: Optional[IdStr] = None

    @field_validator("customer_name")
    @classmethod
    def validate_customer_name(cls, v: str) -> str:
        return _check_customer_name(v)

    @field_validator("mobile_number")
    @classmethod
    def validate_mobile(cls, v: str) -> str:
        return _check_mobile(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: Optional[str]) -> Optional[str]:
        return _check_optional_email(v)

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _check_address(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: Optional[str]) -> Optional[str]:
        return _check_notes(v)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class OrderUpdate(BaseModel):
    """Partial order update; only the fields that were set are sent."""
    customer_name: Optional[str] = None
    mobile_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    product_id: Optional[IdStr] = None
    quantity: Optional[int] = Field(default=None, ge=1, le=999)
    delivery_charge: Optional[float] = Field(default=None, ge=0, le=1000)
    order_source: Optional[OrderSource] = None
    notes: Optional[str] = None
    status: Optional[OrderStatus] = None
    moderator_id: Optional[IdStr] = None
    steadfast_tracking_id: Optional[str] = None

    @field_validator("customer_name")
    @classmethod
    def validate_customer_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_customer_name(v)

    @field_validator("mobile_number")
    @classmethod
    def validate_mobile(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_mobile(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: Optional[str]) -> Optional[str]:
        return _check_optional_email(v)

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_address(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: Optional[str]) -> Optional[str]:
        return _check_notes(v)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)
