"""
Client identity: contact normalization and identifier classification.

A client identifier arriving from the outside is either a UUID (direct key
into manual_clients / cached_clients) or free text that is a phone number or
an email found on WooCommerce orders. The choice is made once, by
classify_identifier, and the resulting variant is passed down.
"""
import re
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

_PHONE_NOISE = re.compile(r"[\s-]")


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def normalize_phone(phone: Optional[str]) -> str:
    """Strip whitespace and hyphens: '064 307-3023' -> '0643073023'"""
    return _PHONE_NOISE.sub("", phone or "")


@dataclass(frozen=True)
class ByKey:
    """Primary-key lookup in manual_clients, then cached_clients"""
    id: uuid.UUID


@dataclass(frozen=True)
class ByContact:
    """Phone or email matched against WooCommerce billing details"""
    value: str

    @property
    def looks_like_email(self) -> bool:
        return "@" in self.value


Identifier = Union[ByKey, ByContact]


def classify_identifier(raw: str) -> Identifier:
    value = (raw or "").strip()
    if UUID_PATTERN.match(value):
        return ByKey(uuid.UUID(value))
    return ByContact(value)


def billing_matches(order: dict, phone: Optional[str] = None, email: Optional[str] = None) -> bool:
    """
    Exact match of an order's billing phone (normalized) or email (case-insensitive).
    Empty targets never match.
    """
    billing = order.get("billing") or {}
    target_phone = normalize_phone(phone)
    if target_phone and normalize_phone(billing.get("phone")) == target_phone:
        return True
    target_email = normalize_email(email)
    if target_email and normalize_email(billing.get("email")) == target_email:
        return True
    return False


def filter_orders_by_contact(
    orders: Iterable[dict],
    phone: Optional[str] = None,
    email: Optional[str] = None,
) -> List[dict]:
    return [o for o in orders if billing_matches(o, phone=phone, email=email)]
