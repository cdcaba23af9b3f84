"""
Identity resolution for the client detail endpoints.

ByKey identifiers hit the local tables; ByContact identifiers go through the
WooCommerce order search, which also surfaces guest orders that a customer
lookup would miss. Search results are relevance matches, so they are filtered
again on exact billing phone / email before use.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.integrations.woocommerce import WooCommerceClient, WooCommerceError, is_guest
from app.models.cached_client import CachedClient
from app.models.manual_client import ManualClient
from app.schemas.clients import ClientDetail, ContactOrderStats
from app.services.client_sync import order_created_at
from app.services.identity import ByContact, ByKey, Identifier, filter_orders_by_contact

logger = logging.getLogger(__name__)

_NO_DATE = datetime.min.replace(tzinfo=timezone.utc)


def _full_name(first: Optional[str], last: Optional[str]) -> str:
    return f"{first or ''} {last or ''}".strip()


def manual_client_view(client: ManualClient) -> ClientDetail:
    return ClientDetail(
        id=str(client.id),
        name=client.full_name,
        first_name=client.first_name or "",
        last_name=client.last_name or "",
        email=client.email,
        phone=client.phone,
        address=client.address,
        city=client.city,
        source="manual",
        created_at=client.created_at,
    )


def cached_client_view(client: CachedClient) -> ClientDetail:
    return ClientDetail(
        id=str(client.id),
        name=client.full_name,
        first_name=client.first_name or "",
        last_name=client.last_name or "",
        email=client.email,
        phone=client.phone,
        address=client.address,
        city=client.city,
        source="cached",
        wc_customer_id=client.wc_customer_id,
        order_count=client.order_count,
        last_order_date=client.last_order_date,
    )


def _latest_order_date(orders: List[dict]):
    dates = [d for d in (order_created_at(o) for o in orders) if d]
    return max(dates) if dates else None


def _woocommerce_view(
    identifier: ByContact,
    order: Optional[dict],
    customer: Optional[dict],
    matches: List[dict],
) -> ClientDetail:
    """Prefer the registered customer profile; fall back to the order's billing block"""
    order_billing = (order or {}).get("billing") or {}
    customer_billing = (customer or {}).get("billing") or {}
    billing = customer_billing or order_billing

    first = (customer or {}).get("first_name") or billing.get("first_name") or order_billing.get("first_name")
    last = (customer or {}).get("last_name") or billing.get("last_name") or order_billing.get("last_name")
    email = (customer or {}).get("email") or billing.get("email") or order_billing.get("email")
    wc_customer_id = (customer or {}).get("id")
    if wc_customer_id is None and order and not is_guest(order.get("customer_id")):
        wc_customer_id = int(order["customer_id"])

    return ClientDetail(
        id=identifier.value,
        name=_full_name(first, last),
        first_name=first or "",
        last_name=last or "",
        email=email or None,
        phone=billing.get("phone") or order_billing.get("phone") or None,
        address=billing.get("address_1") or order_billing.get("address_1") or None,
        city=billing.get("city") or order_billing.get("city") or None,
        source="woocommerce",
        wc_customer_id=wc_customer_id,
        order_count=len(matches),
        last_order_date=_latest_order_date(matches),
    )


def _resolve_by_key(db: Session, identifier: ByKey) -> Optional[ClientDetail]:
    manual = db.query(ManualClient).filter(ManualClient.id == identifier.id).first()
    if manual:
        return manual_client_view(manual)

    cached = db.query(CachedClient).filter(CachedClient.id == identifier.id).first()
    if cached:
        return cached_client_view(cached)

    return None


def _resolve_by_contact(
    woo: WooCommerceClient,
    identifier: ByContact,
    search_window: int,
) -> Optional[ClientDetail]:
    orders = woo.search_orders(identifier.value, per_page=search_window)
    matches = filter_orders_by_contact(orders, phone=identifier.value, email=identifier.value)

    if matches:
        # order_count is bounded by the search window, not an exact total
        order = max(matches, key=lambda o: order_created_at(o) or _NO_DATE)
        customer = None
        if not is_guest(order.get("customer_id")):
            try:
                customer = woo.get_customer(int(order["customer_id"]))
            except WooCommerceError as e:
                logger.warning("Customer %s lookup failed, using order billing: %s", order.get("customer_id"), e)
        return _woocommerce_view(identifier, order, customer, matches)

    if identifier.looks_like_email:
        customers = woo.find_customers_by_email(identifier.value)
        if customers:
            return _woocommerce_view(identifier, None, customers[0], [])

    return None


def resolve_client(
    db: Session,
    woo: WooCommerceClient,
    identifier: Identifier,
    search_window: Optional[int] = None,
) -> Optional[ClientDetail]:
    """
    Build the unified client view for an identifier, or None when every
    lookup strategy comes back empty. WooCommerceError propagates when the
    order search itself is unavailable.
    """
    if isinstance(identifier, ByKey):
        return _resolve_by_key(db, identifier)
    return _resolve_by_contact(woo, identifier, search_window or settings.client_search_window)


def contact_order_stats(
    woo: WooCommerceClient,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    search_window: Optional[int] = None,
) -> ContactOrderStats:
    """Order count and latest order date for a phone/email, phone preferred as search term"""
    term = phone or email or ""
    orders = woo.search_orders(term, per_page=search_window or settings.client_search_window)
    matches = filter_orders_by_contact(orders, phone=phone, email=email)
    return ContactOrderStats(order_count=len(matches), last_order_date=_latest_order_date(matches))
