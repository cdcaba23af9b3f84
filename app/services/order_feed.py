"""
Merged order lists: WooCommerce orders and manual orders in one row shape,
newest start date first.
"""
import logging
import uuid
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.integrations.woocommerce import WooCommerceClient, WooCommerceError
from app.models.cached_client import CachedClient
from app.models.manual_client import ManualClient
from app.models.manual_order import ManualOrder, DEFAULT_PAYMENT_METHOD
from app.schemas.orders import FeedOrder
from app.services.identity import ByKey, Identifier, filter_orders_by_contact

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

# Line-item meta keys written by the shop's delivery plugins
START_DATE_KEY_MARKERS = ("datum", "start", "početak")
DURATION_KEYS = {
    "pa_odaberite-trajanje-paketa",
    "pa_program-duration",
    "pa_период",
    "pa_molimo-odaberite-trajanje-paketa",
    "Molimo odaberite trajanje paketa",
    "Trajanje",
    "program-duration",
    "период",
    "odaberite-trajanje-paketa",
}
NOTE_KEY_MARKER = "napomena"

DISPLAY_DATE_FORMATS = ("%d-%m-%Y", "%d.%m.%Y", "%d/%m/%Y", "%Y-%m-%d")


def parse_display_date(value: Optional[str]) -> Optional[date]:
    if not value or value == NOT_AVAILABLE:
        return None
    text = str(value).strip().rstrip(".")
    for fmt in DISPLAY_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_display_date(value: Optional[date]) -> str:
    return value.strftime("%d-%m-%Y") if value else NOT_AVAILABLE


def manual_display_id(order_id: uuid.UUID) -> str:
    """Short id for manual orders: first 8 hex digits of the UUID mod 10000, e.g. 'M-0421#'"""
    number = int(order_id.hex[:8], 16) % 10000
    return f"M-{number:04d}#"


def extract_line_item_meta(order: dict) -> Tuple[str, str, str]:
    """(start_date, duration, note) from line-item meta; later items override earlier ones"""
    start_date = NOT_AVAILABLE
    duration = NOT_AVAILABLE
    note = ""
    for item in order.get("line_items") or []:
        for meta in item.get("meta_data") or []:
            key = meta.get("key") or ""
            lowered = key.lower()
            value = meta.get("value")
            if not isinstance(value, str):
                continue
            if any(marker in lowered for marker in START_DATE_KEY_MARKERS):
                start_date = value
            if key in DURATION_KEYS:
                duration = value
            if NOTE_KEY_MARKER in lowered:
                note = value
    return start_date, duration, note


def woocommerce_feed_row(order: dict) -> FeedOrder:
    billing = order.get("billing") or {}
    start_date, duration, note = extract_line_item_meta(order)
    address = ", ".join(p for p in (billing.get("address_1"), billing.get("city")) if p)
    return FeedOrder(
        id=f"#{order.get('id')}",
        product=", ".join(item.get("name", "") for item in order.get("line_items") or []),
        start_date=start_date,
        date=order.get("date_created"),
        duration=duration,
        status=order.get("status") or "",
        payment_method=order.get("payment_method_title"),
        source="woocommerce",
        customer=f"{billing.get('first_name') or ''} {billing.get('last_name') or ''}".strip(),
        email=billing.get("email"),
        phone=billing.get("phone"),
        address=address or None,
        note=order.get("customer_note") or note or None,
    )


def manual_feed_row(order: ManualOrder) -> FeedOrder:
    client = order.client
    created = order.created_at.isoformat() if order.created_at else None
    return FeedOrder(
        id=manual_display_id(order.id),
        product=order.product_name,
        start_date=format_display_date(order.start_date),
        date=created or (order.start_date.isoformat() if order.start_date else None),
        duration=f"{order.duration_days} dana",
        status=order.status,
        payment_method=order.payment_method or DEFAULT_PAYMENT_METHOD,
        source="manual",
        manual_id=order.id,
        customer=client.full_name if client else None,
        email=client.email if client else None,
        phone=client.phone if client else None,
        address=order.address,
        note=order.customer_note,
    )


def sort_feed(rows: Iterable[FeedOrder]) -> List[FeedOrder]:
    """Newest start date first. Stable; rows without a parsable date go last."""
    return sorted(rows, key=lambda r: parse_display_date(r.start_date) or date.min, reverse=True)


def _woocommerce_orders_for(
    woo: WooCommerceClient,
    phone: Optional[str],
    email: Optional[str],
    search_window: int,
) -> List[dict]:
    term = phone or email
    if not term:
        return []
    try:
        orders = woo.search_orders(term, per_page=search_window)
    except WooCommerceError as e:
        logger.error("WooCommerce order search failed for %s: %s", term, e)
        return []
    return filter_orders_by_contact(orders, phone=phone, email=email)


def collect_client_orders(
    db: Session,
    woo: WooCommerceClient,
    identifier: Identifier,
    search_window: int = 100,
) -> List[FeedOrder]:
    wc_orders: List[dict] = []
    manual_orders: List[ManualOrder] = []

    if isinstance(identifier, ByKey):
        manual = db.query(ManualClient).filter(ManualClient.id == identifier.id).first()
        if manual:
            manual_orders = (
                db.query(ManualOrder)
                .options(joinedload(ManualOrder.client))
                .filter(ManualOrder.client_id == manual.id)
                .order_by(ManualOrder.start_date.desc())
                .all()
            )
            wc_orders = _woocommerce_orders_for(woo, manual.phone, manual.email, search_window)
        else:
            cached = db.query(CachedClient).filter(CachedClient.id == identifier.id).first()
            if cached:
                wc_orders = _woocommerce_orders_for(woo, cached.phone, cached.email, search_window)
    else:
        wc_orders = _woocommerce_orders_for(woo, identifier.value, identifier.value, search_window)

    rows = [woocommerce_feed_row(o) for o in wc_orders] + [manual_feed_row(o) for o in manual_orders]
    return sort_feed(rows)


def recent_order_feed(db: Session, woo: WooCommerceClient, wc_limit: int = 20) -> List[FeedOrder]:
    """Latest WooCommerce orders plus every manual order"""
    try:
        wc_orders = woo.recent_orders(per_page=wc_limit)
    except WooCommerceError as e:
        logger.error("Could not load recent WooCommerce orders: %s", e)
        wc_orders = []

    manual_orders = (
        db.query(ManualOrder)
        .options(joinedload(ManualOrder.client))
        .order_by(ManualOrder.created_at.desc())
        .all()
    )

    rows = [woocommerce_feed_row(o) for o in wc_orders] + [manual_feed_row(o) for o in manual_orders]
    return sort_feed(rows)
