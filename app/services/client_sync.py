"""
Reconciliation of WooCommerce orders into cached_clients.

Two entry points:
- run_full_sync: replays every order page (bounded), rebuilds one aggregate
  per normalized email and overwrites the cached rows batch by batch.
- apply_order_event: per-webhook update. Counts each WooCommerce order id at
  most once (cached_client_orders ledger) and increments order_count inside a
  single INSERT ... ON CONFLICT statement, so concurrent deliveries for the
  same email cannot lose updates.
"""
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.integrations.woocommerce import WooCommerceClient, WooCommerceError, is_guest
from app.models.cached_client import CachedClient, ClientSource
from app.models.cached_client_order import CachedClientOrder
from app.services.identity import normalize_email

logger = logging.getLogger(__name__)

# Columns rewritten by the full sync. id is never touched.
SYNC_COLUMNS = (
    "phone",
    "first_name",
    "last_name",
    "address",
    "city",
    "wc_customer_id",
    "source",
    "order_count",
    "last_order_date",
)


def parse_order_datetime(value) -> Optional[datetime]:
    """WooCommerce dates are ISO 8601 without offset; treat naive values as UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def order_created_at(order: dict) -> Optional[datetime]:
    """
    Order creation time in UTC. date_created is store-local, so the _gmt
    variant is used whenever the payload carries it.
    """
    return parse_order_datetime(order.get("date_created_gmt")) or parse_order_datetime(order.get("date_created"))


def _clean(value) -> str:
    return (value or "").strip() if isinstance(value, str) else (str(value) if value else "")


def _customer_id(order: dict) -> Optional[int]:
    cid = order.get("customer_id")
    if is_guest(cid):
        return None
    return int(cid)


@dataclass
class ClientAggregate:
    """Running summary of every order seen for one email"""
    email: str
    phone: str = ""
    first_name: str = ""
    last_name: str = ""
    address: str = ""
    city: str = ""
    wc_customer_id: Optional[int] = None
    order_count: int = 0
    last_order_date: Optional[datetime] = None
    order_ids: List[int] = field(default_factory=list)

    @property
    def source(self) -> ClientSource:
        return ClientSource.GUEST if self.wc_customer_id is None else ClientSource.REGISTERED

    def add(self, order: dict) -> None:
        billing = order.get("billing") or {}
        self.order_count += 1

        # First non-empty value wins, in iteration order
        for attr, key in (
            ("phone", "phone"),
            ("first_name", "first_name"),
            ("last_name", "last_name"),
            ("address", "address_1"),
            ("city", "city"),
        ):
            if not getattr(self, attr):
                setattr(self, attr, _clean(billing.get(key)))

        if self.wc_customer_id is None:
            self.wc_customer_id = _customer_id(order)

        created = order_created_at(order)
        if created and (self.last_order_date is None or created > self.last_order_date):
            self.last_order_date = created

        if order.get("id"):
            self.order_ids.append(int(order["id"]))

    def as_row(self) -> dict:
        return {
            "email": self.email,
            "phone": self.phone or None,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "address": self.address or None,
            "city": self.city or None,
            "wc_customer_id": self.wc_customer_id,
            "source": self.source,
            "order_count": self.order_count,
            "last_order_date": self.last_order_date,
        }


def aggregate_orders(orders: Iterable[dict]) -> Dict[str, ClientAggregate]:
    """Group orders by normalized billing email. Orders without email are skipped."""
    clients: Dict[str, ClientAggregate] = {}
    skipped = 0
    for order in orders:
        email = normalize_email((order.get("billing") or {}).get("email"))
        if not email:
            skipped += 1
            continue
        clients.setdefault(email, ClientAggregate(email=email)).add(order)
    if skipped:
        logger.info("Skipped %s orders without billing email", skipped)
    return clients


def fetch_all_orders(
    woo: WooCommerceClient,
    max_pages: int,
    per_page: int,
) -> Tuple[List[dict], int, bool]:
    """
    Page through GET /orders?status=any.

    Returns (orders, pages_fetched, aborted). A failed page stops paging but
    keeps whatever was fetched before it. Offset paging shifts when orders
    are created mid-sync, so an order seen on an earlier page is dropped.
    """
    orders: List[dict] = []
    seen_ids = set()
    duplicates = 0
    pages_fetched = 0
    page = 1

    while page <= max_pages:
        try:
            result = woo.list_orders(page=page, per_page=per_page, status="any")
        except WooCommerceError as e:
            logger.error("Order sync aborted at page %s: %s", page, e)
            return orders, pages_fetched, True

        if not result.orders:
            break

        for order in result.orders:
            order_id = order.get("id")
            if order_id and order_id in seen_ids:
                duplicates += 1
                continue
            seen_ids.add(order_id)
            orders.append(order)
        pages_fetched += 1
        logger.info("Fetched orders page %s/%s (%s orders)", page, result.total_pages or "?", len(result.orders))

        if result.total_pages and page >= result.total_pages:
            break
        page += 1

    if duplicates:
        logger.info("Dropped %s orders repeated across pages", duplicates)
    return orders, pages_fetched, False


def build_sync_upsert(rows: List[dict]):
    """INSERT ... ON CONFLICT (email) DO UPDATE overwriting every aggregate column"""
    stmt = pg_insert(CachedClient).values(rows)
    set_ = {col: getattr(stmt.excluded, col) for col in SYNC_COLUMNS}
    set_["updated_at"] = func.now()
    return stmt.on_conflict_do_update(index_elements=[CachedClient.email], set_=set_)


def build_ledger_insert(entries: List[dict]):
    return (
        pg_insert(CachedClientOrder)
        .values(entries)
        .on_conflict_do_nothing(index_elements=[CachedClientOrder.order_id])
    )


def _chunks(items: List, size: int):
    for i in range(0, len(items), size):
        yield items[i:i + size]


@dataclass
class SyncResult:
    orders_fetched: int = 0
    pages_fetched: int = 0
    clients: int = 0
    upserted: int = 0
    failed_batches: int = 0
    aborted: bool = False

    @property
    def store_unavailable(self) -> bool:
        """Every batch failed: nothing reached cached_clients"""
        return self.failed_batches > 0 and self.upserted == 0

    @property
    def status(self) -> str:
        if self.store_unavailable or (self.aborted and self.orders_fetched == 0):
            return "error"
        if self.aborted or self.failed_batches:
            return "partial"
        return "ok"

    def as_dict(self) -> dict:
        return asdict(self)


def run_full_sync(
    db: Session,
    woo: WooCommerceClient,
    max_pages: Optional[int] = None,
    per_page: Optional[int] = None,
    batch_size: Optional[int] = None,
) -> SyncResult:
    max_pages = max_pages or settings.woocommerce_sync_max_pages
    per_page = per_page or settings.woocommerce_sync_per_page
    batch_size = batch_size or settings.cached_client_batch_size

    orders, pages_fetched, aborted = fetch_all_orders(woo, max_pages, per_page)
    aggregates = list(aggregate_orders(orders).values())

    result = SyncResult(
        orders_fetched=len(orders),
        pages_fetched=pages_fetched,
        clients=len(aggregates),
        aborted=aborted,
    )

    for n, batch in enumerate(_chunks(aggregates, batch_size), start=1):
        ledger = [
            {"order_id": order_id, "email": agg.email}
            for agg in batch
            for order_id in agg.order_ids
        ]
        try:
            db.execute(build_sync_upsert([agg.as_row() for agg in batch]))
            if ledger:
                db.execute(build_ledger_insert(ledger))
            db.commit()
            result.upserted += len(batch)
        except SQLAlchemyError as e:
            db.rollback()
            result.failed_batches += 1
            logger.error("Cached client batch %s (%s clients) failed: %s", n, len(batch), e)

    if result.status == "ok":
        logger.info("clients.sync_completed %s", result.as_dict())
    else:
        logger.warning("clients.sync_completed status=%s %s", result.status, result.as_dict())
    return result


# ---------------------------------------------------------------------------
# Incremental (webhook) update
# ---------------------------------------------------------------------------

@dataclass
class OrderEventResult:
    email: str
    counted: bool
    order_count: Optional[int]


def client_row_from_order(order: dict) -> Optional[dict]:
    """Cached client fields carried by a single order, or None when it has no email"""
    email = normalize_email((order.get("billing") or {}).get("email"))
    if not email:
        return None
    agg = ClientAggregate(email=email)
    agg.add(order)
    row = agg.as_row()
    row.pop("order_count")
    return row


def build_increment_upsert(row: dict, counted: bool):
    """
    Single-statement upsert for one order.

    New email: order_count starts at 1. Existing email: contact fields are
    refreshed when the order carries them, order_count grows by one only when
    the order was not counted before, last_order_date keeps the newer value.
    """
    stmt = pg_insert(CachedClient).values(**row, order_count=1)
    excluded = stmt.excluded
    set_ = {
        "phone": func.coalesce(excluded.phone, CachedClient.phone),
        "first_name": func.coalesce(func.nullif(excluded.first_name, ""), CachedClient.first_name),
        "last_name": func.coalesce(func.nullif(excluded.last_name, ""), CachedClient.last_name),
        "address": func.coalesce(excluded.address, CachedClient.address),
        "city": func.coalesce(excluded.city, CachedClient.city),
        "wc_customer_id": func.coalesce(excluded.wc_customer_id, CachedClient.wc_customer_id),
        "source": case(
            (excluded.wc_customer_id.isnot(None), excluded.source),
            else_=CachedClient.source,
        ),
        "last_order_date": func.greatest(CachedClient.last_order_date, excluded.last_order_date),
        "updated_at": func.now(),
    }
    if counted:
        set_["order_count"] = CachedClient.order_count + 1
    return (
        stmt.on_conflict_do_update(index_elements=[CachedClient.email], set_=set_)
        .returning(CachedClient.order_count)
    )


def apply_order_event(db: Session, order: dict) -> Optional[OrderEventResult]:
    """
    Fold one webhook order into cached_clients.

    Returns None when the order has no billing email (nothing to link it to).
    Store errors are rolled back and re-raised.
    """
    row = client_row_from_order(order)
    if row is None:
        logger.info("Order %s has no billing email; skipping client sync", order.get("id"))
        return None

    order_id = order.get("id")
    try:
        counted = True
        if order_id:
            recorded = db.execute(
                build_ledger_insert([{"order_id": int(order_id), "email": row["email"]}])
                .returning(CachedClientOrder.order_id)
            ).scalar_one_or_none()
            counted = recorded is not None

        order_count = db.execute(build_increment_upsert(row, counted)).scalar_one_or_none()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to upsert cached client %s for order %s", row["email"], order_id)
        raise

    if counted:
        logger.info("Client synced: %s (order %s, order count %s)", row["email"], order_id, order_count)
    else:
        logger.info("Order %s already counted for %s; refreshed details only", order_id, row["email"])
    return OrderEventResult(email=row["email"], counted=counted, order_count=order_count)
