"""
Unified client directory: manual clients plus cached WooCommerce clients.

A cached client whose email (case-insensitive) belongs to a manual client is
hidden; the manual record is the one shown.
"""
from typing import List, Optional, Tuple

from sqlalchemy import DateTime, String, cast, func, literal, or_, select, union_all
from sqlalchemy.orm import Session

from app.models.cached_client import CachedClient
from app.models.manual_client import ManualClient
from app.models.manual_order import ManualOrder


def _display_name(first, last):
    return func.trim(func.concat(first, " ", last))


def _manual_clients_select():
    order_count = (
        select(func.count(ManualOrder.id))
        .where(ManualOrder.client_id == ManualClient.id)
        .correlate(ManualClient)
        .scalar_subquery()
    )
    last_start = (
        select(func.max(ManualOrder.start_date))
        .where(ManualOrder.client_id == ManualClient.id)
        .correlate(ManualClient)
        .scalar_subquery()
    )
    return select(
        cast(ManualClient.id, String).label("id"),
        _display_name(ManualClient.first_name, ManualClient.last_name).label("name"),
        ManualClient.email.label("email"),
        ManualClient.phone.label("phone"),
        ManualClient.address.label("address"),
        ManualClient.city.label("city"),
        literal("manual", String).label("source"),
        order_count.label("order_count"),
        cast(last_start, DateTime(timezone=True)).label("last_order_date"),
        ManualClient.created_at.label("created_at"),
    )


def _cached_clients_select():
    manual_emails = select(func.lower(ManualClient.email))
    return select(
        cast(CachedClient.id, String).label("id"),
        _display_name(CachedClient.first_name, CachedClient.last_name).label("name"),
        CachedClient.email.label("email"),
        CachedClient.phone.label("phone"),
        CachedClient.address.label("address"),
        CachedClient.city.label("city"),
        literal("cached", String).label("source"),
        CachedClient.order_count.label("order_count"),
        CachedClient.last_order_date.label("last_order_date"),
        CachedClient.updated_at.label("created_at"),
    ).where(func.lower(CachedClient.email).not_in(manual_emails))


def all_clients_view():
    return union_all(_manual_clients_select(), _cached_clients_select()).subquery("all_clients")


def list_clients(
    db: Session,
    page: int = 1,
    per_page: int = 20,
    search: Optional[str] = None,
) -> Tuple[List, int]:
    """One page of the directory and the total number of matching clients"""
    view = all_clients_view()
    query = db.query(view)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                view.c.name.ilike(pattern),
                view.c.email.ilike(pattern),
                view.c.phone.ilike(pattern),
            )
        )

    total = query.count()
    rows = (
        query
        .order_by(view.c.last_order_date.desc().nulls_last(), view.c.name.asc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return rows, total
