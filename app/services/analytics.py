"""
Dashboard counters read straight from WooCommerce.
"""
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.integrations.woocommerce import WooCommerceClient
from app.schemas.analytics import AnalyticsResponse, DailyOrders

CHART_DAYS = 7


def daily_order_histogram(orders, today) -> list[DailyOrders]:
    """Orders per day for the last CHART_DAYS days, oldest first, zero-filled"""
    per_day = Counter(str(o.get("date_created") or "")[:10] for o in orders)
    chart = []
    for offset in range(CHART_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        chart.append(DailyOrders(
            name=day.strftime("%a"),
            date=day.isoformat(),
            orders=per_day.get(day.isoformat(), 0),
        ))
    return chart


def dashboard_stats(woo: WooCommerceClient, now: Optional[datetime] = None) -> AnalyticsResponse:
    """Raises WooCommerceError if any of the underlying calls fail."""
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=CHART_DAYS)

    recent = woo.list_orders(page=1, per_page=100, after=since.isoformat())

    return AnalyticsResponse(
        total_customers=woo.count("customers"),
        total_orders=woo.count("orders"),
        active_now=woo.count("orders", status="processing"),
        chart_data=daily_order_histogram(recent.orders, now.date()),
    )
