"""
WooCommerce webhook validation and REST API (wc/v3) client.

Webhook auth: base64(HMAC-SHA256(raw body, secret)) in X-WC-Webhook-Signature.
API auth: consumer key/secret as HTTP basic auth (store is HTTPS only).
"""
import base64
import hashlib
import hmac
import logging
import requests
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from app.config import settings

logger = logging.getLogger(__name__)

# customer_id reported on orders placed without an account
GUEST_CUSTOMER_ID = 0

SIGNATURE_HEADER = "X-WC-Webhook-Signature"
TOPIC_HEADER = "X-WC-Webhook-Topic"

ORDER_CREATED = "order.created"
ORDER_UPDATED = "order.updated"
ORDER_STATUS_CHANGED = "action.woocommerce_order_status_changed"

ORDER_TOPICS = {
    ORDER_CREATED,
    ORDER_UPDATED,
    ORDER_STATUS_CHANGED,
}


class WooCommerceError(Exception):
    """Raised when the WooCommerce API is unreachable or answers with an error"""


def compute_signature(body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode(), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def validate_signature(header_value: Optional[str], body: bytes, secret: str) -> bool:
    """Validate the X-WC-Webhook-Signature header against the raw request body"""
    if not header_value or not secret:
        return False
    return hmac.compare_digest(header_value.strip(), compute_signature(body, secret))


def is_order_topic(topic: Optional[str]) -> bool:
    return topic in ORDER_TOPICS


def is_guest(customer_id: Any) -> bool:
    try:
        return int(customer_id or 0) == GUEST_CUSTOMER_ID
    except (TypeError, ValueError):
        return True


# ---------------------------------------------------------------------------
# REST API client
# ---------------------------------------------------------------------------

@dataclass
class OrderPage:
    """One page of GET /orders plus the pagination headers"""
    orders: List[dict] = field(default_factory=list)
    total: int = 0
    total_pages: int = 0


def _header_int(resp: requests.Response, name: str) -> int:
    try:
        return int(resp.headers.get(name, 0))
    except (TypeError, ValueError):
        return 0


class WooCommerceClient:
    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.api_base = f"{base_url.rstrip('/')}/wp-json/wc/v3"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (consumer_key, consumer_secret)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = f"{self.api_base}/{path.lstrip('/')}"
        try:
            resp = self.session.get(url, params=params or {}, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("WooCommerce request failed for %s %s: %s", path, params, e)
            raise WooCommerceError(f"GET {path} failed: {e}") from e
        return resp

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self._get(path, params)
        try:
            return resp.json()
        except ValueError as e:
            logger.error("WooCommerce returned non-JSON body for %s: %s", path, e)
            raise WooCommerceError(f"GET {path} returned invalid JSON") from e

    def list_orders(self, page: int = 1, per_page: int = 100, status: str = "any", **params) -> OrderPage:
        """Fetch one page of orders. Total counts come from the X-WP-* headers."""
        query = {"page": page, "per_page": per_page, "status": status, **params}
        resp = self._get("orders", query)
        try:
            orders = resp.json()
        except ValueError as e:
            raise WooCommerceError("GET orders returned invalid JSON") from e
        return OrderPage(
            orders=orders or [],
            total=_header_int(resp, "X-WP-Total"),
            total_pages=_header_int(resp, "X-WP-TotalPages"),
        )

    def search_orders(self, term: str, per_page: int = 100) -> List[dict]:
        """
        Free-text order search. WooCommerce matches the term against billing
        and shipping fields, guest orders included, so callers must still
        filter the results on the exact field they care about.
        """
        return self._get_json("orders", {"search": term, "per_page": per_page}) or []

    def recent_orders(self, per_page: int = 20) -> List[dict]:
        return self._get_json("orders", {"per_page": per_page, "orderby": "date", "order": "desc"}) or []

    def get_order(self, order_id: int) -> dict:
        return self._get_json(f"orders/{order_id}")

    def get_customer(self, customer_id: int) -> dict:
        return self._get_json(f"customers/{customer_id}")

    def find_customers_by_email(self, email: str) -> List[dict]:
        return self._get_json("customers", {"email": email}) or []

    def count(self, resource: str, **params) -> int:
        """Total number of records for a list endpoint, read from X-WP-Total"""
        resp = self._get(resource, {"per_page": 1, **params})
        return _header_int(resp, "X-WP-Total")


def get_woocommerce_client() -> WooCommerceClient:
    """Dependency for FastAPI routes to get a WooCommerce client"""
    return WooCommerceClient(
        base_url=settings.woocommerce_url,
        consumer_key=settings.woocommerce_consumer_key,
        consumer_secret=settings.woocommerce_consumer_secret,
        timeout=settings.woocommerce_timeout_seconds,
    )
