"""Tests for WooCommerce integration module (app/integrations/woocommerce.py)"""
import pytest
import requests
from unittest.mock import MagicMock

from app.integrations.woocommerce import (
    ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    ORDER_UPDATED,
    WooCommerceClient,
    WooCommerceError,
    compute_signature,
    is_guest,
    is_order_topic,
    validate_signature,
)


SECRET = "wc-webhook-secret"
BODY = b'{"id": 1001, "billing": {"email": "a@x.com"}}'


def _response(json_data=None, headers=None, status_code=200):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.headers = headers or {}
    resp.json.return_value = json_data
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
    return resp


def _client(*responses):
    session = MagicMock(spec=requests.Session)
    session.get.side_effect = list(responses)
    woo = WooCommerceClient("https://shop.test/", "ck_test", "cs_test", timeout=5, session=session)
    return woo, session


class TestValidateSignature:
    def test_valid_signature(self):
        assert validate_signature(compute_signature(BODY, SECRET), BODY, SECRET) is True

    def test_signature_is_base64_sha256(self):
        # 32-byte digest -> 44 base64 chars
        assert len(compute_signature(BODY, SECRET)) == 44

    def test_tampered_body_is_rejected(self):
        signature = compute_signature(BODY, SECRET)
        assert validate_signature(signature, BODY + b" ", SECRET) is False

    def test_wrong_secret_is_rejected(self):
        signature = compute_signature(BODY, "other-secret")
        assert validate_signature(signature, BODY, SECRET) is False

    def test_missing_header_returns_false(self):
        assert validate_signature(None, BODY, SECRET) is False
        assert validate_signature("", BODY, SECRET) is False

    def test_empty_secret_returns_false(self):
        assert validate_signature(compute_signature(BODY, ""), BODY, "") is False


class TestTopicsAndGuests:
    @pytest.mark.parametrize("topic", [ORDER_CREATED, ORDER_UPDATED, ORDER_STATUS_CHANGED])
    def test_order_topics(self, topic):
        assert is_order_topic(topic) is True

    @pytest.mark.parametrize("topic", ["customer.created", "product.updated", None])
    def test_other_topics(self, topic):
        assert is_order_topic(topic) is False

    @pytest.mark.parametrize("customer_id", [0, "0", None, "abc"])
    def test_guest(self, customer_id):
        assert is_guest(customer_id) is True

    def test_registered(self):
        assert is_guest(5) is False


class TestWooCommerceClient:
    def test_basic_auth_and_api_base(self):
        woo, session = _client()
        assert session.auth == ("ck_test", "cs_test")
        assert woo.api_base == "https://shop.test/wp-json/wc/v3"

    def test_list_orders_reads_pagination_headers(self):
        woo, session = _client(_response(
            [{"id": 1}, {"id": 2}],
            headers={"X-WP-Total": "250", "X-WP-TotalPages": "3"},
        ))

        page = woo.list_orders(page=2, per_page=100)

        assert [o["id"] for o in page.orders] == [1, 2]
        assert page.total == 250
        assert page.total_pages == 3
        url = session.get.call_args[0][0]
        params = session.get.call_args[1]["params"]
        assert url == "https://shop.test/wp-json/wc/v3/orders"
        assert params == {"page": 2, "per_page": 100, "status": "any"}
        assert session.get.call_args[1]["timeout"] == 5

    def test_list_orders_without_headers(self):
        woo, _ = _client(_response([]))
        page = woo.list_orders()
        assert page.orders == []
        assert page.total_pages == 0

    def test_search_orders_passes_term(self):
        woo, session = _client(_response([{"id": 9}]))
        assert woo.search_orders("0643073023", per_page=100) == [{"id": 9}]
        assert session.get.call_args[1]["params"] == {"search": "0643073023", "per_page": 100}

    def test_count_reads_total_header(self):
        woo, session = _client(_response([{"id": 1}], headers={"X-WP-Total": "1234"}))
        assert woo.count("orders", status="processing") == 1234
        assert session.get.call_args[1]["params"] == {"per_page": 1, "status": "processing"}

    def test_get_customer(self):
        woo, session = _client(_response({"id": 5, "email": "a@x.com"}))
        assert woo.get_customer(5)["email"] == "a@x.com"
        assert session.get.call_args[0][0].endswith("/customers/5")

    def test_http_error_raises_woocommerce_error(self):
        woo, _ = _client(_response(status_code=503))
        with pytest.raises(WooCommerceError):
            woo.search_orders("a@x.com")

    def test_connection_error_raises_woocommerce_error(self):
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = requests.ConnectionError("refused")
        woo = WooCommerceClient("https://shop.test", "ck", "cs", session=session)
        with pytest.raises(WooCommerceError):
            woo.list_orders()

    def test_invalid_json_raises_woocommerce_error(self):
        resp = _response()
        resp.json.side_effect = ValueError("Expecting value")
        woo, _ = _client(resp)
        with pytest.raises(WooCommerceError):
            woo.get_order(1)
