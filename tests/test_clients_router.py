"""Integration tests for /clients endpoints (app/routers/clients.py)"""
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import Mock, patch
from sqlalchemy.exc import IntegrityError, OperationalError

from app.integrations.woocommerce import OrderPage, WooCommerceError
from app.services.client_sync import SyncResult
from tests.factories import make_cached_client, make_manual_client, make_manual_order, make_order


CLIENT_ID = "3f2b8c1e-7d4a-4b6e-9c2d-1a2b3c4d5e6f"

CLIENT_PAYLOAD = {
    "first_name": "Marko",
    "last_name": "Marković",
    "email": "marko@example.com",
    "phone": "0601234567",
    "address": "Nemanjina 4",
    "city": "Beograd",
    "postcode": "11000",
}


def _directory_row(**overrides):
    row = {
        "id": CLIENT_ID,
        "name": "Marko Marković",
        "email": "marko@example.com",
        "phone": "0601234567",
        "address": "Nemanjina 4",
        "city": "Beograd",
        "source": "manual",
        "order_count": 2,
        "last_order_date": datetime(2024, 6, 10, tzinfo=timezone.utc),
        "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return SimpleNamespace(**row)


def _persist(obj):
    obj.id = uuid.UUID(CLIENT_ID)
    obj.created_at = datetime(2024, 5, 1, tzinfo=timezone.utc)


class TestListClients:
    def test_returns_clients_and_pagination(self, client):
        test_client, mock_db, _ = client
        mock_db.count.return_value = 45
        mock_db.all.return_value = [
            _directory_row(),
            _directory_row(id="9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d", source="cached", email="a@x.com"),
        ]

        response = test_client.get("/clients?page=2&per_page=20")

        assert response.status_code == 200
        data = response.json()
        assert [c["source"] for c in data["clients"]] == ["manual", "cached"]
        assert data["pagination"] == {
            "current_page": 2,
            "per_page": 20,
            "total_pages": 3,
            "total_count": 45,
            "has_more": True,
        }
        mock_db.offset.assert_called_once_with(20)
        mock_db.limit.assert_called_once_with(20)

    def test_search_filters_query(self, client):
        test_client, mock_db, _ = client
        response = test_client.get("/clients?search=marko")
        assert response.status_code == 200
        assert response.json()["pagination"]["total_count"] == 0
        mock_db.filter.assert_called_once()

    def test_invalid_page_returns_422(self, client):
        test_client, _, _ = client
        response = test_client.get("/clients?page=0")
        assert response.status_code == 422


class TestClientOrderCount:
    def test_requires_phone_or_email(self, client):
        test_client, _, _ = client
        response = test_client.get("/clients/count")
        assert response.status_code == 400

    def test_counts_exact_matches_only(self, client):
        test_client, _, mock_woo = client
        mock_woo.search_orders.return_value = [
            make_order(id=1, phone="064 307-3023", date_created="2024-01-01T10:00:00"),
            make_order(id=2, phone="0643073023", date_created="2024-02-01T10:00:00"),
            make_order(id=3, phone="0643073099", email="other@x.com"),
        ]

        response = test_client.get("/clients/count?phone=0643073023")

        assert response.status_code == 200
        data = response.json()
        assert data["order_count"] == 2
        assert data["last_order_date"].startswith("2024-02-01T10:00:00")

    def test_upstream_failure_returns_502(self, client):
        test_client, _, mock_woo = client
        mock_woo.search_orders.side_effect = WooCommerceError("timeout")
        response = test_client.get("/clients/count?email=a@x.com")
        assert response.status_code == 502


class TestGetClient:
    def test_manual_client_by_uuid(self, client):
        test_client, mock_db, mock_woo = client
        mock_db.first.return_value = make_manual_client()

        response = test_client.get(f"/clients/{CLIENT_ID}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == CLIENT_ID
        assert data["source"] == "manual"
        assert data["name"] == "Marko Marković"
        mock_woo.search_orders.assert_not_called()

    def test_cached_client_by_uuid(self, client):
        test_client, mock_db, _ = client
        cached = make_cached_client()
        mock_db.first.side_effect = [None, cached]

        response = test_client.get(f"/clients/{cached.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "cached"
        assert data["order_count"] == 2
        assert data["wc_customer_id"] == 5

    def test_unknown_uuid_returns_404(self, client):
        test_client, _, _ = client
        response = test_client.get(f"/clients/{CLIENT_ID}")
        assert response.status_code == 404

    def test_phone_resolves_registered_customer(self, client):
        test_client, _, mock_woo = client
        mock_woo.search_orders.return_value = [
            make_order(id=1, customer_id=5, date_created="2024-01-01T10:00:00"),
            make_order(id=2, customer_id=5, date_created="2024-03-01T10:00:00"),
            make_order(id=3, phone="0600000000", email="x@x.com"),
        ]
        mock_woo.get_customer.return_value = {
            "id": 5,
            "first_name": "Ana",
            "last_name": "Petrović",
            "email": "a@x.com",
            "billing": {"phone": "0643073023", "address_1": "Bulevar 1", "city": "Beograd"},
        }

        response = test_client.get("/clients/064 307-3023")

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "woocommerce"
        assert data["id"] == "064 307-3023"
        assert data["wc_customer_id"] == 5
        assert data["order_count"] == 2
        assert data["last_order_date"].startswith("2024-03-01")
        mock_woo.get_customer.assert_called_once_with(5)

    def test_guest_orders_use_billing_details(self, client):
        test_client, _, mock_woo = client
        mock_woo.search_orders.return_value = [make_order(id=1, customer_id=0, first_name="Jelena")]

        response = test_client.get("/clients/a%40x.com")

        assert response.status_code == 200
        data = response.json()
        assert data["first_name"] == "Jelena"
        assert data["wc_customer_id"] is None
        mock_woo.get_customer.assert_not_called()
        # decoded once by the framework
        assert mock_woo.search_orders.call_args[0][0] == "a@x.com"

    def test_email_without_orders_falls_back_to_customer_lookup(self, client):
        test_client, _, mock_woo = client
        mock_woo.find_customers_by_email.return_value = [
            {"id": 8, "first_name": "Iva", "last_name": "Ilić", "email": "iva@x.com", "billing": {}},
        ]

        response = test_client.get("/clients/iva@x.com")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Iva Ilić"
        assert data["order_count"] == 0

    def test_unmatched_phone_returns_404(self, client):
        test_client, _, mock_woo = client
        mock_woo.search_orders.return_value = [make_order(phone="0600000000", email="x@x.com")]
        response = test_client.get("/clients/0643073023")
        assert response.status_code == 404
        mock_woo.find_customers_by_email.assert_not_called()

    def test_upstream_failure_returns_502(self, client):
        test_client, _, mock_woo = client
        mock_woo.search_orders.side_effect = WooCommerceError("timeout")
        response = test_client.get("/clients/0643073023")
        assert response.status_code == 502


class TestManualClients:
    def test_list_manual_clients(self, client):
        test_client, mock_db, _ = client
        mock_db.all.return_value = [make_manual_client()]
        response = test_client.get("/clients/manual")
        assert response.status_code == 200
        assert response.json()[0]["email"] == "marko@example.com"

    def test_create_manual_client(self, client):
        test_client, mock_db, _ = client
        mock_db.refresh = Mock(side_effect=_persist)

        response = test_client.post("/clients/manual", json=CLIENT_PAYLOAD)

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["client"]["id"] == CLIENT_ID
        assert data["client"]["postcode"] == "11000"
        mock_db.add.assert_called_once()
        mock_db.commit.assert_called_once()

    def test_create_duplicate_email_returns_409(self, client):
        test_client, mock_db, _ = client
        mock_db.first.return_value = make_manual_client()
        response = test_client.post("/clients/manual", json=CLIENT_PAYLOAD)
        assert response.status_code == 409
        mock_db.add.assert_not_called()

    def test_create_invalid_email_returns_422(self, client):
        test_client, _, _ = client
        response = test_client.post("/clients/manual", json={**CLIENT_PAYLOAD, "email": "not-an-email"})
        assert response.status_code == 422

    def test_update_manual_client(self, client):
        test_client, mock_db, _ = client
        existing = make_manual_client()
        mock_db.first.side_effect = [existing, None]

        response = test_client.put(
            f"/clients/{CLIENT_ID}",
            json={**CLIENT_PAYLOAD, "first_name": "Marija", "email": "marija@example.com"},
        )

        assert response.status_code == 200
        assert existing.first_name == "Marija"
        assert existing.email == "marija@example.com"
        mock_db.commit.assert_called_once()

    def test_update_email_taken_returns_409(self, client):
        test_client, mock_db, _ = client
        mock_db.first.side_effect = [make_manual_client(), make_manual_client(id=uuid.uuid4())]
        response = test_client.put(f"/clients/{CLIENT_ID}", json=CLIENT_PAYLOAD)
        assert response.status_code == 409
        mock_db.commit.assert_not_called()

    def test_update_woocommerce_client_returns_400(self, client):
        test_client, mock_db, _ = client
        response = test_client.put("/clients/0643073023", json=CLIENT_PAYLOAD)
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot update WooCommerce clients"
        mock_db.query.assert_not_called()

    def test_update_unknown_client_returns_404(self, client):
        test_client, _, _ = client
        response = test_client.put(f"/clients/{CLIENT_ID}", json=CLIENT_PAYLOAD)
        assert response.status_code == 404


class TestDeleteClient:
    def test_delete_client_without_orders(self, client):
        test_client, mock_db, _ = client
        existing = make_manual_client()
        mock_db.first.return_value = existing
        mock_db.count.return_value = 0

        response = test_client.delete(f"/clients/{CLIENT_ID}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        mock_db.with_for_update.assert_called_once()
        mock_db.delete.assert_called_once_with(existing)

    def test_delete_client_with_orders_returns_400(self, client):
        test_client, mock_db, _ = client
        mock_db.first.return_value = make_manual_client()
        mock_db.count.return_value = 1

        response = test_client.delete(f"/clients/{CLIENT_ID}")

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete client with 1 associated orders. Delete orders first."
        mock_db.delete.assert_not_called()
        mock_db.rollback.assert_called_once()

    def test_delete_blocked_by_foreign_key_returns_400(self, client):
        test_client, mock_db, _ = client
        mock_db.first.return_value = make_manual_client()
        mock_db.commit.side_effect = IntegrityError("DELETE ...", {}, Exception("fk violation"))

        response = test_client.delete(f"/clients/{CLIENT_ID}")

        assert response.status_code == 400
        mock_db.rollback.assert_called_once()

    def test_delete_woocommerce_client_returns_400(self, client):
        test_client, _, _ = client
        response = test_client.delete("/clients/a@x.com")
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete WooCommerce clients"

    def test_delete_unknown_client_returns_404(self, client):
        test_client, _, _ = client
        response = test_client.delete(f"/clients/{CLIENT_ID}")
        assert response.status_code == 404


class TestClientOrders:
    def test_manual_client_orders_merged_newest_first(self, client):
        test_client, mock_db, mock_woo = client
        manual = make_manual_client()
        mock_db.first.return_value = manual
        mock_db.all.return_value = [make_manual_order(client=manual)]
        mock_woo.search_orders.return_value = [
            make_order(
                id=501,
                email="marko@example.com",
                phone="060 123 4567",
                line_items=[{
                    "name": "Fit paket",
                    "meta_data": [
                        {"key": "Datum početka", "value": "20-06-2024"},
                        {"key": "pa_program-duration", "value": "10 dana"},
                    ],
                }],
            ),
        ]

        response = test_client.get(f"/clients/{CLIENT_ID}/orders")

        assert response.status_code == 200
        data = response.json()
        assert [o["source"] for o in data] == ["woocommerce", "manual"]
        assert data[0]["id"] == "#501"
        assert data[0]["start_date"] == "20-06-2024"
        assert data[0]["duration"] == "10 dana"
        assert data[1]["start_date"] == "10-06-2024"
        assert data[1]["id"].startswith("M-")

    def test_contact_identifier_orders(self, client):
        test_client, mock_db, mock_woo = client
        mock_woo.search_orders.return_value = [make_order(id=7), make_order(id=8, phone="0600000000", email="z@z.com")]

        response = test_client.get("/clients/0643073023/orders")

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == ["#7"]
        mock_db.query.assert_not_called()

    def test_upstream_failure_returns_manual_orders_only(self, client):
        test_client, mock_db, mock_woo = client
        manual = make_manual_client()
        mock_db.first.return_value = manual
        mock_db.all.return_value = [make_manual_order(client=manual)]
        mock_woo.search_orders.side_effect = WooCommerceError("timeout")

        response = test_client.get(f"/clients/{CLIENT_ID}/orders")

        assert response.status_code == 200
        assert [o["source"] for o in response.json()] == ["manual"]


class TestSyncClients:
    def test_sync_returns_counters(self, client):
        test_client, _, _ = client
        result = SyncResult(orders_fetched=250, pages_fetched=3, clients=120, upserted=120)
        with patch("app.routers.clients.run_full_sync", return_value=result) as sync:
            response = test_client.post("/clients/sync")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["upserted"] == 120
        assert data["failed_batches"] == 0
        assert sync.call_args[1]["max_pages"] == 50

    def test_max_pages_is_capped(self, client):
        test_client, _, _ = client
        with patch("app.routers.clients.run_full_sync", return_value=SyncResult()) as sync:
            test_client.post("/clients/sync?max_pages=500")
        assert sync.call_args[1]["max_pages"] == 50

    def test_partial_sync_is_reported(self, client):
        test_client, _, _ = client
        result = SyncResult(orders_fetched=100, pages_fetched=1, clients=40, upserted=40, aborted=True)
        with patch("app.routers.clients.run_full_sync", return_value=result):
            response = test_client.post("/clients/sync")
        assert response.status_code == 200
        assert response.json()["aborted"] is True
        assert response.json()["success"] is False

    def test_store_down_for_every_batch_returns_503(self, client):
        test_client, mock_db, mock_woo = client
        mock_woo.list_orders.return_value = OrderPage(
            orders=[make_order(id=1), make_order(id=2, email="b@y.com")],
            total=2,
            total_pages=1,
        )
        mock_db.execute.side_effect = OperationalError("INSERT ...", {}, Exception("connection refused"))

        response = test_client.post("/clients/sync")

        assert response.status_code == 503
        assert response.json()["detail"] == "Client store unavailable"
        mock_db.commit.assert_not_called()

    def test_some_failed_batches_are_not_success(self, client):
        test_client, mock_db, mock_woo = client
        mock_woo.list_orders.return_value = OrderPage(
            orders=[make_order(id=1), make_order(id=2, email="b@y.com")],
            total=2,
            total_pages=1,
        )
        mock_db.execute.side_effect = [None, None, OperationalError("INSERT ...", {}, Exception("timeout"))]

        with patch("app.services.client_sync.settings") as mock_settings:
            mock_settings.woocommerce_sync_per_page = 100
            mock_settings.cached_client_batch_size = 1
            response = test_client.post("/clients/sync")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["upserted"] == 1
        assert data["failed_batches"] == 1

    def test_unreachable_store_returns_502(self, client):
        test_client, _, _ = client
        with patch("app.routers.clients.run_full_sync", return_value=SyncResult(aborted=True)):
            response = test_client.post("/clients/sync")
        assert response.status_code == 502
