"""Tests for sync_cached_clients Celery task."""
from unittest.mock import MagicMock, patch

from app.celery_app import celery_app
from app.services.client_sync import SyncResult


class TestSyncCachedClientsTask:

    def test_returns_sync_counters(self):
        mock_db = MagicMock()
        result = SyncResult(orders_fetched=10, pages_fetched=1, clients=4, upserted=4)

        with patch("app.tasks.SessionLocal", return_value=mock_db):
            with patch("app.integrations.woocommerce.get_woocommerce_client") as get_woo:
                with patch("app.services.client_sync.run_full_sync", return_value=result) as sync:
                    from app.tasks import sync_cached_clients
                    output = sync_cached_clients.run(max_pages=2)

        assert output["status"] == "ok"
        assert output["upserted"] == 4
        assert output["clients"] == 4
        sync.assert_called_once_with(mock_db, get_woo.return_value, max_pages=2)
        mock_db.close.assert_called_once()

    def test_failed_batches_are_not_reported_ok(self):
        mock_db = MagicMock()
        unavailable = SyncResult(orders_fetched=10, pages_fetched=1, clients=4, upserted=0, failed_batches=1)
        partial = SyncResult(orders_fetched=10, pages_fetched=1, clients=4, upserted=2, failed_batches=1)

        outputs = []
        for result in (unavailable, partial):
            with patch("app.tasks.SessionLocal", return_value=mock_db):
                with patch("app.integrations.woocommerce.get_woocommerce_client"):
                    with patch("app.services.client_sync.run_full_sync", return_value=result):
                        from app.tasks import sync_cached_clients
                        outputs.append(sync_cached_clients.run())

        assert outputs[0]["status"] == "error"
        assert outputs[0]["failed_batches"] == 1
        assert outputs[1]["status"] == "partial"

    def test_unexpected_error_is_reported_and_session_closed(self):
        mock_db = MagicMock()

        with patch("app.tasks.SessionLocal", return_value=mock_db):
            with patch("app.integrations.woocommerce.get_woocommerce_client"):
                with patch("app.services.client_sync.run_full_sync", side_effect=RuntimeError("boom")):
                    from app.tasks import sync_cached_clients
                    output = sync_cached_clients.run()

        assert output == {"error": "boom"}
        mock_db.rollback.assert_called_once()
        mock_db.close.assert_called_once()

    def test_nightly_schedule(self):
        entry = celery_app.conf.beat_schedule["cached-clients-sync-nightly"]
        assert entry["task"] == "sync_cached_clients"
