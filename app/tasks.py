"""
Celery tasks

Tasks:
- sync_cached_clients: rebuild cached_clients from WooCommerce order history
"""
import logging
from typing import Optional

from app.celery_app import celery_app
from app.database import SessionLocal

logger = logging.getLogger(__name__)


@celery_app.task(name="sync_cached_clients", bind=True, max_retries=0)
def sync_cached_clients(self, max_pages: Optional[int] = None):
    """
    Full WooCommerce -> cached_clients sync, same as POST /clients/sync.

    Returns the sync counters with status "ok", "partial" (aborted paging or
    some failed batches) or "error" (nothing fetched or nothing written).
    """
    from app.integrations.woocommerce import get_woocommerce_client
    from app.services.client_sync import run_full_sync

    db = SessionLocal()
    try:
        result = run_full_sync(db, get_woocommerce_client(), max_pages=max_pages)
        return {"status": result.status, **result.as_dict()}
    except Exception as e:
        db.rollback()
        logger.exception("sync_cached_clients failed")
        return {"error": str(e)}
    finally:
        db.close()
