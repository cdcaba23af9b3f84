import logging
from fastapi import APIRouter, Depends, HTTPException, status

from app.integrations.woocommerce import WooCommerceClient, WooCommerceError, get_woocommerce_client
from app.schemas.analytics import AnalyticsResponse
from app.services.analytics import dashboard_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("", response_model=AnalyticsResponse)
def get_analytics(woo: WooCommerceClient = Depends(get_woocommerce_client)):
    """Customer/order totals and orders per day for the last week."""
    try:
        return dashboard_stats(woo)
    except WooCommerceError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to fetch analytics")
