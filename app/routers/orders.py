"""
Order feed (WooCommerce + manual) and manual order CRUD.
"""
import logging
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload

from app.database import get_db
from app.integrations.woocommerce import WooCommerceClient, get_woocommerce_client
from app.models.manual_client import ManualClient
from app.models.manual_order import ManualOrder, DEFAULT_PAYMENT_METHOD, DEFAULT_ORDER_STATUS
from app.schemas.clients import DeleteResponse
from app.schemas.orders import (
    FeedOrder,
    ManualOrderCreate,
    ManualOrderMutationResponse,
    ManualOrderResponse,
    ManualOrderUpdate,
)
from app.services.order_feed import recent_order_feed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


def _get_manual_order(db: Session, order_id: UUID) -> ManualOrder:
    order = (
        db.query(ManualOrder)
        .options(joinedload(ManualOrder.client))
        .filter(ManualOrder.id == order_id)
        .first()
    )
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("", response_model=List[FeedOrder])
def get_orders(
    db: Session = Depends(get_db),
    woo: WooCommerceClient = Depends(get_woocommerce_client),
):
    """Latest WooCommerce orders merged with manual orders, newest start date first."""
    return recent_order_feed(db, woo)


@router.get("/manual", response_model=List[ManualOrderResponse])
def list_manual_orders(db: Session = Depends(get_db)):
    return (
        db.query(ManualOrder)
        .options(joinedload(ManualOrder.client))
        .order_by(ManualOrder.created_at.desc())
        .all()
    )


@router.post("/manual", response_model=ManualOrderMutationResponse, status_code=status.HTTP_201_CREATED)
def create_manual_order(
    data: ManualOrderCreate,
    db: Session = Depends(get_db),
):
    client = db.query(ManualClient).filter(ManualClient.id == data.client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    order = ManualOrder(
        client_id=data.client_id,
        product_name=data.product_name,
        start_date=data.start_date,
        duration_days=data.duration_days,
        address=data.address,
        customer_note=data.customer_note or None,
        payment_method=data.payment_method or DEFAULT_PAYMENT_METHOD,
        status=DEFAULT_ORDER_STATUS,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Created manual order %s for client %s", order.id, data.client_id)
    return ManualOrderMutationResponse(order=ManualOrderResponse.model_validate(order))


@router.get("/manual/{order_id}", response_model=ManualOrderResponse)
def get_manual_order(
    order_id: UUID,
    db: Session = Depends(get_db),
):
    return _get_manual_order(db, order_id)


@router.put("/manual/{order_id}", response_model=ManualOrderMutationResponse)
def update_manual_order(
    order_id: UUID,
    data: ManualOrderUpdate,
    db: Session = Depends(get_db),
):
    order = _get_manual_order(db, order_id)

    order.product_name = data.product_name
    order.start_date = data.start_date
    order.duration_days = data.duration_days
    order.address = data.address
    order.customer_note = data.customer_note or None
    order.payment_method = data.payment_method or DEFAULT_PAYMENT_METHOD
    order.status = data.status or DEFAULT_ORDER_STATUS

    db.commit()
    db.refresh(order)
    return ManualOrderMutationResponse(order=ManualOrderResponse.model_validate(order))


@router.delete("/manual/{order_id}", response_model=DeleteResponse)
def delete_manual_order(
    order_id: UUID,
    db: Session = Depends(get_db),
):
    order = db.query(ManualOrder).filter(ManualOrder.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    db.delete(order)
    db.commit()
    return DeleteResponse()
