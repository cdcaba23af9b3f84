"""
Client directory, manual client CRUD, identity-resolved client detail and
the WooCommerce -> cached_clients full sync.

Client ids in the path are either manual/cached client UUIDs or a phone
number / email found on WooCommerce orders.
"""
import logging
import math
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.integrations.woocommerce import WooCommerceClient, WooCommerceError, get_woocommerce_client
from app.models.manual_client import ManualClient
from app.models.manual_order import ManualOrder
from app.schemas.clients import (
    ClientDetail,
    ClientListItem,
    ClientListResponse,
    ContactOrderStats,
    DeleteResponse,
    ManualClientCreate,
    ManualClientMutationResponse,
    ManualClientResponse,
    ManualClientUpdate,
    Pagination,
    SyncResponse,
)
from app.schemas.orders import FeedOrder
from app.services.client_directory import list_clients
from app.services.client_lookup import contact_order_stats, resolve_client
from app.services.client_sync import run_full_sync
from app.services.identity import ByKey, classify_identifier
from app.services.order_feed import collect_client_orders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def _manual_key(client_id: str, action: str) -> ByKey:
    identifier = classify_identifier(client_id)
    if not isinstance(identifier, ByKey):
        raise HTTPException(status_code=400, detail=f"Cannot {action} WooCommerce clients")
    return identifier


def _email_taken(db: Session, email: str, exclude_id=None) -> bool:
    query = db.query(ManualClient).filter(func.lower(ManualClient.email) == email.strip().lower())
    if exclude_id is not None:
        query = query.filter(ManualClient.id != exclude_id)
    return query.first() is not None


@router.get("", response_model=ClientListResponse)
def get_clients(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=200),
    search: Optional[str] = Query(None, description="Search by name, email or phone"),
    db: Session = Depends(get_db),
):
    """Manual and WooCommerce-derived clients, latest order first."""
    rows, total = list_clients(db, page=page, per_page=per_page, search=search)
    total_pages = math.ceil(total / per_page) if total else 0
    return ClientListResponse(
        clients=[ClientListItem.model_validate(row) for row in rows],
        pagination=Pagination(
            current_page=page,
            per_page=per_page,
            total_pages=total_pages,
            total_count=total,
            has_more=page < total_pages,
        ),
    )


@router.get("/count", response_model=ContactOrderStats)
def get_client_order_count(
    phone: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    woo: WooCommerceClient = Depends(get_woocommerce_client),
):
    """Order count and last order date for a phone/email within the search window."""
    if not phone and not email:
        raise HTTPException(status_code=400, detail="Phone or email required")
    try:
        return contact_order_stats(woo, phone=phone, email=email)
    except WooCommerceError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Order source unavailable")


@router.post("/sync", response_model=SyncResponse)
def sync_clients(
    max_pages: Optional[int] = Query(None, ge=1, description="Order pages to replay"),
    db: Session = Depends(get_db),
    woo: WooCommerceClient = Depends(get_woocommerce_client),
):
    """Rebuild cached_clients from WooCommerce order history."""
    pages = min(max_pages or settings.woocommerce_sync_max_pages, settings.woocommerce_sync_max_pages)
    result = run_full_sync(db, woo, max_pages=pages)

    if result.aborted and result.orders_fetched == 0:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Order source unavailable")

    if result.store_unavailable:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Client store unavailable")

    return SyncResponse(
        success=result.status == "ok",
        message=f"Synced {result.upserted} clients from {result.orders_fetched} orders.",
        **result.as_dict(),
    )


@router.get("/manual", response_model=List[ManualClientResponse])
def get_manual_clients(db: Session = Depends(get_db)):
    return db.query(ManualClient).order_by(ManualClient.created_at.desc()).all()


@router.post("/manual", response_model=ManualClientMutationResponse, status_code=status.HTTP_201_CREATED)
def create_manual_client(
    data: ManualClientCreate,
    db: Session = Depends(get_db),
):
    if _email_taken(db, data.email):
        raise HTTPException(status_code=409, detail="Client with this email already exists")

    client = ManualClient(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        phone=data.phone or None,
        address=data.address or None,
        city=data.city or None,
        postcode=data.postcode or None,
    )
    db.add(client)
    db.commit()
    db.refresh(client)
    logger.info("Created manual client %s (%s)", client.id, client.email)
    return ManualClientMutationResponse(client=ManualClientResponse.model_validate(client))


@router.get("/{client_id}", response_model=ClientDetail)
def get_client(
    client_id: str,
    db: Session = Depends(get_db),
    woo: WooCommerceClient = Depends(get_woocommerce_client),
):
    identifier = classify_identifier(client_id)
    try:
        client = resolve_client(db, woo, identifier)
    except WooCommerceError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Order source unavailable")
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.put("/{client_id}", response_model=ManualClientMutationResponse)
def update_client(
    client_id: str,
    data: ManualClientUpdate,
    db: Session = Depends(get_db),
):
    key = _manual_key(client_id, "update")

    client = db.query(ManualClient).filter(ManualClient.id == key.id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    if _email_taken(db, data.email, exclude_id=client.id):
        raise HTTPException(status_code=409, detail="Client with this email already exists")

    client.first_name = data.first_name
    client.last_name = data.last_name
    client.email = data.email
    client.phone = data.phone or None
    client.address = data.address or None

    db.commit()
    db.refresh(client)
    return ManualClientMutationResponse(client=ManualClientResponse.model_validate(client))


@router.delete("/{client_id}", response_model=DeleteResponse)
def delete_client(
    client_id: str,
    db: Session = Depends(get_db),
):
    """Delete a manual client. Refused while the client still has orders."""
    key = _manual_key(client_id, "delete")

    # FOR UPDATE blocks order inserts for this client until commit
    client = db.query(ManualClient).filter(ManualClient.id == key.id).with_for_update().first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    order_count = db.query(ManualOrder).filter(ManualOrder.client_id == client.id).count()
    if order_count:
        db.rollback()
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete client with {order_count} associated orders. Delete orders first.",
        )

    try:
        db.delete(client)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Cannot delete client with associated orders. Delete orders first.")

    logger.info("Deleted manual client %s", key.id)
    return DeleteResponse()


@router.get("/{client_id}/orders", response_model=List[FeedOrder])
def get_client_orders(
    client_id: str,
    db: Session = Depends(get_db),
    woo: WooCommerceClient = Depends(get_woocommerce_client),
):
    """WooCommerce and manual orders of one client, newest start date first."""
    identifier = classify_identifier(client_id)
    return collect_client_orders(db, woo, identifier, search_window=settings.client_search_window)
