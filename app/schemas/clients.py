from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List, Literal
from uuid import UUID


class ManualClientCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=255)
    postcode: Optional[str] = Field(None, max_length=20)


class ManualClientUpdate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)


class ManualClientResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ManualClientMutationResponse(BaseModel):
    success: bool = True
    client: ManualClientResponse


class ClientDetail(BaseModel):
    """Unified view of a client, whichever store or lookup produced it"""
    id: str
    name: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    source: Literal["manual", "cached", "woocommerce"]
    wc_customer_id: Optional[int] = None
    order_count: Optional[int] = None
    last_order_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ClientListItem(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    source: Literal["manual", "cached"]
    order_count: int = 0
    last_order_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    current_page: int
    per_page: int
    total_pages: int
    total_count: int
    has_more: bool


class ClientListResponse(BaseModel):
    clients: List[ClientListItem]
    pagination: Pagination


class ContactOrderStats(BaseModel):
    order_count: int
    last_order_date: Optional[datetime] = None


class SyncResponse(BaseModel):
    success: bool = True
    message: str
    orders_fetched: int
    pages_fetched: int
    clients: int
    upserted: int
    failed_batches: int
    aborted: bool


class DeleteResponse(BaseModel):
    success: bool = True
