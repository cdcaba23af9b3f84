from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional, Literal
from uuid import UUID


class ManualOrderCreate(BaseModel):
    client_id: UUID
    product_name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    duration_days: int = Field(..., gt=0)
    address: str = Field(..., min_length=1, max_length=500)
    customer_note: Optional[str] = None
    payment_method: Optional[str] = Field(None, max_length=100)


class ManualOrderUpdate(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    duration_days: int = Field(..., gt=0)
    address: str = Field(..., min_length=1, max_length=500)
    customer_note: Optional[str] = None
    payment_method: Optional[str] = Field(None, max_length=100)
    status: Optional[str] = Field(None, max_length=50)


class ManualOrderResponse(BaseModel):
    id: UUID
    client_id: UUID
    product_name: str
    start_date: date
    duration_days: int
    address: str
    payment_method: str
    status: str
    customer_note: Optional[str] = None
    created_at: datetime
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

    class Config:
        from_attributes = True


class ManualOrderMutationResponse(BaseModel):
    success: bool = True
    order: ManualOrderResponse


class FeedOrder(BaseModel):
    """WooCommerce and manual orders normalized into one row shape"""
    id: str
    product: str
    start_date: str
    date: Optional[str] = None
    duration: str
    status: str
    payment_method: Optional[str] = None
    source: Literal["woocommerce", "manual"]
    manual_id: Optional[UUID] = None
    customer: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    note: Optional[str] = None
