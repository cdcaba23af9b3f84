import uuid
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base

DEFAULT_PAYMENT_METHOD = "gotovina"
DEFAULT_ORDER_STATUS = "processing"


class ManualOrder(Base):
    """Order entered by hand for a CRM client"""
    __tablename__ = "manual_orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # RESTRICT: a client with orders cannot be deleted
    client_id = Column(
        UUID(as_uuid=True),
        ForeignKey("manual_clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    product_name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    duration_days = Column(Integer, nullable=False)
    address = Column(String(500), nullable=False)
    payment_method = Column(String(100), nullable=False, default=DEFAULT_PAYMENT_METHOD)
    status = Column(String(50), nullable=False, default=DEFAULT_ORDER_STATUS)
    customer_note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    client = relationship("ManualClient", back_populates="orders")

    @property
    def customer_name(self):
        return self.client.full_name if self.client else None

    @property
    def customer_email(self):
        return self.client.email if self.client else None

    @property
    def customer_phone(self):
        return self.client.phone if self.client else None
