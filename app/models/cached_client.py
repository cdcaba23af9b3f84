"""
Clients derived from WooCommerce order history.

One row per normalized billing email. Rebuilt by the full sync, bumped by the
order webhook. Never edited by users.
"""
import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from .base import Base


class ClientSource(str, enum.Enum):
    GUEST = "guest"
    REGISTERED = "registered"


class CachedClient(Base):
    __tablename__ = "cached_clients"

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50), nullable=True, index=True)
    first_name = Column(String(255), nullable=False, default="")
    last_name = Column(String(255), nullable=False, default="")
    address = Column(String(500), nullable=True)
    city = Column(String(255), nullable=True)
    wc_customer_id = Column(Integer, nullable=True)
    source = Column(
        Enum(ClientSource, values_callable=lambda e: [m.value for m in e], name="clientsource"),
        nullable=False,
        default=ClientSource.GUEST,
    )
    order_count = Column(Integer, nullable=False, default=0)
    last_order_date = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
