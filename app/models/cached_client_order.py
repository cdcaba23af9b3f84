from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from .base import Base


class CachedClientOrder(Base):
    """WooCommerce order ids already counted into cached_clients.order_count"""
    __tablename__ = "cached_client_orders"

    order_id = Column(Integer, primary_key=True, autoincrement=False)
    email = Column(String(255), nullable=False, index=True)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
