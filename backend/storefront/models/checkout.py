import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String

from storefront.db import Base


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"


class CheckoutSession(Base):
    """
    Snapshot of a cart taken at checkout, tracking payment until it is
    finalized into exactly one order.
    """

    __tablename__ = "checkout_sessions"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    checkout_items = Column(JSON, nullable=False, default=list)
    shipping_address = Column(JSON, nullable=False, default=dict)
    payment_method = Column(String(64), nullable=False)
    total_cents = Column(Integer, nullable=False, default=0)
    payment_status = Column(String(32), nullable=False, default=PaymentStatus.PENDING.value)
    payment_details = Column(JSON, nullable=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    is_finalized = Column(Boolean, nullable=False, default=False)
    finalized_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
