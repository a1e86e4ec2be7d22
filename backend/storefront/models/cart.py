from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from storefront.db import Base


class Cart(Base):
    __tablename__ = "carts"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, unique=True, index=True, nullable=True)
    guest_id = Column(String(64), unique=True, index=True, nullable=True)
    total_cents = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # bumped on every UPDATE; a flush against an older version raises StaleDataError
    version = Column(Integer, nullable=False)

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )

    __mapper_args__ = {"version_id_col": version}

    def find_item(self, product_id: int, size, color):
        return next(
            (
                it
                for it in self.items
                if it.product_id == product_id and it.size == size and it.color == color
            ),
            None,
        )

    def recalculate_total(self):
        self.total_cents = sum(it.price_cents * it.quantity for it in self.items)
        self.updated_at = datetime.now(timezone.utc)
        return self.total_cents
