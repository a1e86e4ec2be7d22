from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from storefront.db import Base


class CartItem(Base):
    __tablename__ = "cart_items"
    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(
        Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(Integer, nullable=False, index=True)
    name = Column(String(256), nullable=True)
    image = Column(String(512), nullable=True)
    size = Column(String(32), nullable=True)
    color = Column(String(32), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    price_cents = Column(
        Integer, nullable=False, default=0
    )  # price at time of add, never re-read from the product

    cart = relationship("Cart", back_populates="items")

    @property
    def key(self):
        return (self.product_id, self.size, self.color)
