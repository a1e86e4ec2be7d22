from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text

from storefront.db import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False, default=0)
    discount_price_cents = Column(Integer, nullable=True)
    stock = Column(Integer, default=0, nullable=False)
    category = Column(String(128), nullable=True)
    brand = Column(String(128), nullable=True)
    collections = Column(String(128), nullable=True)
    material = Column(String(128), nullable=True)
    gender = Column(String(16), nullable=True)  # Men, Women, Unisex
    sizes = Column(JSON, nullable=False, default=list)
    colors = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)  # [{"url": ..., "alt_text": ...}]
    tags = Column(JSON, nullable=False, default=list)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    rating = Column(Float, default=0, nullable=False)
    num_reviews = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    @property
    def first_image_url(self):
        if not self.images:
            return None
        return self.images[0].get("url")

    def __repr__(self):
        return f"<Product id={self.id} sku={self.sku} name={self.name}>"
