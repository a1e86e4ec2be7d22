from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from storefront.models.product import Product


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.sku == sku).first()

    def list(
        self, q: Optional[str] = None, page: int = 1, size: int = 20
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product)
        if q:
            query = query.filter(Product.name.ilike(f"%{q}%"))
        total = query.count()
        items = query.order_by(Product.name).offset((page - 1) * size).limit(size).all()
        return items, total

    def list_all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.id).all()

    def best_seller(self) -> Optional[Product]:
        return self.db.query(Product).order_by(Product.rating.desc(), Product.id).first()

    def new_arrivals(self, limit: int = 8) -> List[Product]:
        return (
            self.db.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(limit)
            .all()
        )

    def similar_to(self, product: Product, limit: int = 4) -> List[Product]:
        """Other products sharing the category and gender of `product`."""
        return (
            self.db.query(Product)
            .filter(
                Product.id != product.id,
                Product.category == product.category,
                Product.gender == product.gender,
            )
            .order_by(Product.id)
            .limit(limit)
            .all()
        )

    def create(self, **fields) -> Product:
        p = Product(**fields)
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: Product, changes: Dict[str, Any]) -> Product:
        """Apply only the fields present in `changes`; falsy values are real values."""
        for field, value in changes.items():
            setattr(product, field, value)
        self.db.flush()
        return product

    def delete(self, product: Product):
        self.db.delete(product)
        self.db.flush()
