from sqlalchemy import delete, select
from sqlalchemy.orm import Session
from typing import Optional
from storefront.models.cart import Cart
from storefront.models.cart_item import CartItem
from storefront.models.product import Product

class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int) -> Optional[Cart]:
        return self.db.query(Cart).filter(Cart.user_id == user_id).first()

    def get_by_guest(self, guest_id: str) -> Optional[Cart]:
        return self.db.query(Cart).filter(Cart.guest_id == guest_id).first()

    def get_for_identity(self, user_id: Optional[int], guest_id: Optional[str]) -> Optional[Cart]:
        # an authenticated identity wins over a guest id sent alongside it
        if user_id is not None:
            return self.get_by_user(user_id)
        if guest_id:
            return self.get_by_guest(guest_id)
        return None

    def create(self, user_id: Optional[int] = None, guest_id: Optional[str] = None) -> Cart:
        c = Cart(user_id=user_id, guest_id=None if user_id is not None else guest_id)
        self.db.add(c)
        return c

    def add_line(self, cart: Cart, product: Product, qty: int, size, color) -> CartItem:
        item = CartItem(
            product_id=product.id,
            name=product.name,
            image=product.first_image_url,
            price_cents=product.price_cents,
            size=size,
            color=color,
            quantity=qty,
        )
        cart.items.append(item)
        return item

    def copy_line(self, cart: Cart, source: CartItem) -> CartItem:
        item = CartItem(
            product_id=source.product_id,
            name=source.name,
            image=source.image,
            price_cents=source.price_cents,
            size=source.size,
            color=source.color,
            quantity=source.quantity,
        )
        cart.items.append(item)
        return item

    def remove_line(self, cart: Cart, item: CartItem):
        cart.items.remove(item)

    def delete(self, cart: Cart):
        self.db.delete(cart)

    def delete_by_user(self, user_id: int) -> int:
        """Drop the user's cart and its lines in one pass, without loading them."""
        cart_ids = select(Cart.id).where(Cart.user_id == user_id).scalar_subquery()
        self.db.execute(
            delete(CartItem)
            .where(CartItem.cart_id.in_(cart_ids))
            .execution_options(synchronize_session=False)
        )
        res = self.db.execute(
            delete(Cart)
            .where(Cart.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount or 0
