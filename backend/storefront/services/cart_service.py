import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from storefront.errors import NotFoundError, ValidationFailedError
from storefront.models.cart import Cart
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.utils.locks import cart_lock_key, cart_locks
from storefront.utils.transactions import run_with_retry

log = logging.getLogger("cart")


def new_guest_id() -> str:
    return f"guest_{uuid.uuid4().hex}"


class CartService:
    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.product_repo = ProductRepository(db)

    def _require_cart(self, user_id: Optional[int], guest_id: Optional[str]) -> Cart:
        cart = self.cart_repo.get_for_identity(user_id, guest_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    def get_cart(self, user_id: Optional[int] = None, guest_id: Optional[str] = None) -> Cart:
        return self._require_cart(user_id, guest_id)

    def add_item(
        self,
        product_id: int,
        qty: int,
        size: Optional[str] = None,
        color: Optional[str] = None,
        user_id: Optional[int] = None,
        guest_id: Optional[str] = None,
    ) -> Tuple[Cart, bool]:
        """
        Add `qty` of a product variant to the caller's cart, creating the cart
        on first use. Returns (cart, created).
        """
        if qty <= 0:
            raise ValidationFailedError("Quantity must be positive")
        if user_id is None and not guest_id:
            guest_id = new_guest_id()

        def _apply():
            product = self.product_repo.get(product_id)
            if not product:
                raise NotFoundError("Product not found")
            cart = self.cart_repo.get_for_identity(user_id, guest_id)
            created = cart is None
            if created:
                cart = self.cart_repo.create(user_id=user_id, guest_id=guest_id)
            item = cart.find_item(product_id, size, color)
            if item:
                item.quantity += qty
            else:
                self.cart_repo.add_line(cart, product, qty, size, color)
            cart.recalculate_total()
            return cart, created

        with cart_locks(cart_lock_key(user_id, guest_id)):
            cart, created = run_with_retry(self.db, _apply)
        if created:
            log.info("created cart id=%s user=%s guest=%s", cart.id, cart.user_id, cart.guest_id)
        return cart, created

    def update_item(
        self,
        product_id: int,
        qty: int,
        size: Optional[str] = None,
        color: Optional[str] = None,
        user_id: Optional[int] = None,
        guest_id: Optional[str] = None,
    ) -> Cart:
        """Set a line item's quantity; zero or less drops the line."""

        def _apply():
            cart = self._require_cart(user_id, guest_id)
            item = cart.find_item(product_id, size, color)
            if not item:
                raise NotFoundError("Product not found in cart")
            if qty > 0:
                item.quantity = qty
            else:
                self.cart_repo.remove_line(cart, item)
            cart.recalculate_total()
            return cart

        with cart_locks(cart_lock_key(user_id, guest_id)):
            return run_with_retry(self.db, _apply)

    def remove_item(
        self,
        product_id: int,
        size: Optional[str] = None,
        color: Optional[str] = None,
        user_id: Optional[int] = None,
        guest_id: Optional[str] = None,
    ) -> Cart:
        def _apply():
            cart = self._require_cart(user_id, guest_id)
            item = cart.find_item(product_id, size, color)
            if not item:
                raise NotFoundError("Product not found in cart")
            self.cart_repo.remove_line(cart, item)
            cart.recalculate_total()
            return cart

        with cart_locks(cart_lock_key(user_id, guest_id)):
            return run_with_retry(self.db, _apply)

    def merge_guest_cart(self, user_id: int, guest_id: Optional[str]) -> Cart:
        """
        Fold the guest's cart into the user's after login.

        With no user cart the guest cart simply changes owner. Otherwise
        matching lines (product, size, color) add up, the rest are copied
        over, and the guest cart is deleted in the same transaction.
        """
        if not guest_id:
            raise ValidationFailedError("Guest id is required")

        def _apply():
            guest_cart = self.cart_repo.get_by_guest(guest_id)
            user_cart = self.cart_repo.get_by_user(user_id)

            if guest_cart is None:
                # already merged, or the guest never had a cart
                if user_cart is not None:
                    return user_cart
                raise NotFoundError("Guest cart not found")

            if not guest_cart.items:
                raise ValidationFailedError("Guest cart is empty")

            if user_cart is None:
                guest_cart.user_id = user_id
                guest_cart.guest_id = None
                guest_cart.recalculate_total()
                log.info("transferred guest cart id=%s to user=%s", guest_cart.id, user_id)
                return guest_cart

            for guest_item in guest_cart.items:
                found = user_cart.find_item(*guest_item.key)
                if found:
                    found.quantity += guest_item.quantity
                else:
                    self.cart_repo.copy_line(user_cart, guest_item)
            user_cart.recalculate_total()
            self.cart_repo.delete(guest_cart)
            log.info(
                "merged guest cart %s into cart id=%s of user=%s",
                guest_id,
                user_cart.id,
                user_id,
            )
            return user_cart

        with cart_locks(cart_lock_key(user_id=user_id), cart_lock_key(guest_id=guest_id)):
            return run_with_retry(self.db, _apply)
