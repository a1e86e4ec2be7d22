import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from storefront.errors import (
    CheckoutAlreadyFinalizedError,
    CheckoutNotPaidError,
    ForbiddenError,
    InvalidPaymentStatusError,
    NotFoundError,
    TransientStoreError,
    ValidationFailedError,
)
from storefront.models.checkout import CheckoutSession, PaymentStatus
from storefront.models.order import Order
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.checkout_repo import CheckoutRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.security import Principal

log = logging.getLogger("checkout")


class CheckoutService:
    def __init__(self, db: Session):
        self.db = db
        self.checkout_repo = CheckoutRepository(db)
        self.order_repo = OrderRepository(db)
        self.cart_repo = CartRepository(db)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def get_owned(self, checkout_id: int, principal: Principal) -> CheckoutSession:
        checkout = self.checkout_repo.get(checkout_id)
        if not checkout:
            raise NotFoundError("Checkout not found")
        if checkout.user_id != principal.id and not principal.is_admin:
            raise ForbiddenError("Not authorized to access this checkout")
        return checkout

    def create_session(
        self,
        principal: Principal,
        checkout_items: List[Dict],
        shipping_address: Dict,
        payment_method: str,
        total_cents: int,
    ) -> CheckoutSession:
        """Open a pending session from a cart snapshot. The cart itself is left alone."""
        if not checkout_items:
            raise ValidationFailedError("No items in checkout")
        if total_cents < 0:
            raise ValidationFailedError("Total price cannot be negative")
        checkout = self.checkout_repo.create(
            user_id=principal.id,
            checkout_items=checkout_items,
            shipping_address=shipping_address,
            payment_method=payment_method,
            total_cents=total_cents,
        )
        self.db.commit()
        log.info("checkout created id=%s for user=%s", checkout.id, principal.id)
        return checkout

    def record_payment(
        self,
        checkout_id: int,
        principal: Principal,
        payment_status: str,
        payment_details: Optional[Dict] = None,
    ) -> CheckoutSession:
        checkout = self.get_owned(checkout_id, principal)
        # only the literal "paid" moves a session forward
        if payment_status != PaymentStatus.PAID.value:
            raise InvalidPaymentStatusError()
        if checkout.is_finalized:
            raise CheckoutAlreadyFinalizedError()
        if checkout.is_paid:
            return checkout

        checkout.is_paid = True
        checkout.payment_status = PaymentStatus.PAID.value
        checkout.payment_details = payment_details
        checkout.paid_at = self._now()
        self.db.commit()
        log.info("checkout id=%s marked paid", checkout.id)
        return checkout

    def finalize(self, checkout_id: int, principal: Principal) -> Order:
        """
        Turn a paid session into its order and clear the owner's cart.

        The session is claimed with a conditional UPDATE, and the claim, the
        order insert and the cart delete commit together. Concurrent or
        retried calls therefore see CheckoutAlreadyFinalizedError and never
        produce a second order.
        """
        checkout = self.get_owned(checkout_id, principal)
        if checkout.is_finalized or self.order_repo.get_by_checkout(checkout.id):
            raise CheckoutAlreadyFinalizedError()
        if not checkout.is_paid:
            raise CheckoutNotPaidError()

        try:
            claimed = self.checkout_repo.claim_for_finalize(checkout.id, self._now())
            if claimed:
                order = self.order_repo.create_from_checkout(checkout)
                self.cart_repo.delete_by_user(checkout.user_id)
                self.db.commit()
            else:
                self.db.rollback()
        except IntegrityError:
            # an order already references this session
            self.db.rollback()
            raise CheckoutAlreadyFinalizedError()
        except OperationalError as exc:
            self.db.rollback()
            raise TransientStoreError("Store is busy, please retry") from exc

        self.db.refresh(checkout)
        if not claimed:
            # lost the race, or payment state changed under us
            if checkout.is_finalized:
                raise CheckoutAlreadyFinalizedError()
            raise CheckoutNotPaidError()
        log.info("checkout id=%s finalized into order id=%s", checkout.id, order.id)
        return order
