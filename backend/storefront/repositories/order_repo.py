from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.models.checkout import CheckoutSession, PaymentStatus
from storefront.models.order import Order, OrderLine, OrderStatus


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: int) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def get_by_checkout(self, checkout_id: int) -> Optional[Order]:
        return self.db.query(Order).filter(Order.checkout_id == checkout_id).first()

    def list_for_user(self, user_id: int) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def list_all(self) -> List[Order]:
        return self.db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()

    def create_from_checkout(self, checkout: CheckoutSession) -> Order:
        order = Order(
            user_id=checkout.user_id,
            checkout_id=checkout.id,
            shipping_address=checkout.shipping_address,
            payment_method=checkout.payment_method,
            payment_status=PaymentStatus.PAID.value,
            payment_details=checkout.payment_details,
            total_cents=checkout.total_cents,
            is_paid=True,
            paid_at=checkout.paid_at,
            is_delivered=False,
            status=OrderStatus.PROCESSING,
        )
        for it in checkout.checkout_items:
            order.lines.append(
                OrderLine(
                    product_id=it["product_id"],
                    name=it.get("name"),
                    image=it.get("image"),
                    size=it.get("size"),
                    color=it.get("color"),
                    qty=it["quantity"],
                    price_cents=it["price_cents"],
                )
            )
        self.db.add(order)
        self.db.flush()
        return order

    def set_status(self, order: Order, status: OrderStatus, now: datetime) -> Order:
        order.status = status
        order.is_delivered = status == OrderStatus.DELIVERED
        if order.is_delivered:
            order.delivered_at = now
        self.db.flush()
        return order

    def delete(self, order: Order):
        self.db.delete(order)
        self.db.flush()
