import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.orm import Session

from storefront.errors import ForbiddenError, NotFoundError
from storefront.models.order import Order, OrderStatus
from storefront.repositories.order_repo import OrderRepository
from storefront.security import Principal

log = logging.getLogger("orders")


class OrderService:
    def __init__(self, db: Session):
        self.db = db
        self.order_repo = OrderRepository(db)

    def _require(self, order_id: int) -> Order:
        order = self.order_repo.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def list_for_user(self, principal: Principal) -> List[Order]:
        return self.order_repo.list_for_user(principal.id)

    def get_for_principal(self, order_id: int, principal: Principal) -> Order:
        order = self._require(order_id)
        if order.user_id != principal.id and not principal.is_admin:
            raise ForbiddenError("Not authorized to view this order")
        return order

    def list_all(self) -> List[Order]:
        return self.order_repo.list_all()

    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        """Fulfilment update; only status and the delivery fields ever change after creation."""
        order = self._require(order_id)
        self.order_repo.set_status(order, status, datetime.now(timezone.utc))
        self.db.commit()
        log.info("order id=%s status -> %s", order.id, status.value)
        return order

    def delete(self, order_id: int):
        order = self._require(order_id)
        self.order_repo.delete(order)
        self.db.commit()
        log.info("order id=%s deleted", order_id)
