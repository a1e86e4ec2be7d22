from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.schemas.order_schema import OrderOut
from storefront.security import Principal, get_current_principal
from storefront.services.order_service import OrderService

router = APIRouter(tags=["orders"])


@router.get("/my-orders", response_model=List[OrderOut], summary="Orders of the caller")
def my_orders(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_for_user(principal)


@router.get("/{order_id}", response_model=OrderOut, summary="Order detail")
def get_order(
    order_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return OrderService(db).get_for_principal(order_id, principal)
