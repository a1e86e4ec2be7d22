from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from storefront.models.order import OrderStatus
from storefront.schemas.checkout_schema import ShippingAddress


class OrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    product_id: int
    name: Optional[str] = None
    image: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    qty: int
    price_cents: int


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    checkout_id: Optional[int] = None
    lines: List[OrderLineOut]
    shipping_address: ShippingAddress
    payment_method: str
    payment_status: str
    payment_details: Optional[Dict[str, Any]] = None
    total_cents: int
    is_paid: bool
    paid_at: Optional[datetime] = None
    is_delivered: bool
    delivered_at: Optional[datetime] = None
    status: OrderStatus
    created_at: datetime


class OrderStatusIn(BaseModel):
    status: OrderStatus
