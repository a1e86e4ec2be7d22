from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckoutItem(BaseModel):
    product_id: int
    name: Optional[str] = None
    image: Optional[str] = None
    price_cents: int = Field(..., ge=0)
    quantity: int = Field(..., gt=0)
    size: Optional[str] = None
    color: Optional[str] = None


class ShippingAddress(BaseModel):
    address: str
    city: str
    postal_code: str
    country: str


class CreateCheckoutIn(BaseModel):
    checkout_items: List[CheckoutItem] = []
    shipping_address: ShippingAddress
    payment_method: str
    total_cents: int = Field(..., ge=0)


class PaymentIn(BaseModel):
    payment_status: str
    payment_details: Optional[Dict[str, Any]] = None


class CheckoutOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int
    checkout_items: List[CheckoutItem]
    shipping_address: ShippingAddress
    payment_method: str
    total_cents: int
    payment_status: str
    payment_details: Optional[Dict[str, Any]] = None
    is_paid: bool
    paid_at: Optional[datetime] = None
    is_finalized: bool
    finalized_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
