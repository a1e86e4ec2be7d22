from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CartItemKey(BaseModel):
    product_id: int
    size: Optional[str] = None
    color: Optional[str] = None
    guest_id: Optional[str] = None


class AddItemIn(CartItemKey):
    quantity: int = Field(1, gt=0)


class UpdateItemIn(CartItemKey):
    # zero or negative removes the line
    quantity: int


class MergeIn(BaseModel):
    guest_id: Optional[str] = None


class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    product_id: int
    name: Optional[str] = None
    image: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    quantity: int
    price_cents: int


class CartOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: Optional[int] = None
    guest_id: Optional[str] = None
    items: List[CartItemOut]
    total_cents: int
    updated_at: Optional[datetime] = None
