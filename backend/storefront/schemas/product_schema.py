# backend/storefront/schemas/product_schema.py
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic import ConfigDict


class ProductImage(BaseModel):
    url: str
    alt_text: Optional[str] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    sku: str
    name: str
    description: Optional[str] = None
    price_cents: int
    discount_price_cents: Optional[int] = None
    stock: int
    category: Optional[str] = None
    brand: Optional[str] = None
    collections: Optional[str] = None
    material: Optional[str] = None
    gender: Optional[str] = None
    sizes: List[str] = []
    colors: List[str] = []
    images: List[ProductImage] = []
    tags: List[str] = []
    is_featured: bool
    is_published: bool
    rating: float
    num_reviews: int


class ProductCreate(BaseModel):
    sku: str
    name: str
    description: Optional[str] = None
    price_cents: int = Field(..., ge=0)
    discount_price_cents: Optional[int] = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    category: Optional[str] = None
    brand: Optional[str] = None
    collections: Optional[str] = None
    material: Optional[str] = None
    gender: Optional[str] = None
    sizes: List[str] = []
    colors: List[str] = []
    images: List[ProductImage] = []
    tags: List[str] = []
    is_featured: bool = False
    is_published: bool = False


NULLABLE_FIELDS = {
    "description",
    "discount_price_cents",
    "category",
    "brand",
    "collections",
    "material",
    "gender",
}


class ProductUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied
    (see `changes()`), so 0, False and "" are honoured as real values.
    """

    sku: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price_cents: Optional[int] = Field(None, ge=0)
    discount_price_cents: Optional[int] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None
    brand: Optional[str] = None
    collections: Optional[str] = None
    material: Optional[str] = None
    gender: Optional[str] = None
    sizes: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    images: Optional[List[ProductImage]] = None
    tags: Optional[List[str]] = None
    is_featured: Optional[bool] = None
    is_published: Optional[bool] = None

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        # an explicit null only clears columns that may be empty
        return {k: v for k, v in data.items() if v is not None or k in NULLABLE_FIELDS}


class ProductPage(BaseModel):
    items: List[ProductOut]
    total: int
