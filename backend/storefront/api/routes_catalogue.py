from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.errors import NotFoundError, ValidationFailedError
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product_schema import ProductCreate, ProductOut, ProductPage, ProductUpdate
from storefront.security import Principal, require_admin

router = APIRouter(tags=["catalogue"])


def _require_product(repo: ProductRepository, product_id: int):
    p = repo.get(product_id)
    if not p:
        raise NotFoundError("Product not found")
    return p


@router.get("", response_model=ProductPage, summary="List products")
def list_products(
    q: Optional[str] = Query(None, description="name contains"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    repo = ProductRepository(db)
    items, total = repo.list(q=q, page=page, size=size)
    return {"items": items, "total": total}


@router.get("/best-seller", response_model=ProductOut, summary="Highest rated product")
def best_seller(db: Session = Depends(get_db)):
    p = ProductRepository(db).best_seller()
    if not p:
        raise NotFoundError("No best seller found")
    return p


@router.get("/new-arrivals", response_model=List[ProductOut], summary="Latest products")
def new_arrivals(db: Session = Depends(get_db)):
    return ProductRepository(db).new_arrivals(limit=8)


@router.get("/similar/{product_id}", response_model=List[ProductOut], summary="Similar products")
def similar_products(product_id: int, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    return repo.similar_to(_require_product(repo, product_id), limit=4)


@router.get("/{product_id}", response_model=ProductOut, summary="Get product")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _require_product(ProductRepository(db), product_id)


@router.post(
    "",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create product (admin)",
)
def create_product(
    payload: ProductCreate,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    repo = ProductRepository(db)
    if repo.get_by_sku(payload.sku):
        raise ValidationFailedError("Duplicate field value entered for: sku")
    p = repo.create(**payload.model_dump())
    db.commit()
    return p


@router.put("/{product_id}", response_model=ProductOut, summary="Update product (admin)")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    repo = ProductRepository(db)
    p = _require_product(repo, product_id)
    changes = payload.changes()
    if "sku" in changes and changes["sku"] != p.sku and repo.get_by_sku(changes["sku"]):
        raise ValidationFailedError("Duplicate field value entered for: sku")
    repo.update(p, changes)
    db.commit()
    return p


@router.delete("/{product_id}", summary="Delete product (admin)")
def delete_product(
    product_id: int,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    repo = ProductRepository(db)
    repo.delete(_require_product(repo, product_id))
    db.commit()
    return {"success": True, "message": "Product deleted successfully"}
