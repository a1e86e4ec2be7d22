from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.errors import NotFoundError, ValidationFailedError
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.order_schema import OrderOut, OrderStatusIn
from storefront.schemas.product_schema import ProductOut
from storefront.schemas.user_schema import UserCreate, UserOut, UserUpdate
from storefront.security import require_admin
from storefront.services.order_service import OrderService

router = APIRouter(
    prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


def _require_user(repo: UserRepository, user_id: int):
    u = repo.get(user_id)
    if not u:
        raise NotFoundError("User not found")
    return u


@router.get("/users", response_model=List[UserOut], summary="List users")
def list_users(db: Session = Depends(get_db)):
    return UserRepository(db).list_all()


@router.post(
    "/users",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    if repo.get_by_email(payload.email):
        raise ValidationFailedError("User already exists")
    u = repo.create(payload.name, payload.email, payload.role)
    db.commit()
    return u


@router.put("/users/{user_id}", response_model=UserOut, summary="Update user")
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    u = _require_user(repo, user_id)
    changes = payload.changes()
    if "email" in changes:
        other = repo.get_by_email(changes["email"])
        if other and other.id != u.id:
            raise ValidationFailedError("User already exists")
    repo.update(u, changes)
    db.commit()
    return u


@router.delete("/users/{user_id}", summary="Delete user")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    repo.delete(_require_user(repo, user_id))
    db.commit()
    return {"success": True, "message": "User deleted successfully"}


@router.get("/products", response_model=List[ProductOut], summary="List all products")
def list_all_products(db: Session = Depends(get_db)):
    return ProductRepository(db).list_all()


@router.get("/orders", response_model=List[OrderOut], summary="List all orders")
def list_orders(db: Session = Depends(get_db)):
    return OrderService(db).list_all()


@router.put("/orders/{order_id}", response_model=OrderOut, summary="Update order status")
def update_order_status(
    order_id: int, payload: OrderStatusIn, db: Session = Depends(get_db)
):
    return OrderService(db).update_status(order_id, payload.status)


@router.delete("/orders/{order_id}", summary="Delete order")
def delete_order(order_id: int, db: Session = Depends(get_db)):
    OrderService(db).delete(order_id)
    return {"success": True, "message": "Order removed"}
