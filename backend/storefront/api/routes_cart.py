from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.db import get_db
from storefront.schemas.cart_schema import AddItemIn, CartItemKey, CartOut, MergeIn, UpdateItemIn
from storefront.security import Principal, get_current_principal, get_optional_principal
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _guest_id(request: Request, explicit: Optional[str]) -> Optional[str]:
    return explicit or request.cookies.get(settings.GUEST_COOKIE_NAME)


def _user_id(principal: Optional[Principal]) -> Optional[int]:
    return principal.id if principal else None


@router.get("", response_model=CartOut, summary="Get cart")
def get_cart(
    request: Request,
    guest_id: Optional[str] = Query(None),
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    return svc.get_cart(user_id=_user_id(principal), guest_id=_guest_id(request, guest_id))


@router.post("", response_model=CartOut, summary="Add item to cart")
def add_item(
    payload: AddItemIn,
    request: Request,
    response: Response,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart, created = svc.add_item(
        payload.product_id,
        payload.quantity,
        size=payload.size,
        color=payload.color,
        user_id=_user_id(principal),
        guest_id=_guest_id(request, payload.guest_id),
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    # guests keep their cart through the cookie
    if cart.guest_id:
        response.set_cookie(
            settings.GUEST_COOKIE_NAME, cart.guest_id, httponly=False, samesite="Lax"
        )
    return cart


@router.put("", response_model=CartOut, summary="Update item quantity")
def update_item(
    payload: UpdateItemIn,
    request: Request,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    return svc.update_item(
        payload.product_id,
        payload.quantity,
        size=payload.size,
        color=payload.color,
        user_id=_user_id(principal),
        guest_id=_guest_id(request, payload.guest_id),
    )


@router.delete("", response_model=CartOut, summary="Remove item")
def remove_item(
    payload: CartItemKey,
    request: Request,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    return svc.remove_item(
        payload.product_id,
        size=payload.size,
        color=payload.color,
        user_id=_user_id(principal),
        guest_id=_guest_id(request, payload.guest_id),
    )


@router.post("/merge", response_model=CartOut, summary="Merge guest cart into user cart")
def merge_cart(
    payload: MergeIn,
    request: Request,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    cart = svc.merge_guest_cart(principal.id, _guest_id(request, payload.guest_id))
    response.delete_cookie(settings.GUEST_COOKIE_NAME)
    return cart
