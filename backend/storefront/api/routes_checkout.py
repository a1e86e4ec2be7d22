from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.schemas.checkout_schema import CheckoutOut, CreateCheckoutIn, PaymentIn
from storefront.schemas.order_schema import OrderOut
from storefront.security import Principal, get_current_principal
from storefront.services.checkout_service import CheckoutService

router = APIRouter(prefix="/api/checkout", tags=["checkout"])


@router.post(
    "",
    response_model=CheckoutOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create checkout session",
)
def create_checkout(
    payload: CreateCheckoutIn,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = CheckoutService(db)
    return svc.create_session(
        principal,
        [it.model_dump() for it in payload.checkout_items],
        payload.shipping_address.model_dump(),
        payload.payment_method,
        payload.total_cents,
    )


@router.get("/{checkout_id}", response_model=CheckoutOut, summary="Get checkout session")
def get_checkout(
    checkout_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return CheckoutService(db).get_owned(checkout_id, principal)


@router.put("/{checkout_id}/pay", response_model=CheckoutOut, summary="Record payment")
def pay_checkout(
    checkout_id: int,
    payload: PaymentIn,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = CheckoutService(db)
    return svc.record_payment(
        checkout_id, principal, payload.payment_status, payload.payment_details
    )


@router.post(
    "/{checkout_id}/finalize",
    response_model=OrderOut,
    summary="Finalize checkout into an order",
)
def finalize_checkout(
    checkout_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return CheckoutService(db).finalize(checkout_id, principal)
