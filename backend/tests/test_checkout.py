from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from storefront.db import database
from storefront.errors import (
    CheckoutAlreadyFinalizedError,
    CheckoutNotPaidError,
    ForbiddenError,
    InvalidPaymentStatusError,
    NotFoundError,
    ValidationFailedError,
)
from storefront.models.cart import Cart
from storefront.models.order import Order, OrderStatus
from storefront.models.user import Role
from storefront.repositories.checkout_repo import CheckoutRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.security import Principal
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService

BUYER = Principal(id=21, role=Role.CUSTOMER)
STRANGER = Principal(id=22, role=Role.CUSTOMER)
ADMIN = Principal(id=1, role=Role.ADMIN)

ADDRESS = {"address": "1 Main St", "city": "Springfield", "postal_code": "12345", "country": "US"}


def _items(products):
    return [
        {
            "product_id": products["shirt"],
            "name": "Oxford Shirt",
            "image": None,
            "price_cents": 1000,
            "quantity": 10,
            "size": "M",
            "color": "red",
        }
    ]


def _session(db, products, principal=BUYER):
    return CheckoutService(db).create_session(principal, _items(products), ADDRESS, "card", 10000)


def test_create_session_starts_pending(db, products):
    checkout = _session(db, products)
    assert checkout.payment_status == "pending"
    assert checkout.is_paid is False
    assert checkout.is_finalized is False
    assert checkout.user_id == BUYER.id


def test_create_session_rejects_empty_items(db, products):
    with pytest.raises(ValidationFailedError, match="No items"):
        CheckoutService(db).create_session(BUYER, [], ADDRESS, "card", 0)


def test_create_session_leaves_cart_alone(db, products):
    CartService(db).add_item(products["shirt"], 1, user_id=BUYER.id)
    _session(db, products)
    assert CartService(db).get_cart(user_id=BUYER.id).total_cents == 1000


def test_only_paid_status_is_accepted(db, products):
    checkout = _session(db, products)
    svc = CheckoutService(db)
    for status in ("failed", "PAID", "", "pending"):
        with pytest.raises(InvalidPaymentStatusError):
            svc.record_payment(checkout.id, BUYER, status, {})

    paid = svc.record_payment(checkout.id, BUYER, "paid", {"transaction_id": "tx-1"})
    assert paid.is_paid is True
    assert paid.payment_status == "paid"
    assert paid.paid_at is not None
    assert paid.payment_details == {"transaction_id": "tx-1"}


def test_repeated_payment_keeps_first_record(db, products):
    checkout = _session(db, products)
    svc = CheckoutService(db)
    first = svc.record_payment(checkout.id, BUYER, "paid", {"transaction_id": "tx-1"})
    paid_at = first.paid_at

    again = svc.record_payment(checkout.id, BUYER, "paid", {"transaction_id": "tx-2"})
    assert again.paid_at == paid_at
    assert again.payment_details == {"transaction_id": "tx-1"}


def test_payment_on_missing_session(db, products):
    with pytest.raises(NotFoundError):
        CheckoutService(db).record_payment(999, BUYER, "paid")


def test_other_users_cannot_touch_session(db, products):
    checkout = _session(db, products)
    svc = CheckoutService(db)
    with pytest.raises(ForbiddenError):
        svc.record_payment(checkout.id, STRANGER, "paid")
    with pytest.raises(ForbiddenError):
        svc.finalize(checkout.id, STRANGER)
    # admins may act on any session
    assert svc.record_payment(checkout.id, ADMIN, "paid").is_paid


def test_finalize_unpaid_creates_no_order(db, products):
    checkout = _session(db, products)
    with pytest.raises(CheckoutNotPaidError):
        CheckoutService(db).finalize(checkout.id, BUYER)
    assert db.query(Order).count() == 0


def test_finalize_materializes_order_and_clears_cart(db, products):
    CartService(db).add_item(products["shirt"], 10, size="M", color="red", user_id=BUYER.id)
    # another shopper's cart must survive
    CartService(db).add_item(products["jeans"], 1, user_id=STRANGER.id)

    checkout = _session(db, products)
    svc = CheckoutService(db)
    svc.record_payment(checkout.id, BUYER, "paid", {"transaction_id": "tx-1"})
    order = svc.finalize(checkout.id, BUYER)

    assert order.total_cents == 10000
    assert order.is_paid is True
    assert order.is_delivered is False
    assert order.payment_status == "paid"
    assert order.status == OrderStatus.PROCESSING
    assert order.checkout_id == checkout.id
    assert order.payment_details == {"transaction_id": "tx-1"}
    assert [(l.product_id, l.qty, l.price_cents) for l in order.lines] == [(products["shirt"], 10, 1000)]

    db.refresh(checkout)
    assert checkout.is_finalized is True
    assert checkout.finalized_at is not None

    assert db.query(Cart).filter(Cart.user_id == BUYER.id).first() is None
    assert db.query(Cart).filter(Cart.user_id == STRANGER.id).first() is not None


def test_finalize_twice_yields_one_order(db, products):
    checkout = _session(db, products)
    svc = CheckoutService(db)
    svc.record_payment(checkout.id, BUYER, "paid")
    svc.finalize(checkout.id, BUYER)

    with pytest.raises(CheckoutAlreadyFinalizedError):
        svc.finalize(checkout.id, BUYER)
    assert db.query(Order).count() == 1


def test_payment_after_finalize_is_rejected(db, products):
    checkout = _session(db, products)
    svc = CheckoutService(db)
    svc.record_payment(checkout.id, BUYER, "paid")
    svc.finalize(checkout.id, BUYER)
    with pytest.raises(CheckoutAlreadyFinalizedError):
        svc.record_payment(checkout.id, BUYER, "paid")


def test_conditional_claim_only_succeeds_once(db, products):
    checkout = _session(db, products)
    CheckoutService(db).record_payment(checkout.id, BUYER, "paid")
    repo = CheckoutRepository(db)

    now = datetime.now(timezone.utc)
    assert repo.claim_for_finalize(checkout.id, now) is True
    assert repo.claim_for_finalize(checkout.id, now) is False
    db.rollback()


def test_unpaid_session_cannot_be_claimed(db, products):
    checkout = _session(db, products)
    assert CheckoutRepository(db).claim_for_finalize(checkout.id, datetime.now(timezone.utc)) is False
    db.rollback()


def test_retry_after_order_written_does_not_duplicate(db, products):
    # an order already linked to the session while the flag was never persisted
    checkout = _session(db, products)
    svc = CheckoutService(db)
    svc.record_payment(checkout.id, BUYER, "paid")
    OrderRepository(db).create_from_checkout(checkout)
    db.commit()

    with pytest.raises(CheckoutAlreadyFinalizedError):
        svc.finalize(checkout.id, BUYER)
    assert db.query(Order).count() == 1


def test_stale_reader_loses_finalize_race(db, products):
    checkout = _session(db, products)
    CheckoutService(db).record_payment(checkout.id, BUYER, "paid")

    other = database.session()
    try:
        # the second session has read the session as paid and unfinalized
        stale = CheckoutService(other)
        assert stale.get_owned(checkout.id, BUYER).is_finalized is False

        CheckoutService(db).finalize(checkout.id, BUYER)

        with pytest.raises(CheckoutAlreadyFinalizedError):
            stale.finalize(checkout.id, BUYER)
    finally:
        other.close()
    assert db.query(Order).count() == 1


def test_concurrent_finalize_creates_one_order(db, products):
    checkout = _session(db, products)
    checkout_id = checkout.id
    CheckoutService(db).record_payment(checkout.id, BUYER, "paid")

    def finalize(_):
        s = database.session()
        try:
            CheckoutService(s).finalize(checkout_id, BUYER)
            return "ok"
        except CheckoutAlreadyFinalizedError:
            return "finalized"
        finally:
            s.close()

    with ThreadPoolExecutor(max_workers=8) as ex:
        outcomes = list(ex.map(finalize, range(8)))

    assert outcomes.count("ok") == 1
    assert outcomes.count("finalized") == 7
    assert db.query(Order).filter(Order.checkout_id == checkout_id).count() == 1


# --- HTTP surface ---


def _checkout_payload(products):
    return {
        "checkout_items": _items(products),
        "shipping_address": ADDRESS,
        "payment_method": "card",
        "total_cents": 10000,
    }


def test_checkout_requires_login(client, products):
    res = client.post("/api/checkout", json=_checkout_payload(products))
    assert res.status_code == 401


def test_checkout_flow_over_http(client, products, auth_headers):
    headers = auth_headers(BUYER.id)
    res = client.post("/api/cart", json={"product_id": products["shirt"], "quantity": 10, "size": "M", "color": "red"}, headers=headers)
    assert res.status_code == 201

    res = client.post("/api/checkout", json=_checkout_payload(products), headers=headers)
    assert res.status_code == 201
    checkout_id = res.json()["id"]
    assert res.json()["payment_status"] == "pending"

    res = client.post(f"/api/checkout/{checkout_id}/finalize", headers=headers)
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Checkout is not paid yet"}

    res = client.put(f"/api/checkout/{checkout_id}/pay", json={"payment_status": "declined"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid payment status"

    res = client.put(
        f"/api/checkout/{checkout_id}/pay",
        json={"payment_status": "paid", "payment_details": {"transaction_id": "tx-9"}},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["is_paid"] is True

    res = client.post(f"/api/checkout/{checkout_id}/finalize", headers=headers)
    assert res.status_code == 200
    order = res.json()
    assert order["total_cents"] == 10000
    assert order["is_paid"] is True
    assert order["is_delivered"] is False
    assert order["status"] == "Processing"
    assert order["lines"][0]["qty"] == 10

    res = client.post(f"/api/checkout/{checkout_id}/finalize", headers=headers)
    assert res.status_code == 409
    assert res.json()["message"] == "Checkout has already been finalized"

    # the cart was consumed by finalization
    assert client.get("/api/cart", headers=headers).status_code == 404

    res = client.get(f"/api/checkout/{checkout_id}", headers=headers)
    assert res.json()["is_finalized"] is True


def test_empty_checkout_over_http(client, products, auth_headers):
    payload = {**_checkout_payload(products), "checkout_items": []}
    res = client.post("/api/checkout", json=payload, headers=auth_headers(BUYER.id))
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "No items in checkout"}
