import pytest

from storefront.errors import NotFoundError, ValidationFailedError
from storefront.models.cart import Cart
from storefront.services.cart_service import CartService


def _lines(cart):
    return {(it.product_id, it.size, it.color): it.quantity for it in cart.items}


def test_guest_cart_is_handed_over_when_user_has_none(db, products):
    svc = CartService(db)
    guest_cart, _ = svc.add_item(products["shirt"], 2, size="M", color="red", guest_id="g-1")
    guest_cart_id = guest_cart.id

    cart = svc.merge_guest_cart(5, "g-1")

    assert cart.id == guest_cart_id
    assert cart.user_id == 5
    assert cart.guest_id is None
    assert _lines(cart) == {(products["shirt"], "M", "red"): 2}
    assert db.query(Cart).count() == 1
    with pytest.raises(NotFoundError):
        svc.get_cart(guest_id="g-1")


def test_merge_sums_shared_keys_and_appends_the_rest(db, products):
    svc = CartService(db)
    svc.add_item(products["shirt"], 1, size="M", color="red", user_id=5)
    svc.add_item(products["shirt"], 1, size="L", color="blue", user_id=5)
    svc.add_item(products["shirt"], 3, size="M", color="red", guest_id="g-1")
    svc.add_item(products["jeans"], 2, size="30", color="indigo", guest_id="g-1")

    cart = svc.merge_guest_cart(5, "g-1")

    assert _lines(cart) == {
        (products["shirt"], "M", "red"): 4,
        (products["shirt"], "L", "blue"): 1,
        (products["jeans"], "30", "indigo"): 2,
    }
    assert cart.total_cents == 4 * 1000 + 1000 + 2 * 2500
    assert db.query(Cart).filter(Cart.guest_id == "g-1").first() is None
    assert db.query(Cart).count() == 1


def test_merge_keeps_guest_prices(db, products):
    svc = CartService(db)
    svc.add_item(products["shirt"], 1, size="S", color="red", guest_id="g-1")
    svc.add_item(products["jeans"], 1, size="30", color="indigo", user_id=5)

    cart = svc.merge_guest_cart(5, "g-1")
    moved = next(it for it in cart.items if it.product_id == products["shirt"])
    assert moved.price_cents == 1000
    assert moved.name == "Oxford Shirt"


def test_empty_guest_cart_cannot_be_merged(db, products):
    svc = CartService(db)
    svc.add_item(products["shirt"], 1, size="M", color="red", guest_id="g-1")
    svc.remove_item(products["shirt"], size="M", color="red", guest_id="g-1")

    with pytest.raises(ValidationFailedError, match="empty"):
        svc.merge_guest_cart(5, "g-1")


def test_merge_is_idempotent_once_guest_cart_is_gone(db, products):
    svc = CartService(db)
    svc.add_item(products["jeans"], 1, size="30", color="indigo", user_id=5)
    svc.add_item(products["jeans"], 2, size="30", color="indigo", guest_id="g-1")

    first = svc.merge_guest_cart(5, "g-1")
    assert _lines(first) == {(products["jeans"], "30", "indigo"): 3}

    again = svc.merge_guest_cart(5, "g-1")
    assert again.id == first.id
    assert _lines(again) == {(products["jeans"], "30", "indigo"): 3}
    assert again.total_cents == 7500


def test_merge_with_no_carts_at_all(db, products):
    with pytest.raises(NotFoundError, match="Guest cart not found"):
        CartService(db).merge_guest_cart(5, "g-missing")


def test_merge_requires_guest_id(db, products):
    with pytest.raises(ValidationFailedError):
        CartService(db).merge_guest_cart(5, None)


def test_merge_endpoint_requires_login(client, products):
    res = client.post("/api/cart/merge", json={"guest_id": "g-1"})
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Not authorized"}


def test_merge_endpoint_uses_guest_cookie(client, products, auth_headers):
    res = client.post("/api/cart", json={"product_id": products["shirt"], "quantity": 2, "size": "M", "color": "red"})
    assert res.status_code == 201

    res = client.post("/api/cart/merge", json={}, headers=auth_headers(8))
    assert res.status_code == 200
    body = res.json()
    assert body["user_id"] == 8
    assert body["guest_id"] is None
    assert body["total_cents"] == 2000
