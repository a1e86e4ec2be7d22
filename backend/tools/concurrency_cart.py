import argparse
import concurrent.futures
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import requests

from storefront.models.user import Role
from storefront.security import create_access_token

BASE = os.environ.get("STOREFRONT_BASE", "http://127.0.0.1:8000")


def _headers(user_id):
    return {"Authorization": f"Bearer {create_access_token(user_id, Role.CUSTOMER)}"}


def add_task(i, product_id, guest_id, headers):
    payload = {"product_id": product_id, "quantity": 1, "size": "M", "color": "red", "guest_id": guest_id}
    try:
        r = requests.post(f"{BASE}/api/cart", json=payload, headers=headers, timeout=20)
        return (i, "add", r.status_code, r.text)
    except requests.RequestException as e:
        return (i, "add", "ERR", str(e))


def finalize_task(i, checkout_id, headers):
    try:
        r = requests.post(f"{BASE}/api/checkout/{checkout_id}/finalize", headers=headers, timeout=20)
        return (i, "finalize", r.status_code, r.text)
    except requests.RequestException as e:
        return (i, "finalize", "ERR", str(e))


def run_cart_concurrent(workers, product_id, guest_id):
    """Every worker adds one unit of the same line; the final quantity must equal `workers`."""
    print(f"Running cart test: workers={workers}, product_id={product_id}, guest_id={guest_id}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(add_task, i, product_id, guest_id, {}) for i in range(workers)]
        results = [f.result() for f in futures]
    for r in results:
        print(r[:3])
    cart = requests.get(f"{BASE}/api/cart", params={"guest_id": guest_id}, timeout=10).json()
    qty = sum(it["quantity"] for it in cart.get("items", []))
    print(f"Final quantity: {qty} (expected {workers})")


def run_finalize_concurrent(workers, product_id, user_id):
    """Race `workers` finalize calls on one paid session; exactly one may succeed."""
    headers = _headers(user_id)
    item = {"product_id": product_id, "price_cents": 1000, "quantity": 1}
    address = {"address": "1 Probe St", "city": "Testville", "postal_code": "00000", "country": "US"}
    r = requests.post(
        f"{BASE}/api/checkout",
        json={"checkout_items": [item], "shipping_address": address, "payment_method": "card", "total_cents": 1000},
        headers=headers,
        timeout=10,
    )
    r.raise_for_status()
    checkout_id = r.json()["id"]
    requests.put(
        f"{BASE}/api/checkout/{checkout_id}/pay", json={"payment_status": "paid"}, headers=headers, timeout=10
    ).raise_for_status()

    print(f"Running finalize test: workers={workers}, checkout_id={checkout_id}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(finalize_task, i, checkout_id, headers) for i in range(workers)]
        results = [f.result() for f in futures]
    for r in results:
        print(r[:3])
    ok = [r for r in results if r[2] == 200]
    print(f"Successful finalizations: {len(ok)} (expected 1)")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrency probe for cart writes and checkout finalization.")
    sub = parser.add_subparsers(dest="mode", required=True)

    c = sub.add_parser("cart")
    c.add_argument("--product-id", type=int, default=1)
    c.add_argument("--guest-id", default="guest_probe")
    c.add_argument("--workers", type=int, default=8)

    f = sub.add_parser("finalize")
    f.add_argument("--product-id", type=int, default=1)
    f.add_argument("--user-id", type=int, default=9001)
    f.add_argument("--workers", type=int, default=8)

    args = parser.parse_args()

    if args.mode == "cart":
        run_cart_concurrent(args.workers, args.product_id, args.guest_id)
    elif args.mode == "finalize":
        run_finalize_concurrent(args.workers, args.product_id, args.user_id)
