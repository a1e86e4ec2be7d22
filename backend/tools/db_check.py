import json
import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "dev.db"
USER_ID = sys.argv[2] if len(sys.argv) > 2 else None

conn = sqlite3.connect(DB)
cur = conn.cursor()

print("=== Carts ===")
if USER_ID:
    cur.execute(
        "SELECT id, user_id, guest_id, total_cents, version, updated_at FROM carts WHERE user_id=?",
        (USER_ID,),
    )
else:
    cur.execute(
        "SELECT id, user_id, guest_id, total_cents, version, updated_at FROM carts ORDER BY updated_at DESC LIMIT 20"
    )
for r in cur.fetchall():
    cur2 = conn.cursor()
    cur2.execute(
        "SELECT product_id, size, color, quantity, price_cents FROM cart_items WHERE cart_id=? ORDER BY id",
        (r[0],),
    )
    print(
        {
            "id": r[0],
            "user_id": r[1],
            "guest_id": r[2],
            "total_cents": r[3],
            "version": r[4],
            "updated_at": r[5],
            "items": cur2.fetchall(),
        }
    )

print("\n=== Checkout Sessions ===")
cur.execute(
    "SELECT id, user_id, total_cents, payment_status, is_paid, is_finalized, payment_details, created_at "
    "FROM checkout_sessions ORDER BY created_at DESC LIMIT 20"
)
for r in cur.fetchall():
    details = r[6]
    try:
        details = json.loads(details) if isinstance(details, str) else details
    except ValueError:
        pass
    print(
        {
            "id": r[0],
            "user_id": r[1],
            "total_cents": r[2],
            "payment_status": r[3],
            "is_paid": bool(r[4]),
            "is_finalized": bool(r[5]),
            "payment_details": details,
            "created_at": r[7],
        }
    )

print("\n=== Recent Orders ===")
cur.execute(
    "SELECT id, user_id, checkout_id, status, total_cents, is_delivered, created_at FROM orders ORDER BY created_at DESC LIMIT 20"
)
for r in cur.fetchall():
    print(r)

conn.close()
