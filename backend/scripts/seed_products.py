#!/usr/bin/env python3
"""
Reset the catalogue and seed it with sample products plus a default admin user.

Products come from a JSON file when one is given, otherwise from the small
built-in sample below. Existing products and users are removed first.

Usage:
    python scripts/seed_products.py
    python scripts/seed_products.py --file products.json
"""
import argparse
import json
import logging
import os
import sys

# allow running from backend/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.db import database, init_db
from storefront.models.product import Product
from storefront.models.user import Role, User
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.user_repo import UserRepository

log = logging.getLogger("seed")

ADMIN = {"name": "Admin User", "email": "admin@example.com", "role": Role.ADMIN}

SAMPLE_PRODUCTS = [
    {
        "sku": "OX-SHIRT-001",
        "name": "Classic Oxford Button-Down Shirt",
        "price": 39.99,
        "discount_price": 34.99,
        "stock": 20,
        "category": "Top Wear",
        "brand": "Urban Threads",
        "collections": "Business Casual",
        "material": "Cotton",
        "gender": "Men",
        "sizes": ["S", "M", "L", "XL"],
        "colors": ["White", "Blue"],
        "images": [{"url": "https://picsum.photos/500/500?random=1", "alt_text": "Oxford shirt"}],
    },
    {
        "sku": "SLIM-JEAN-002",
        "name": "Slim-Fit Stretch Jeans",
        "price": 49.99,
        "stock": 15,
        "category": "Bottom Wear",
        "brand": "DenimCo",
        "collections": "Casual Collection",
        "material": "Denim",
        "gender": "Men",
        "sizes": ["30", "32", "34"],
        "colors": ["Indigo", "Black"],
        "images": [{"url": "https://picsum.photos/500/500?random=2", "alt_text": "Slim jeans"}],
    },
    {
        "sku": "KNIT-TOP-003",
        "name": "Knit Cropped Top",
        "price": 29.99,
        "stock": 30,
        "category": "Top Wear",
        "brand": "ChicKnit",
        "collections": "Summer Collection",
        "material": "Viscose",
        "gender": "Women",
        "sizes": ["XS", "S", "M"],
        "colors": ["Beige", "Black"],
        "images": [{"url": "https://picsum.photos/500/500?random=3", "alt_text": "Knit top"}],
        "is_featured": True,
    },
]


def _cents(entry, cents_key, amount_key):
    if entry.get(cents_key) is not None:
        return int(entry[cents_key])
    if entry.get(amount_key) is not None:
        return int(round(float(entry[amount_key]) * 100))
    return None


def _normalize_entry(entry):
    """Map a loosely shaped product record onto Product columns."""
    images = entry.get("images") or []
    images = [img if isinstance(img, dict) else {"url": img} for img in images]
    return {
        "sku": entry.get("sku") or entry.get("id"),
        "name": entry.get("name") or entry.get("title") or "",
        "description": entry.get("description"),
        "price_cents": _cents(entry, "price_cents", "price") or 0,
        "discount_price_cents": _cents(entry, "discount_price_cents", "discount_price"),
        "stock": int(entry.get("stock", entry.get("count_in_stock", 0)) or 0),
        "category": entry.get("category"),
        "brand": entry.get("brand"),
        "collections": entry.get("collections"),
        "material": entry.get("material"),
        "gender": entry.get("gender"),
        "sizes": list(entry.get("sizes") or []),
        "colors": list(entry.get("colors") or []),
        "images": images,
        "tags": list(entry.get("tags") or []),
        "is_featured": bool(entry.get("is_featured", False)),
        "is_published": bool(entry.get("is_published", True)),
    }


def load_entries(path=None):
    if not path:
        return SAMPLE_PRODUCTS
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data.get("items") or list(data.values())
    return data


def seed(entries):
    init_db(database)
    db = database.session()
    try:
        db.query(Product).delete()
        db.query(User).delete()

        UserRepository(db).create(ADMIN["name"], ADMIN["email"], ADMIN["role"])
        repo = ProductRepository(db)
        created = 0
        for entry in entries:
            fields = _normalize_entry(entry)
            if not fields["sku"]:
                log.warning("skipping product without sku: %s", fields["name"])
                continue
            repo.create(**fields)
            created += 1
        db.commit()
        log.info("seeded %d products and admin %s", created, ADMIN["email"])
        return created
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    parser = argparse.ArgumentParser(description="Seed the storefront catalogue.")
    parser.add_argument("--file", "-f", default=None, help="JSON list of products (defaults to a built-in sample)")
    args = parser.parse_args()
    if args.file and not os.path.exists(args.file):
        print("File not found:", args.file)
        sys.exit(1)
    seed(load_entries(args.file))
