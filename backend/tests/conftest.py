import os
import tempfile

# point the app at a throwaway database before storefront.config is imported
_TEST_DB = os.path.join(tempfile.gettempdir(), f"storefront-test-{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB}"

import pytest
from fastapi.testclient import TestClient

from storefront.db import database, init_db
from storefront.main import app
from storefront.models.product import Product
from storefront.models.user import Role
from storefront.security import create_access_token


@pytest.fixture(autouse=True)
def reset_db():
    init_db(database, reset=True)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    s = database.session()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def products(db):
    """Two catalogue entries: a 10.00 shirt and a 25.00 pair of jeans."""
    shirt = Product(
        sku="SHIRT-1",
        name="Oxford Shirt",
        price_cents=1000,
        stock=20,
        sizes=["S", "M", "L"],
        colors=["red", "blue"],
        images=[{"url": "https://img.example/shirt.jpg", "alt_text": "shirt"}],
    )
    jeans = Product(
        sku="JEANS-1",
        name="Slim Jeans",
        price_cents=2500,
        stock=5,
        sizes=["30", "32"],
        colors=["indigo"],
        images=[],
    )
    db.add_all([shirt, jeans])
    db.commit()
    return {"shirt": shirt.id, "jeans": jeans.id}


@pytest.fixture
def auth_headers():
    def _headers(user_id: int, role: Role = Role.CUSTOMER):
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return _headers
