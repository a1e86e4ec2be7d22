import importlib
import logging
import os
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from storefront.config import settings

log = logging.getLogger("storefront.db")

Base = declarative_base()

# every module declaring tables; imported before create_all so metadata is populated
MODEL_MODULES = [
    "storefront.models.product",
    "storefront.models.user",
    "storefront.models.cart",
    "storefront.models.cart_item",
    "storefront.models.checkout",
    "storefront.models.order",
    "storefront.models.subscriber",
]


class Database:
    """
    Handle on the persistent store.

    Constructed once, opened at application startup and closed at shutdown.
    Sessions come from `SessionLocal`, which stays unbound until `open()`.
    """

    def __init__(self, url: str, timeout_seconds: float = 5.0):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.engine: Optional[Engine] = None
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False)

    def _engine_kwargs(self) -> dict:
        if self.url.startswith("sqlite"):
            # busy timeout bounds how long a writer waits on a locked database
            return {
                "connect_args": {
                    "check_same_thread": False,
                    "timeout": self.timeout_seconds,
                }
            }
        return {"pool_timeout": self.timeout_seconds, "pool_pre_ping": True}

    def open(self) -> Engine:
        if self.engine is None:
            self.engine = create_engine(
                self.url, future=True, echo=False, **self._engine_kwargs()
            )
            self.SessionLocal.configure(bind=self.engine)
            log.info("Opened database %s", self.engine.url.render_as_string(hide_password=True))
        return self.engine

    def close(self):
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            log.info("Closed database")

    def session(self) -> Session:
        self.open()
        return self.SessionLocal()


database = Database(settings.DATABASE_URL, timeout_seconds=settings.DB_TIMEOUT_SECONDS)


def init_db(db: Database = database, reset: bool = False):
    """
    Initialize DB schema.

    Behavior:
      - If reset is True or the RESET_DB env var is set to 1/true/yes, drop & recreate tables.
      - Otherwise, leave existing tables in place.
    """
    env_reset = os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")

    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    engine = db.open()
    if reset or env_reset:
        log.info("Resetting database tables")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
