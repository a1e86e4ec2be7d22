import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from storefront.config import settings
from storefront.errors import ConflictError, TransientStoreError

log = logging.getLogger("storefront.transactions")

T = TypeVar("T")


@contextmanager
def smart_transaction(session: Session) -> Iterator:
    """
    Context manager that begins a transaction on the given Session.
    If a transaction is already active, start a nested SAVEPOINT (begin_nested).
    Otherwise start a normal transaction (begin).
    Usage:
        with smart_transaction(db):
            ... DB work ...
    """
    if session.in_transaction():
        cm = session.begin_nested()
    else:
        cm = session.begin()
    with cm:
        yield


def run_with_retry(
    session: Session, fn: Callable[[], T], attempts: Optional[int] = None
) -> T:
    """
    Run `fn` in its own transaction and commit.

    A StaleDataError (another writer bumped the row version) or an
    IntegrityError (a concurrent insert won a unique key) rolls the session
    back and runs `fn` again against fresh state. Store timeouts surface as
    TransientStoreError.
    """
    attempts = attempts or settings.CART_RETRY_ATTEMPTS
    for attempt in range(1, attempts + 1):
        # start from a clean session so every attempt re-reads current rows
        session.rollback()
        try:
            with smart_transaction(session):
                result = fn()
                session.flush()
            session.commit()
            return result
        except (StaleDataError, IntegrityError) as exc:
            session.rollback()
            log.info("write conflict on attempt %d/%d: %s", attempt, attempts, exc)
        except OperationalError as exc:
            session.rollback()
            raise TransientStoreError("Store is busy, please retry") from exc
    raise ConflictError("The cart was modified concurrently, please retry")
