import hashlib
import os
import tempfile
from contextlib import ExitStack, contextmanager
from typing import Iterator, Optional

from filelock import FileLock, Timeout

from storefront.config import settings
from storefront.errors import TransientStoreError

LOCKS_DIR = os.path.join(tempfile.gettempdir(), "storefront_locks")


def cart_lock_key(user_id: Optional[int] = None, guest_id: Optional[str] = None) -> Optional[str]:
    if user_id is not None:
        return f"user:{user_id}"
    if guest_id:
        return f"guest:{guest_id}"
    return None


def _lock_path(key: str) -> str:
    # guest ids come from clients, so never use them as a file name directly
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
    return os.path.join(LOCKS_DIR, f"cart_{digest}.lock")


@contextmanager
def cart_locks(*keys: Optional[str], timeout: Optional[float] = None) -> Iterator[None]:
    """
    Hold the per-cart locks for every given identity key.

    Locks are taken in sorted order so two merges touching the same pair of
    carts cannot deadlock. Giving up after `timeout` raises TransientStoreError.
    """
    timeout = settings.CART_LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    os.makedirs(LOCKS_DIR, exist_ok=True)
    with ExitStack() as stack:
        for key in sorted({k for k in keys if k}):
            lock = FileLock(_lock_path(key))
            try:
                stack.enter_context(lock.acquire(timeout=timeout))
            except Timeout:
                raise TransientStoreError("Cart is busy, please retry")
        yield
