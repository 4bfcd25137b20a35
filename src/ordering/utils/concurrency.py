"""Serialized command processing for carts and coupons.

Cart read-modify-write cycles are serialized per owner and coupon
redemptions per coupon code. The locks are held around the whole command,
unit-of-work commit included, so a second command on the same cart or
coupon always starts from committed state. Locks are process-local; across
processes the aggregate version check of the repository rejects stale
writes, and such conflicts are retried a bounded number of times.
"""

import threading
import weakref
from contextlib import ExitStack, contextmanager

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from ordering.errors import ConflictError

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3


def cart_key(owner_id):
    return f"cart:{owner_id}"


def coupon_key(code):
    return f"coupon:{str(code).strip().upper()}" if code else None


def order_key(order_id):
    return f"order:{order_id}"


class _KeyLock:
    __slots__ = ("_lock", "__weakref__")

    def __init__(self):
        self._lock = threading.RLock()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info):
        self._lock.release()


class KeyedLocks:
    """Registry of one re-entrant lock per key, released from memory once unused."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = weakref.WeakValueDictionary()

    def lock_for(self, key) -> _KeyLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = _KeyLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *keys):
        """Hold the locks of all ``keys``, always acquired in sorted order."""
        locks = [self.lock_for(key) for key in sorted({key for key in keys if key})]
        with ExitStack() as stack:
            for lock in locks:
                stack.enter_context(lock)
            yield


_locks = KeyedLocks()


def process_serialized(command, *keys, attempts=MAX_ATTEMPTS):
    """Process ``command`` synchronously while holding the locks for ``keys``."""
    with _locks.hold(*keys):
        for attempt in range(1, attempts + 1):
            try:
                return current_domain.process(command, asynchronous=False)
            except ExpectedVersionError as exc:
                logger.warning(
                    "Concurrent modification, retrying",
                    command=command.__class__.__name__,
                    attempt=attempt,
                    error=str(exc),
                )
                conflict = exc

    raise ConflictError(f"{command.__class__.__name__} conflicted with a concurrent update") from conflict
