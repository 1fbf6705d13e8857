import logging
from contextlib import contextmanager

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)


@contextmanager
def single_run_lock(lock_key, timeout=None):
    """
    Cache-backed lock so only one worker runs a given sweep at a time.

    Yields True when this caller holds the lock, False when another run is
    already in progress.
    """
    if timeout is None:
        timeout = getattr(settings, "SCHEDULER_LOCK_TIMEOUT_SECONDS", 900)

    key = f"lock:{lock_key}"
    lock_acquired = cache.add(key, "locked", timeout)
    if not lock_acquired:
        logger.info(f"Skipping {lock_key}: another run holds the lock")
    try:
        yield lock_acquired
    finally:
        if lock_acquired:
            cache.delete(key)
