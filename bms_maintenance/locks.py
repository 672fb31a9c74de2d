"""
Per-organization advisory lock for maintenance runs

Two overlapping runs for the same organization (a retry fired while the
first run is still in flight) would otherwise race on task and work order
creation. The lock is a Redis key with a TTL so a crashed run cannot hold
it forever.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import redis
from redis.exceptions import LockError

from .config import MAINTENANCE_LOCK_TTL_SECONDS
from .exceptions import StoreError
from .redis_client import get_redis_client

logger = logging.getLogger(__name__)


def lock_key(organization_id: str) -> str:
    return f"maintenance:run-lock:{organization_id}"


@contextmanager
def organization_run_lock(
    organization_id: str,
    client: Optional[redis.Redis] = None,
    ttl_seconds: int = MAINTENANCE_LOCK_TTL_SECONDS,
) -> Iterator[bool]:
    """
    Try to take the run lock without waiting.

    Yields True when this caller holds the lock, False when another run
    already does. The lock is released on exit only if it was acquired.
    Raises StoreError when Redis cannot be reached.
    """
    try:
        client = client or get_redis_client()
        lock = client.lock(lock_key(organization_id), timeout=ttl_seconds, blocking=False)
        acquired = lock.acquire(blocking=False)
    except redis.RedisError as e:
        logger.error(f"❌ Run lock unavailable for organization {organization_id}: {str(e)}")
        raise StoreError("Maintenance run lock unavailable", {"organization_id": organization_id}) from e

    if not acquired:
        logger.warning(f"⚠️ Maintenance run already in progress for organization {organization_id}")

    try:
        yield acquired
    finally:
        if acquired:
            try:
                lock.release()
            except LockError as e:
                # TTL expired before the run finished; another run may have started
                logger.warning(f"⚠️ Run lock for organization {organization_id} lost before release: {e}")
