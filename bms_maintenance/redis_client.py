"""
Redis connection shared by the advisory locks and the arq worker
"""

import logging
from typing import Optional

import redis

from .config import REDIS_DB, REDIS_HOST, REDIS_PASSWORD, REDIS_PORT, REDIS_SSL, REDIS_URL

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client
    Supports both a connection URL and individual host settings
    """
    global redis_client

    if redis_client is None:
        logger.info("🔄 Initializing Redis connection...")

        try:
            if REDIS_URL:
                redis_client = redis.from_url(
                    REDIS_URL,
                    decode_responses=True,
                    socket_connect_timeout=15,
                    socket_timeout=30,
                    retry_on_timeout=True,
                    health_check_interval=30,
                )
            else:
                redis_client = redis.Redis(
                    host=REDIS_HOST,
                    port=REDIS_PORT,
                    password=REDIS_PASSWORD,
                    db=REDIS_DB,
                    ssl=REDIS_SSL,
                    decode_responses=True,
                    socket_connect_timeout=15,
                    socket_timeout=30,
                    retry_on_timeout=True,
                    health_check_interval=30,
                )
            # Test connection
            redis_client.ping()
            logger.info("Redis connected successfully")
        except Exception as e:
            logger.error(f"❌ Failed to connect to Redis: {str(e)}")
            redis_client = None
            raise

    return redis_client
