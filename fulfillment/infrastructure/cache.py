import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

HEALTH_CHECK_KEY = "health:check"


def check_cache_connection():
    # Check if the cache is configured correctly
    if not settings.CACHES:
        logger.error("CACHES setting is not configured !!")
        raise ValueError("CACHES setting is not configured")

    # Round-trip a short-lived key to prove the backend answers
    try:
        cache.set(HEALTH_CHECK_KEY, "ok", 10)
        if cache.get(HEALTH_CHECK_KEY) != "ok":
            logger.error("Cache connection failed !!")
            raise ValueError("Cache round-trip returned a stale value")
        logger.info("Cache connection established")
    except ValueError:
        raise
    except Exception as e:
        logger.error(f"Cache connection error: {e}")
        raise ValueError(f"Cache connection error: {e}")


def get_cache_key_value(key):
    try:
        value = cache.get(key)
        if value is None:
            logger.debug(f"Cache miss for key: {key}")
        else:
            logger.debug(f"Cache hit for key: {key}")
        return value
    except Exception as e:
        logger.error(f"Cache get error for key: {key}, error: {e}")
        raise ValueError(f"Cache get error for key: {key}, error: {e}")


def set_cache_key(key, value, ttl=None):
    try:
        cache.set(key, value, ttl)
        logger.debug(f"Cache set for key: {key}")
    except Exception as e:
        logger.error(f"Cache set error for key: {key}, error: {e}")
        raise ValueError(f"Cache set error for key: {key}, error: {e}")


def delete_cache_key(key):
    try:
        cache.delete(key)
        logger.debug(f"Cache deleted for key: {key}")
    except Exception as e:
        logger.error(f"Cache delete error for key: {key}, error: {e}")
        raise ValueError(f"Cache delete error for key: {key}, error: {e}")
