from __future__ import annotations

from functools import lru_cache

import redis


@lru_cache(maxsize=8)
def _build_client(redis_url: str, timeout_seconds: float) -> redis.Redis:
    return redis.Redis.from_url(
        redis_url,
        socket_connect_timeout=timeout_seconds,
        socket_timeout=timeout_seconds,
    )


def get_redis_client(redis_url: str, timeout_seconds: float = 1.0) -> redis.Redis:
    return _build_client(redis_url, timeout_seconds)


def ping_redis(redis_url: str, timeout_seconds: float = 1.0) -> bool:
    try:
        return bool(get_redis_client(redis_url, timeout_seconds).ping())
    except Exception:
        return False
