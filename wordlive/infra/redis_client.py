from __future__ import annotations

import os

import redis

DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_SOCKET_TIMEOUT_MS = 500


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "").strip() or DEFAULT_REDIS_URL


def get_socket_timeout() -> float:
    raw = os.environ.get("REDIS_SOCKET_TIMEOUT_MS", "").strip()
    if not raw:
        return DEFAULT_SOCKET_TIMEOUT_MS / 1000
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"REDIS_SOCKET_TIMEOUT_MS must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"REDIS_SOCKET_TIMEOUT_MS must be positive, got {value}")
    return value / 1000


def create_redis(url: str | None = None) -> redis.Redis:
    # Publishing runs inside scheduler ticks, so an outage must fail fast.
    timeout = get_socket_timeout()
    # Stream fields are written and read back as str, never bytes.
    return redis.Redis.from_url(
        url or get_redis_url(),
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )
