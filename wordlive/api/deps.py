from __future__ import annotations

from collections.abc import Generator

import redis

from wordlive.controller import GamePhaseController
from wordlive.infra.redis_client import create_redis
from wordlive.runtime import get_controller as _get_runtime_controller


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        try:
            client.close()
        except Exception:
            # Some redis client versions don't require explicit close.
            pass


def get_controller() -> GamePhaseController:
    return _get_runtime_controller()
