from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, cast

import redis

from wordlive.core.events import EventType, RoundEvent

logger = logging.getLogger(__name__)

ROUND_EVENTS_STREAM = "wordlive:round_events"

# Ticks fire every second for the whole round; subscribers derive them from ROUND_STARTED.
UNPUBLISHED_EVENTS: frozenset[EventType] = frozenset({"COUNTDOWN_TICK"})


def event_fields(event: RoundEvent) -> dict[str, str]:
    """Flatten a round event into string-only stream fields."""

    return {
        "type": event.type,
        "round_id": str(event.round_id),
        "ts": event.ts.isoformat(),
        "payload": json.dumps(event.payload, separators=(",", ":"), ensure_ascii=False),
    }


class RoundEventStream:
    """Appends round events to a Redis stream for out-of-process consumers.

    Used as a controller listener: publishing failures are logged and swallowed so a
    Redis outage never interrupts the round itself.
    """

    def __init__(self, *, r: redis.Redis, key: str = ROUND_EVENTS_STREAM, maxlen: int | None = 10_000) -> None:
        self._r = r
        self.key = key
        self._maxlen = maxlen

    def publish(self, event: RoundEvent) -> str | None:
        if event.type in UNPUBLISHED_EVENTS:
            return None
        try:
            stream_id = self._r.xadd(self.key, event_fields(event), maxlen=self._maxlen, approximate=True)
        except redis.RedisError as e:
            logger.warning("Could not publish %s for round %d to %s: %s", event.type, event.round_id, self.key, e)
            return None
        return cast(str, stream_id)

    def __call__(self, event: RoundEvent) -> None:
        self.publish(event)


def read_round_events(
    *,
    r: redis.Redis,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    key: str = ROUND_EVENTS_STREAM,
) -> list[dict[str, Any]]:
    entries = r.xrange(key, min=start, max=end, count=count)
    return [_decode_entry(mid, fields) for mid, fields in entries]


def _decode_entry(mid: str, fields: Mapping[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {"id": mid, **fields}
    raw = fields.get("payload")
    if raw:
        try:
            out["payload"] = json.loads(raw)
        except json.JSONDecodeError:
            # Leave foreign entries readable as-is.
            pass
    return out
