from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "PHASE_CHANGED",
    "ROUND_STARTED",
    "COUNTDOWN_TICK",
    "GUESS_SCORED",
    "GUESS_REJECTED",
    "PARTICIPANT_JOINED",
    "ROUND_ENDED",
    "ROUND_SUMMARY",
    "LEADERBOARD_UPDATED",
    "NOTICE",
    "RANK_OVERLAY",
    "GIFT_SPOTLIGHT",
    "DICTIONARY_ERROR",
]


@dataclass(frozen=True, slots=True)
class RoundEvent:
    type: EventType
    round_id: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, round_id: int, payload: dict[str, Any]) -> "RoundEvent":
        return RoundEvent(type=type, round_id=round_id, payload=payload, ts=datetime.now(timezone.utc))

    def as_message(self) -> dict[str, Any]:
        return {
            "type": "round_updated",
            "event": self.type,
            "round_id": self.round_id,
            "payload": self.payload,
            "ts": self.ts.isoformat(),
        }
