from __future__ import annotations

from typing import Literal

from wordlive.api.models import User

GrantReason = Literal["follow", "gift", "comment"]


def acknowledgement_for(user: User, reason: GrantReason) -> str:
    if reason == "follow":
        return f"{user.nickname}, thanks for the follow! You can guess now."
    if reason == "gift":
        return f"{user.nickname}, thanks for the gift! You can guess now."
    return f"Thanks for the support, {user.nickname}! Go ahead and guess."


def ineligible_notice_for(user: User, *, participation_phrase: str) -> str:
    return f"{user.nickname}, send a gift, follow, or comment '{participation_phrase}' first to join the guessing!"


class ParticipantGate:
    """Viewers allowed to guess in this session.

    Entries are only ever added; a session restart builds a new gate.
    """

    def __init__(self) -> None:
        self._registry: set[str] = set()

    def is_eligible(self, user: User) -> bool:
        return user.unique_id in self._registry

    def grant(self, user: User) -> bool:
        """Register `user`. Returns True only the first time."""

        if user.unique_id in self._registry:
            return False
        self._registry.add(user.unique_id)
        return True

    def __len__(self) -> int:
        return len(self._registry)
