from __future__ import annotations

import itertools
from dataclasses import dataclass

from wordlive.api.models import LeaderboardEntry, User


@dataclass(slots=True)
class _Standing:
    user: User
    wins: int
    # Sequence number of the win that brought this user to `wins`.
    reached_at: int


class LeaderboardAccumulator:
    """Cumulative wins per viewer for the lifetime of the session.

    Entries are ordered by wins (descending); among equal win counts, whoever
    reached that count first ranks higher.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, _Standing] = {}
        self._win_seq = itertools.count(1)
        self._sorted: list[_Standing] = []

    def record_win(self, user: User) -> LeaderboardEntry:
        seq = next(self._win_seq)
        standing = self._by_id.get(user.unique_id)
        if standing is None:
            standing = _Standing(user=user, wins=1, reached_at=seq)
            self._by_id[user.unique_id] = standing
        else:
            standing.wins += 1
            standing.user = user
            standing.reached_at = seq

        self._sorted = sorted(self._by_id.values(), key=lambda s: (-s.wins, s.reached_at))
        return LeaderboardEntry(user=standing.user, wins=standing.wins)

    def wins_for(self, unique_id: str) -> int:
        standing = self._by_id.get(unique_id)
        return standing.wins if standing else 0

    def entries(self) -> list[LeaderboardEntry]:
        return [LeaderboardEntry(user=s.user, wins=s.wins) for s in self._sorted]

    def __len__(self) -> int:
        return len(self._by_id)
