from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from wordlive.api.models import GuessRecord, TileStatus

_TILE_POINTS = {
    TileStatus.correct: 2,
    TileStatus.present: 1,
    TileStatus.absent: 0,
}


def score_statuses(statuses: Sequence[TileStatus]) -> int:
    return sum(_TILE_POINTS[s] for s in statuses)


@dataclass(frozen=True, slots=True)
class GuessSplit:
    best: GuessRecord | None = None
    recent: list[GuessRecord] = field(default_factory=list)


def split_best_guess(history: Sequence[GuessRecord]) -> GuessSplit:
    """Pick the featured guess and order the rest newest-first.

    Ties go to the newer guess.
    """

    if not history:
        return GuessSplit()

    best_idx = 0
    best_score = score_statuses(history[0].statuses)
    for idx in range(1, len(history)):
        score = score_statuses(history[idx].statuses)
        if score >= best_score:
            best_idx, best_score = idx, score

    recent = [history[idx] for idx in range(len(history) - 1, -1, -1) if idx != best_idx]
    return GuessSplit(best=history[best_idx], recent=recent)
