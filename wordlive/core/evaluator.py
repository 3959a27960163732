from __future__ import annotations

import re

from wordlive.api.models import TileStatus

_LETTERS_ONLY = re.compile(r"^[A-Z]+$")


def normalize_guess(text: str) -> str:
    return text.strip().upper()


def is_guess_shape(text: str, *, word_length: int) -> bool:
    """True when `text` (already normalized) could be a guess: exact length, A-Z only."""

    return len(text) == word_length and _LETTERS_ONLY.match(text) is not None


def evaluate_guess(guess: str, solution: str) -> list[TileStatus]:
    """Score `guess` against `solution`, tile by tile.

    Two passes over a working copy of the solution letters: exact matches are
    consumed first, then remaining letters are matched left to right. A letter
    is therefore never reported present/correct more times than it occurs in
    the solution.
    """

    if len(guess) != len(solution):
        raise ValueError(f"Guess length {len(guess)} does not match solution length {len(solution)}")

    if guess == solution:
        return [TileStatus.correct] * len(solution)

    remaining: list[str | None] = list(solution)
    statuses = [TileStatus.absent] * len(solution)

    for i, letter in enumerate(guess):
        if remaining[i] == letter:
            statuses[i] = TileStatus.correct
            remaining[i] = None

    for i, letter in enumerate(guess):
        if statuses[i] == TileStatus.correct:
            continue
        try:
            j = remaining.index(letter)
        except ValueError:
            continue
        statuses[i] = TileStatus.present
        remaining[j] = None

    return statuses
