from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from wordlive.api.models import GiftEvent


class GiftEffect(StrEnum):
    none = "none"
    reveal = "reveal"
    instant_win = "instant_win"


@dataclass(frozen=True, slots=True)
class GiftRuleEngine:
    """Maps a gift's value (diamonds x repeat count) to a round-ending effect.

    The thresholds are disjoint: exactly `reveal_value` unlocks the word for the
    gifter, anything at or above `instant_win_value` is an instant win.
    """

    reveal_value: int = 10
    instant_win_value: int = 30

    def __post_init__(self) -> None:
        if self.instant_win_value <= self.reveal_value:
            raise ValueError("instant_win_value must be greater than reveal_value")

    def effect_for(self, gift: GiftEvent) -> GiftEffect:
        value = gift.value
        if value == self.reveal_value:
            return GiftEffect.reveal
        if value >= self.instant_win_value:
            return GiftEffect.instant_win
        return GiftEffect.none


@dataclass(slots=True)
class DiamondTally:
    total: int = 0

    def add(self, gift: GiftEvent) -> int:
        """Count a gift once its streak has closed. Returns the amount added."""

        if not gift.is_terminal:
            return 0
        self.total += gift.value
        return gift.value
