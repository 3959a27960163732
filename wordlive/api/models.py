from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    # Live event payloads and UI clients speak camelCase.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(_WireModel):
    unique_id: str = Field(..., min_length=1)
    nickname: str = ""
    profile_picture_url: str = ""


class _InboundEvent(User):
    # Optional source sequence number; the receiver assigns one when absent.
    seq: int | None = Field(default=None, ge=0)

    @property
    def user(self) -> User:
        return User(unique_id=self.unique_id, nickname=self.nickname, profile_picture_url=self.profile_picture_url)


class ChatEvent(_InboundEvent):
    comment: str = ""


# Gift types reported by the live platform; type 1 gifts can be sent as a streak.
STREAKABLE_GIFT_TYPE = 1


class GiftEvent(_InboundEvent):
    gift_id: int | None = None
    gift_name: str = ""
    gift_type: int = 0
    diamond_count: int = Field(0, ge=0)
    repeat_count: int = Field(1, ge=0)
    repeat_end: bool = False

    @property
    def value(self) -> int:
        return self.diamond_count * self.repeat_count

    @property
    def is_terminal(self) -> bool:
        """False while a streak is still running; only terminal gifts count toward totals."""
        return not (self.gift_type == STREAKABLE_GIFT_TYPE and not self.repeat_end)


class SocialEvent(_InboundEvent):
    display_type: str = ""

    @property
    def is_follow(self) -> bool:
        return "follow" in self.display_type


class LikeEvent(_InboundEvent):
    like_count: int = 0
    total_like_count: int = 0


class RoomUserEvent(_WireModel):
    viewer_count: int = Field(0, ge=0)
    seq: int | None = Field(default=None, ge=0)


class GamePhase(StrEnum):
    loading = "loading"
    preparing = "preparing"
    active = "active"
    round_over = "round_over"


class TileStatus(StrEnum):
    absent = "absent"
    present = "present"
    correct = "correct"


class RoundOutcome(StrEnum):
    guessed = "guessed"
    gift_reveal = "gift_reveal"
    instant_win = "instant_win"
    forced_reveal = "forced_reveal"
    timeout = "timeout"


class NoticeSeverity(StrEnum):
    info = "info"
    error = "error"


class GuessRecord(_WireModel):
    guess: str
    user: User
    statuses: list[TileStatus]


class LeaderboardEntry(_WireModel):
    user: User
    wins: int = Field(..., ge=1)


class Notice(_WireModel):
    content: str
    severity: NoticeSeverity = NoticeSeverity.info


class GiftSpotlight(_WireModel):
    user: User
    gift_name: str
    diamond_count: int
    repeat_count: int


class RoundSummary(_WireModel):
    title: str
    word: str
    definitions: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    winner: User | None = None


class RoundSnapshot(_WireModel):
    """Everything a presenter needs to draw the current round."""

    round_id: int
    phase: GamePhase
    countdown: int | None = None
    guesses: list[GuessRecord] = Field(default_factory=list)
    best_guess: GuessRecord | None = None
    recent_guesses: list[GuessRecord] = Field(default_factory=list)
    game_message: str = ""
    outcome: RoundOutcome | None = None

    # Only populated once the reveal delay has elapsed.
    summary: RoundSummary | None = None

    leaderboard: list[LeaderboardEntry] = Field(default_factory=list)
    notice: Notice | None = None
    rank_overlay_visible: bool = False
    spotlight: GiftSpotlight | None = None
    instant_winner: User | None = None

    participant_count: int = 0
    follower_count: int = 0
    total_diamonds: int = 0
    viewer_count: int | None = None
    latest_like: LikeEvent | None = None
    queue_depth: int = 0
    dictionary_error: str | None = None


class EventAcceptedResponse(_WireModel):
    accepted: bool
    seq: int | None = None


class RoundActionResponse(_WireModel):
    applied: bool
    phase: GamePhase


class LeaderboardResponse(_WireModel):
    entries: list[LeaderboardEntry]
