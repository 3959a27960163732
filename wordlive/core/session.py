from __future__ import annotations

from dataclasses import dataclass, field

from wordlive.api.models import (
    GiftSpotlight,
    GuessRecord,
    LikeEvent,
    Notice,
    RoundOutcome,
    RoundSummary,
    User,
)
from wordlive.core.best_guess import GuessSplit
from wordlive.core.gifts import DiamondTally
from wordlive.core.ingest import EventIngestQueue, SequenceTracker
from wordlive.core.leaderboard import LeaderboardAccumulator
from wordlive.core.participants import ParticipantGate


@dataclass(slots=True)
class RoundState:
    """One round, from word selection to reveal. Replaced wholesale on restart."""

    round_id: int
    solution: str = ""
    guesses: list[GuessRecord] = field(default_factory=list)
    scored_guesses: set[str] = field(default_factory=set)
    split: GuessSplit = field(default_factory=GuessSplit)

    countdown: int | None = None

    # Set on the first round-ending trigger; later triggers are no-ops.
    ending: bool = False
    outcome: RoundOutcome | None = None
    winner: User | None = None
    title: str = ""
    game_message: str = ""
    summary: RoundSummary | None = None
    summary_visible: bool = False

    dictionary_attempts: int = 0
    dictionary_error: str | None = None


@dataclass(slots=True)
class SessionState:
    """State that outlives a single round (until the session restarts)."""

    participants: ParticipantGate = field(default_factory=ParticipantGate)
    leaderboard: LeaderboardAccumulator = field(default_factory=LeaderboardAccumulator)
    queue: EventIngestQueue = field(default_factory=EventIngestQueue)
    gift_sequence: SequenceTracker = field(default_factory=SequenceTracker)
    social_sequence: SequenceTracker = field(default_factory=SequenceTracker)
    like_sequence: SequenceTracker = field(default_factory=SequenceTracker)
    room_sequence: SequenceTracker = field(default_factory=SequenceTracker)

    diamonds: DiamondTally = field(default_factory=DiamondTally)
    followers: set[str] = field(default_factory=set)
    latest_like: LikeEvent | None = None
    viewer_count: int | None = None

    notice: Notice | None = None
    rank_overlay_visible: bool = False
    spotlight: GiftSpotlight | None = None
    instant_winner: User | None = None
