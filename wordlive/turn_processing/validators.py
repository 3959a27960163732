from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from wordlive.api.models import GamePhase, Notice, NoticeSeverity, User
from wordlive.core.participants import ParticipantGate, ineligible_notice_for
from wordlive.core.session import RoundState
from wordlive.dictionary.registry import WordDictionary


class GuessRejected(ValueError):
    """A guess that must not be scored.

    `notice` is shown to the audience when set; otherwise the guess is dropped silently.
    """

    def __init__(self, reason: str, *, notice: Notice | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.notice = notice


@dataclass(frozen=True, slots=True)
class GuessContext:
    """Inputs available to validators. `guess` is already uppercased."""

    user: User
    guess: str


@dataclass(frozen=True, slots=True)
class GuessEnvironment:
    phase: GamePhase
    round: RoundState
    participants: ParticipantGate
    dictionary: WordDictionary
    participation_phrase: str


class GuessValidator(ABC):
    """A small, composable check on an incoming guess."""

    @abstractmethod
    def validate(self, *, ctx: GuessContext, env: GuessEnvironment) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class EligibilityValidator(GuessValidator):
    def validate(self, *, ctx: GuessContext, env: GuessEnvironment) -> None:
        if not env.participants.is_eligible(ctx.user):
            content = ineligible_notice_for(ctx.user, participation_phrase=env.participation_phrase)
            raise GuessRejected("ineligible", notice=Notice(content=content, severity=NoticeSeverity.info))


@dataclass(frozen=True, slots=True)
class OpenRoundValidator(GuessValidator):
    """Only an active, not-yet-ending round with a drawn word takes guesses."""

    def validate(self, *, ctx: GuessContext, env: GuessEnvironment) -> None:
        if env.phase != GamePhase.active or env.round.ending or not env.round.solution:
            raise GuessRejected("round_closed")


@dataclass(frozen=True, slots=True)
class DuplicateGuessValidator(GuessValidator):
    def validate(self, *, ctx: GuessContext, env: GuessEnvironment) -> None:
        if ctx.guess in env.round.scored_guesses:
            raise GuessRejected("duplicate")


@dataclass(frozen=True, slots=True)
class DictionaryWordValidator(GuessValidator):
    def validate(self, *, ctx: GuessContext, env: GuessEnvironment) -> None:
        if not env.dictionary.is_valid_word(ctx.guess):
            content = f"Word {ctx.guess} is not valid! (from {ctx.user.nickname})"
            raise GuessRejected("invalid_word", notice=Notice(content=content, severity=NoticeSeverity.error))


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[GuessValidator, ...]

    def validate(self, *, ctx: GuessContext, env: GuessEnvironment) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, env=env)


# Order matters: the eligibility notice is shown even between rounds, and a
# repeated word is dropped before the dictionary is consulted.
DEFAULT_GUESS_PIPELINE = ValidatorPipeline(
    validators=(
        EligibilityValidator(),
        OpenRoundValidator(),
        DuplicateGuessValidator(),
        DictionaryWordValidator(),
    )
)
