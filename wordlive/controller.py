from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import Any

from wordlive.api.models import (
    ChatEvent,
    GamePhase,
    GiftEvent,
    GiftSpotlight,
    GuessRecord,
    LikeEvent,
    Notice,
    NoticeSeverity,
    RoomUserEvent,
    RoundOutcome,
    RoundSnapshot,
    RoundSummary,
    SocialEvent,
    TileStatus,
    User,
)
from wordlive.config import GameSettings
from wordlive.core.best_guess import split_best_guess
from wordlive.core.evaluator import evaluate_guess, is_guess_shape, normalize_guess
from wordlive.core.events import EventType, RoundEvent
from wordlive.core.gifts import GiftEffect, GiftRuleEngine
from wordlive.core.participants import GrantReason, acknowledgement_for
from wordlive.core.session import RoundState, SessionState
from wordlive.dictionary.registry import DictionaryLoadError, WordDictionary
from wordlive.fsm import RoundFSM
from wordlive.scheduler import PHASE_GROUP, SESSION_GROUP, Scheduler
from wordlive.turn_processing.validators import (
    DEFAULT_GUESS_PIPELINE,
    GuessContext,
    GuessEnvironment,
    GuessRejected,
    ValidatorPipeline,
)

logger = logging.getLogger(__name__)

RoundEventListener = Callable[[RoundEvent], None]

ROUND_TITLES: dict[RoundOutcome, str] = {
    RoundOutcome.guessed: "🎉 WINNER! 🎉",
    RoundOutcome.gift_reveal: "WORD UNLOCKED!",
    RoundOutcome.instant_win: "🏆 SULTAN WINS! 🏆",
    RoundOutcome.forced_reveal: "Word Revealed",
    RoundOutcome.timeout: "TIME'S UP!",
}

DEFINITION_NOT_FOUND = "Definition not found."

# Phase-group tasks.
PREPARE_TASK = "prepare"
COUNTDOWN_TASK = "countdown"
REVEAL_TASK = "reveal"
DISPLAY_TASK = "display"
TEARDOWN_TASK = "teardown"

# Session-group tasks.
INGEST_TASK = "ingest"
NOTICE_TASK = "notice_expiry"
RANK_OVERLAY_TASK = "rank_overlay_expiry"
SPOTLIGHT_TASK = "spotlight_expiry"


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


class GamePhaseController:
    """Owns the session and the current round, and drives both from timers.

    All mutation happens inside scheduler callbacks or the `submit_*` entry points,
    which run to completion on a single thread.
    """

    def __init__(
        self,
        *,
        dictionary: WordDictionary,
        scheduler: Scheduler,
        settings: GameSettings | None = None,
        pipeline: ValidatorPipeline | None = None,
    ) -> None:
        self.settings = settings or GameSettings()
        self._dictionary = dictionary
        self._scheduler = scheduler
        self._pipeline = pipeline or DEFAULT_GUESS_PIPELINE
        self._gift_rules = GiftRuleEngine(
            reveal_value=self.settings.reveal_gift_value,
            instant_win_value=self.settings.instant_win_gift_value,
        )
        self._fsm = RoundFSM()
        self._listeners: list[RoundEventListener] = []
        self._started = False

        self.session = SessionState()
        self.round = RoundState(round_id=0)
        self.phase_history: list[GamePhase] = [self._fsm.current_phase]

    @property
    def phase(self) -> GamePhase:
        return self._fsm.current_phase

    @property
    def started(self) -> bool:
        return self._started

    def add_listener(self, listener: RoundEventListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._started:
            raise ValueError("Session already started")
        self._started = True
        logger.info("Session starting")
        self._scheduler.call_every(INGEST_TASK, self.settings.ingest_tick_ms, self._on_ingest_tick, group=SESSION_GROUP)
        self._enter_preparing("begin")

    def stop(self) -> None:
        cancelled = self._scheduler.cancel_all()
        if self.phase != GamePhase.loading:
            source = self._transition("reload")
            self._announce(source)
        self._started = False
        logger.info("Session stopped (%d pending tasks cancelled)", len(cancelled))

    def force_restart(self) -> None:
        if not self._started:
            raise ValueError("Session not started")
        logger.info("Round %d: forced restart from %s", self.round.round_id, self.phase.value)
        source = self._transition("reload")
        self._announce(source)
        self._enter_preparing("begin")

    def force_reveal(self) -> bool:
        if self.phase != GamePhase.active or self.round.ending or not self.round.solution:
            return False
        word = self.round.solution
        return self._end_round(RoundOutcome.forced_reveal, winner=None, message=f"Word revealed! Answer: {word}")

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def submit_chat(self, event: ChatEvent) -> int | None:
        seq = self.session.queue.push(event)
        if seq is None:
            logger.debug("Dropping redelivered chat seq=%s from %s", event.seq, event.unique_id)
            return None

        # Commands bypass the rate-limited queue; the comment is still queued and
        # filtered out by the consumer.
        if event.comment.strip().lower() == self.settings.rank_command:
            self._show_rank_overlay()
        return seq

    def submit_gift(self, event: GiftEvent) -> int | None:
        seq = self.session.gift_sequence.admit(event.seq)
        if seq is None:
            logger.debug("Dropping redelivered gift seq=%s from %s", event.seq, event.unique_id)
            return None

        self._grant(event.user, "gift")
        self.session.diamonds.add(event)
        self._show_spotlight(event)
        self._apply_gift_rules(event)
        return seq

    def submit_social(self, event: SocialEvent) -> int | None:
        seq = self.session.social_sequence.admit(event.seq)
        if seq is None:
            return None
        if event.is_follow:
            self.session.followers.add(event.unique_id)
            self._grant(event.user, "follow")
        return seq

    def submit_like(self, event: LikeEvent) -> int | None:
        seq = self.session.like_sequence.admit(event.seq)
        if seq is None:
            return None
        # Late arrivals never overwrite newer stats.
        if seq == self.session.like_sequence.last:
            self.session.latest_like = event
        return seq

    def submit_room_user(self, event: RoomUserEvent) -> int | None:
        seq = self.session.room_sequence.admit(event.seq)
        if seq is None:
            return None
        if seq == self.session.room_sequence.last:
            self.session.viewer_count = event.viewer_count
        return seq

    # ------------------------------------------------------------------
    # Outbound view
    # ------------------------------------------------------------------

    def snapshot(self) -> RoundSnapshot:
        r = self.round
        s = self.session
        return RoundSnapshot(
            round_id=r.round_id,
            phase=self.phase,
            countdown=r.countdown,
            guesses=list(r.guesses),
            best_guess=r.split.best,
            recent_guesses=list(r.split.recent),
            game_message=r.game_message,
            outcome=r.outcome,
            summary=r.summary if r.summary_visible else None,
            leaderboard=s.leaderboard.entries(),
            notice=s.notice,
            rank_overlay_visible=s.rank_overlay_visible,
            spotlight=s.spotlight,
            instant_winner=s.instant_winner,
            participant_count=len(s.participants),
            follower_count=len(s.followers),
            total_diamonds=s.diamonds.total,
            viewer_count=s.viewer_count,
            latest_like=s.latest_like,
            queue_depth=len(s.queue),
            dictionary_error=r.dictionary_error,
        )

    # ------------------------------------------------------------------
    # Phase machinery
    # ------------------------------------------------------------------

    def _transition(self, event: str) -> GamePhase:
        """Move the FSM and cancel everything the previous phase scheduled."""

        source = self.phase
        self._fsm.send(event)
        self._scheduler.cancel_group(PHASE_GROUP)
        return source

    def _announce(self, source: GamePhase) -> None:
        target = self.phase
        self.phase_history.append(target)
        logger.info("Round %d: %s -> %s", self.round.round_id, source.value, target.value)
        self._emit("PHASE_CHANGED", {"from": source.value, "to": target.value})

    def _is_current(self, round_id: int, phase: GamePhase) -> bool:
        return self.round.round_id == round_id and self.phase == phase

    def _enter_preparing(self, event: str) -> None:
        source = self._transition(event)
        dropped = self.session.queue.clear()
        if dropped:
            logger.debug("Discarded %d queued chat events", dropped)
        self.round = RoundState(round_id=self.round.round_id + 1)
        self._announce(source)
        self._scheduler.call_later(PREPARE_TASK, self.settings.prepare_ms, partial(self._draw_word, self.round.round_id))

    async def _draw_word(self, round_id: int) -> None:
        if not self._is_current(round_id, GamePhase.preparing):
            logger.info("Round %d: stale prepare timer ignored", round_id)
            return

        self.round.dictionary_attempts += 1
        attempt = self.round.dictionary_attempts
        try:
            await self._dictionary.initialize()
            if not self._is_current(round_id, GamePhase.preparing):
                logger.info("Round %d: round replaced while dictionary loaded; aborting", round_id)
                return
            word = normalize_guess(self._dictionary.get_random_word(self.settings.word_length))
            if not is_guess_shape(word, word_length=self.settings.word_length):
                raise DictionaryLoadError(f"Dictionary returned an unusable word {word!r}")
        except Exception as e:
            # The dictionary is an external service: any failure is retried, never fatal.
            self._on_dictionary_failure(round_id, attempt, e)
            return

        self.session.instant_winner = None
        self.round.solution = word
        source = self._transition("activate")
        self.round.countdown = self.settings.round_duration_sec
        self._scheduler.call_every(COUNTDOWN_TASK, self.settings.countdown_tick_ms, self._on_countdown_tick)
        self._announce(source)
        logger.debug("Round %d: solution drawn (%s)", round_id, word)
        self._emit(
            "ROUND_STARTED",
            {"countdown": self.round.countdown, "word_length": self.settings.word_length},
        )

    def _on_dictionary_failure(self, round_id: int, attempt: int, error: Exception) -> None:
        if not self._is_current(round_id, GamePhase.preparing):
            return

        max_attempts = self.settings.dictionary_max_attempts
        logger.warning("Round %d: dictionary unavailable (attempt %d/%d): %s", round_id, attempt, max_attempts, error)
        if attempt < max_attempts:
            self._show_notice(
                Notice(content=f"Word list unavailable, retrying ({attempt}/{max_attempts})...", severity=NoticeSeverity.error)
            )
            self._scheduler.call_later(PREPARE_TASK, self.settings.dictionary_retry_ms, partial(self._draw_word, round_id))
            return

        self.round.dictionary_error = str(error) or error.__class__.__name__
        logger.error("Round %d: giving up on the dictionary after %d attempts", round_id, attempt)
        self._show_notice(
            Notice(content="Word list unavailable. Restart the round to try again.", severity=NoticeSeverity.error)
        )
        self._emit("DICTIONARY_ERROR", {"error": self.round.dictionary_error, "attempts": attempt})

    def _on_countdown_tick(self) -> None:
        if self.phase != GamePhase.active or self.round.ending or self.round.countdown is None:
            return

        self.round.countdown -= 1
        self._emit("COUNTDOWN_TICK", {"countdown": self.round.countdown})
        if self.round.countdown <= 0:
            word = self.round.solution
            self._end_round(RoundOutcome.timeout, winner=None, message=f"TIME'S UP! The correct word was {word}")

    def _end_round(self, outcome: RoundOutcome, *, winner: User | None, message: str) -> bool:
        """Close the round exactly once; later triggers in the same round are no-ops."""

        if self.round.ending:
            logger.debug("Round %d: ignoring %s, round already ending", self.round.round_id, outcome.value)
            return False
        self.round.ending = True

        source = self._transition("finish")
        r = self.round
        r.countdown = None
        r.outcome = outcome
        r.winner = winner
        r.title = ROUND_TITLES[outcome]
        r.game_message = message
        self._announce(source)

        logger.info(
            "Round %d over: %s (winner=%s)",
            r.round_id,
            outcome.value,
            winner.unique_id if winner else None,
        )
        self._emit(
            "ROUND_ENDED",
            {
                "outcome": outcome.value,
                "message": message,
                "winner": _dump(winner) if winner else None,
            },
        )

        if winner is not None:
            self.session.leaderboard.record_win(winner)
            self._emit("LEADERBOARD_UPDATED", {"entries": [_dump(e) for e in self.session.leaderboard.entries()]})

        self._scheduler.call_later(REVEAL_TASK, self.settings.reveal_delay_ms, partial(self._reveal_summary, r.round_id))
        return True

    def _reveal_summary(self, round_id: int) -> None:
        if not self._is_current(round_id, GamePhase.round_over):
            return

        r = self.round
        try:
            definition = self._dictionary.get_word_definition(r.solution)
        except Exception:
            logger.warning("Round %d: definition lookup failed", round_id, exc_info=True)
            definition = None

        meanings = list(definition.meanings) if definition else []
        examples = list(definition.examples) if definition else []
        r.summary = RoundSummary(
            title=r.title,
            word=r.solution,
            definitions=meanings or [DEFINITION_NOT_FOUND],
            examples=examples,
            winner=r.winner,
        )
        r.summary_visible = True
        self._emit("ROUND_SUMMARY", _dump(r.summary))
        self._scheduler.call_later(DISPLAY_TASK, self.settings.summary_display_ms, partial(self._close_summary, round_id))

    def _close_summary(self, round_id: int) -> None:
        if not self._is_current(round_id, GamePhase.round_over):
            return
        self.round.summary_visible = False
        self._scheduler.call_later(TEARDOWN_TASK, self.settings.teardown_ms, partial(self._restart_round, round_id))

    def _restart_round(self, round_id: int) -> None:
        if not self._is_current(round_id, GamePhase.round_over):
            return
        self._enter_preparing("restart")

    # ------------------------------------------------------------------
    # Guesses and gifts
    # ------------------------------------------------------------------

    def _on_ingest_tick(self) -> None:
        item = self.session.queue.pop()
        if item is None:
            return

        event = item.event
        comment = normalize_guess(event.comment)
        if comment == self.settings.participation_phrase:
            self._grant(event.user, "comment")
        elif is_guess_shape(comment, word_length=self.settings.word_length):
            self._handle_guess(event.user, comment)

    def _handle_guess(self, user: User, guess: str) -> None:
        ctx = GuessContext(user=user, guess=guess)
        env = GuessEnvironment(
            phase=self.phase,
            round=self.round,
            participants=self.session.participants,
            dictionary=self._dictionary,
            participation_phrase=self.settings.participation_phrase,
        )
        try:
            self._pipeline.validate(ctx=ctx, env=env)
        except GuessRejected as e:
            logger.debug("Round %d: guess %s from %s rejected (%s)", self.round.round_id, guess, user.unique_id, e.reason)
            if e.notice is not None:
                self._show_notice(e.notice)
                self._emit("GUESS_REJECTED", {"reason": e.reason, "guess": guess, "user": _dump(user)})
            return

        self.round.scored_guesses.add(guess)
        record = GuessRecord(guess=guess, user=user, statuses=evaluate_guess(guess, self.round.solution))
        self._append_guess(record)

        if guess == self.round.solution:
            self._end_round(
                RoundOutcome.guessed,
                winner=user,
                message=f"SUCCESS! {user.nickname} guessed the correct word!",
            )

    def _append_guess(self, record: GuessRecord) -> None:
        self.round.guesses.append(record)
        self.round.split = split_best_guess(self.round.guesses)
        self._emit("GUESS_SCORED", _dump(record))

    def _apply_gift_rules(self, gift: GiftEvent) -> None:
        if self.phase != GamePhase.active or self.round.ending or not self.round.solution:
            return

        effect = self._gift_rules.effect_for(gift)
        if effect == GiftEffect.none:
            return

        user = gift.user
        solution = self.round.solution
        logger.info("Round %d: gift value %d from %s triggers %s", self.round.round_id, gift.value, user.unique_id, effect.value)
        if effect == GiftEffect.instant_win:
            self.session.instant_winner = user
        self._append_guess(GuessRecord(guess=solution, user=user, statuses=[TileStatus.correct] * len(solution)))

        outcome = RoundOutcome.instant_win if effect == GiftEffect.instant_win else RoundOutcome.gift_reveal
        self._end_round(outcome, winner=user, message=f"SUCCESS! {user.nickname} guessed the correct word!")

    # ------------------------------------------------------------------
    # Presentation helpers
    # ------------------------------------------------------------------

    def _grant(self, user: User, reason: GrantReason) -> bool:
        if not self.session.participants.grant(user):
            return False
        logger.info("Participant %s joined via %s", user.unique_id, reason)
        self._emit("PARTICIPANT_JOINED", {"user": _dump(user), "reason": reason})
        self._show_notice(Notice(content=acknowledgement_for(user, reason), severity=NoticeSeverity.info))
        return True

    def _show_notice(self, notice: Notice) -> None:
        self.session.notice = notice
        self._scheduler.call_later(NOTICE_TASK, self.settings.notice_ms, self._clear_notice, group=SESSION_GROUP)
        self._emit("NOTICE", _dump(notice))

    def _clear_notice(self) -> None:
        self.session.notice = None

    def _show_rank_overlay(self) -> None:
        self.session.rank_overlay_visible = True
        self._scheduler.call_later(RANK_OVERLAY_TASK, self.settings.rank_overlay_ms, self._hide_rank_overlay, group=SESSION_GROUP)
        self._emit(
            "RANK_OVERLAY",
            {"visible": True, "entries": [_dump(e) for e in self.session.leaderboard.entries()]},
        )

    def _hide_rank_overlay(self) -> None:
        self.session.rank_overlay_visible = False
        self._emit("RANK_OVERLAY", {"visible": False})

    def _show_spotlight(self, gift: GiftEvent) -> None:
        spotlight = GiftSpotlight(
            user=gift.user,
            gift_name=gift.gift_name,
            diamond_count=gift.diamond_count,
            repeat_count=gift.repeat_count,
        )
        self.session.spotlight = spotlight
        self._scheduler.call_later(SPOTLIGHT_TASK, self.settings.spotlight_ms, self._clear_spotlight, group=SESSION_GROUP)
        self._emit("GIFT_SPOTLIGHT", _dump(spotlight))

    def _clear_spotlight(self) -> None:
        self.session.spotlight = None

    def _emit(self, type: EventType, payload: dict[str, Any]) -> None:
        event = RoundEvent.now(type=type, round_id=self.round.round_id, payload=payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Round event listener failed on %s", type)
