from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class GameSettings:
    word_length: int = 5
    round_duration_sec: int = 900

    # Phase timings (ms).
    prepare_ms: int = 3000
    reveal_delay_ms: int = 1500
    summary_display_ms: int = 5000
    teardown_ms: int = 500

    ingest_tick_ms: int = 100
    countdown_tick_ms: int = 1000

    # Presentation windows (ms).
    notice_ms: int = 3000
    rank_overlay_ms: int = 5000
    spotlight_ms: int = 7000

    participation_phrase: str = "GGMU"
    rank_command: str = "!rank"

    reveal_gift_value: int = 10
    instant_win_gift_value: int = 30

    dictionary_max_attempts: int = 3
    dictionary_retry_ms: int = 2000

    event_stream_enabled: bool = True


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name, "").strip()
    return raw or default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def load_settings(*, dotenv_path: Path | None = None) -> GameSettings:
    """Build settings from the environment.

    A local `.env` is loaded first but never overrides variables already set.
    """

    env_path = dotenv_path or Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)

    d = GameSettings()
    return GameSettings(
        word_length=_env_int("WORDLE_WORD_LENGTH", d.word_length, minimum=1),
        round_duration_sec=_env_int("WORDLE_ROUND_DURATION_SEC", d.round_duration_sec, minimum=1),
        prepare_ms=_env_int("WORDLE_PREPARE_MS", d.prepare_ms),
        reveal_delay_ms=_env_int("WORDLE_REVEAL_DELAY_MS", d.reveal_delay_ms),
        summary_display_ms=_env_int("WORDLE_SUMMARY_DISPLAY_MS", d.summary_display_ms),
        teardown_ms=_env_int("WORDLE_TEARDOWN_MS", d.teardown_ms),
        ingest_tick_ms=_env_int("WORDLE_INGEST_TICK_MS", d.ingest_tick_ms, minimum=1),
        countdown_tick_ms=_env_int("WORDLE_COUNTDOWN_TICK_MS", d.countdown_tick_ms, minimum=1),
        notice_ms=_env_int("WORDLE_NOTICE_MS", d.notice_ms),
        rank_overlay_ms=_env_int("WORDLE_RANK_OVERLAY_MS", d.rank_overlay_ms),
        spotlight_ms=_env_int("WORDLE_SPOTLIGHT_MS", d.spotlight_ms),
        participation_phrase=_env_str("WORDLE_PARTICIPATION_PHRASE", d.participation_phrase).upper(),
        rank_command=_env_str("WORDLE_RANK_COMMAND", d.rank_command).lower(),
        reveal_gift_value=_env_int("WORDLE_REVEAL_GIFT_VALUE", d.reveal_gift_value, minimum=1),
        instant_win_gift_value=_env_int("WORDLE_INSTANT_WIN_GIFT_VALUE", d.instant_win_gift_value, minimum=1),
        dictionary_max_attempts=_env_int("WORDLE_DICTIONARY_MAX_ATTEMPTS", d.dictionary_max_attempts, minimum=1),
        dictionary_retry_ms=_env_int("WORDLE_DICTIONARY_RETRY_MS", d.dictionary_retry_ms),
        event_stream_enabled=_env_bool("WORDLE_EVENT_STREAM", d.event_stream_enabled),
    )
