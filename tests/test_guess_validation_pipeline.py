from __future__ import annotations

import pytest

from wordlive.api.models import GamePhase, NoticeSeverity, User
from wordlive.core.participants import ParticipantGate
from wordlive.core.session import RoundState
from wordlive.dictionary.registry import CsvWordDictionary
from wordlive.turn_processing.validators import (
    DEFAULT_GUESS_PIPELINE,
    GuessContext,
    GuessEnvironment,
    GuessRejected,
)

BUDI = User(unique_id="u1", nickname="Budi")
STRANGER = User(unique_id="u2", nickname="Stranger")


def _env(dictionary: CsvWordDictionary, *, phase: GamePhase = GamePhase.active, ending: bool = False) -> GuessEnvironment:
    gate = ParticipantGate()
    gate.grant(BUDI)
    round_state = RoundState(round_id=1, solution="BERAS", ending=ending)
    round_state.scored_guesses.add("SABAR")
    return GuessEnvironment(
        phase=phase,
        round=round_state,
        participants=gate,
        dictionary=dictionary,
        participation_phrase="GGMU",
    )


@pytest.mark.asyncio
async def test_valid_guess_passes(dictionary: CsvWordDictionary) -> None:
    await dictionary.initialize()
    DEFAULT_GUESS_PIPELINE.validate(ctx=GuessContext(user=BUDI, guess="BESAR"), env=_env(dictionary))


@pytest.mark.asyncio
async def test_ineligible_viewer_gets_an_info_notice(dictionary: CsvWordDictionary) -> None:
    await dictionary.initialize()
    with pytest.raises(GuessRejected) as ei:
        DEFAULT_GUESS_PIPELINE.validate(ctx=GuessContext(user=STRANGER, guess="BESAR"), env=_env(dictionary))

    assert ei.value.reason == "ineligible"
    assert ei.value.notice is not None
    assert ei.value.notice.severity == NoticeSeverity.info
    assert "GGMU" in ei.value.notice.content


@pytest.mark.asyncio
async def test_ineligible_notice_even_between_rounds(dictionary: CsvWordDictionary) -> None:
    await dictionary.initialize()
    with pytest.raises(GuessRejected) as ei:
        DEFAULT_GUESS_PIPELINE.validate(
            ctx=GuessContext(user=STRANGER, guess="BESAR"),
            env=_env(dictionary, phase=GamePhase.preparing),
        )
    assert ei.value.reason == "ineligible"


@pytest.mark.asyncio
@pytest.mark.parametrize(("phase", "ending"), [(GamePhase.preparing, False), (GamePhase.round_over, False), (GamePhase.active, True)])
async def test_closed_round_drops_silently(dictionary: CsvWordDictionary, phase: GamePhase, ending: bool) -> None:
    await dictionary.initialize()
    with pytest.raises(GuessRejected) as ei:
        DEFAULT_GUESS_PIPELINE.validate(ctx=GuessContext(user=BUDI, guess="BESAR"), env=_env(dictionary, phase=phase, ending=ending))

    assert ei.value.reason == "round_closed"
    assert ei.value.notice is None


@pytest.mark.asyncio
async def test_duplicate_drops_silently(dictionary: CsvWordDictionary) -> None:
    await dictionary.initialize()
    with pytest.raises(GuessRejected) as ei:
        DEFAULT_GUESS_PIPELINE.validate(ctx=GuessContext(user=BUDI, guess="SABAR"), env=_env(dictionary))

    assert ei.value.reason == "duplicate"
    assert ei.value.notice is None


@pytest.mark.asyncio
async def test_unknown_word_gets_an_error_notice(dictionary: CsvWordDictionary) -> None:
    await dictionary.initialize()
    with pytest.raises(GuessRejected) as ei:
        DEFAULT_GUESS_PIPELINE.validate(ctx=GuessContext(user=BUDI, guess="QQQQQ"), env=_env(dictionary))

    assert ei.value.reason == "invalid_word"
    assert ei.value.notice is not None
    assert ei.value.notice.severity == NoticeSeverity.error
    assert ei.value.notice.content == "Word QQQQQ is not valid! (from Budi)"
    assert isinstance(ei.value, ValueError)
