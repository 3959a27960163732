from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from wordlive.api.models import GamePhase
from wordlive.fsm import RoundFSM


def test_round_cycle() -> None:
    fsm = RoundFSM()
    assert fsm.current_phase == GamePhase.loading

    fsm.send("begin")
    assert fsm.current_phase == GamePhase.preparing

    fsm.send("activate")
    assert fsm.current_phase == GamePhase.active

    fsm.send("finish")
    assert fsm.current_phase == GamePhase.round_over

    fsm.send("restart")
    assert fsm.current_phase == GamePhase.preparing


def test_phases_cannot_be_skipped() -> None:
    fsm = RoundFSM()
    with pytest.raises(TransitionNotAllowed):
        fsm.send("activate")

    fsm.send("begin")
    with pytest.raises(TransitionNotAllowed):
        fsm.send("finish")


def test_round_cannot_finish_twice() -> None:
    fsm = RoundFSM()
    fsm.send("begin")
    fsm.send("activate")
    fsm.send("finish")

    with pytest.raises(TransitionNotAllowed):
        fsm.send("finish")


@pytest.mark.parametrize("path", [["begin"], ["begin", "activate"], ["begin", "activate", "finish"]])
def test_reload_from_any_later_phase(path: list[str]) -> None:
    fsm = RoundFSM()
    for event in path:
        fsm.send(event)

    fsm.send("reload")
    assert fsm.current_phase == GamePhase.loading


def test_reload_from_loading_is_rejected() -> None:
    with pytest.raises(TransitionNotAllowed):
        RoundFSM().send("reload")
