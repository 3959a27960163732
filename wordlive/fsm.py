from __future__ import annotations

from statemachine import State, StateMachine

from wordlive.api.models import GamePhase


class RoundFSM(StateMachine):
    """Guards the round lifecycle.

    loading -> preparing -> active -> round_over -> preparing -> ...
    A forced restart drops back to loading from any later phase.
    The controller owns timers and round state; the FSM only rejects illegal moves.
    """

    loading = State(GamePhase.loading.value, value=GamePhase.loading.value, initial=True)
    preparing = State(GamePhase.preparing.value, value=GamePhase.preparing.value)
    active = State(GamePhase.active.value, value=GamePhase.active.value)
    round_over = State(GamePhase.round_over.value, value=GamePhase.round_over.value)

    begin = loading.to(preparing)
    activate = preparing.to(active)
    finish = active.to(round_over)
    restart = round_over.to(preparing)
    reload = preparing.to(loading) | active.to(loading) | round_over.to(loading)

    @property
    def current_phase(self) -> GamePhase:
        return GamePhase(str(self.current_state.value))
