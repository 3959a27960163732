from __future__ import annotations

import logging

import redis

from wordlive.config import GameSettings
from wordlive.controller import GamePhaseController
from wordlive.dictionary.registry import WordDictionary
from wordlive.scheduler import Scheduler
from wordlive.streams import RoundEventStream
from wordlive.websocket_hub import RoundWebSocketHub, hub

logger = logging.getLogger(__name__)

_CONTROLLER: GamePhaseController | None = None


def init_controller(
    *,
    settings: GameSettings,
    dictionary: WordDictionary,
    scheduler: Scheduler,
    redis_client: redis.Redis | None = None,
    ws_hub: RoundWebSocketHub = hub,
) -> GamePhaseController:
    """Create the process-wide controller and wire its outbound listeners.

    Safe to call multiple times; subsequent calls return the existing instance.
    """

    global _CONTROLLER
    if _CONTROLLER is not None:
        return _CONTROLLER

    controller = GamePhaseController(dictionary=dictionary, scheduler=scheduler, settings=settings)
    controller.add_listener(ws_hub.listener)
    if settings.event_stream_enabled and redis_client is not None:
        stream = RoundEventStream(r=redis_client)
        controller.add_listener(stream)
        logger.info("Publishing round events to %s", stream.key)
    _CONTROLLER = controller
    return controller


def get_controller() -> GamePhaseController:
    if _CONTROLLER is None:
        raise RuntimeError("Controller not initialized. Call init_controller() at startup.")
    return _CONTROLLER


def shutdown_controller() -> None:
    global _CONTROLLER
    if _CONTROLLER is None:
        return
    if _CONTROLLER.started:
        _CONTROLLER.stop()
    _CONTROLLER = None


def reset_controller_for_tests() -> None:
    global _CONTROLLER
    _CONTROLLER = None
