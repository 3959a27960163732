from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
import redis

from wordlive.api.deps import get_controller, get_redis
from wordlive.api.models import (
    ChatEvent,
    EventAcceptedResponse,
    GiftEvent,
    LeaderboardResponse,
    LikeEvent,
    RoomUserEvent,
    RoundActionResponse,
    RoundSnapshot,
    SocialEvent,
)
from wordlive.controller import GamePhaseController
from wordlive.streams import ROUND_EVENTS_STREAM, read_round_events
from wordlive.websocket_hub import hub

router = APIRouter()


def _accepted(seq: int | None) -> EventAcceptedResponse:
    return EventAcceptedResponse(accepted=seq is not None, seq=seq)


@router.websocket("/ws/round")
async def round_updates_ws(websocket: WebSocket) -> None:
    await hub.connect(websocket)

    try:
        # Keep the socket open; overlays can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(websocket)
    except Exception:
        await hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/round", response_model=RoundSnapshot)
async def get_round_route(controller: GamePhaseController = Depends(get_controller)) -> RoundSnapshot:
    return controller.snapshot()


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard_route(controller: GamePhaseController = Depends(get_controller)) -> LeaderboardResponse:
    return LeaderboardResponse(entries=controller.session.leaderboard.entries())


@router.post("/events/chat", response_model=EventAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def chat_event_route(
    payload: ChatEvent,
    controller: GamePhaseController = Depends(get_controller),
) -> EventAcceptedResponse:
    return _accepted(controller.submit_chat(payload))


@router.post("/events/gift", response_model=EventAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def gift_event_route(
    payload: GiftEvent,
    controller: GamePhaseController = Depends(get_controller),
) -> EventAcceptedResponse:
    return _accepted(controller.submit_gift(payload))


@router.post("/events/social", response_model=EventAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def social_event_route(
    payload: SocialEvent,
    controller: GamePhaseController = Depends(get_controller),
) -> EventAcceptedResponse:
    return _accepted(controller.submit_social(payload))


@router.post("/events/like", response_model=EventAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def like_event_route(
    payload: LikeEvent,
    controller: GamePhaseController = Depends(get_controller),
) -> EventAcceptedResponse:
    return _accepted(controller.submit_like(payload))


@router.post("/events/room-user", response_model=EventAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def room_user_event_route(
    payload: RoomUserEvent,
    controller: GamePhaseController = Depends(get_controller),
) -> EventAcceptedResponse:
    return _accepted(controller.submit_room_user(payload))


@router.post("/round/reveal", response_model=RoundActionResponse)
async def reveal_round_route(controller: GamePhaseController = Depends(get_controller)) -> RoundActionResponse:
    applied = controller.force_reveal()
    return RoundActionResponse(applied=applied, phase=controller.phase)


@router.post("/round/restart", response_model=RoundActionResponse)
async def restart_round_route(controller: GamePhaseController = Depends(get_controller)) -> RoundActionResponse:
    try:
        controller.force_restart()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return RoundActionResponse(applied=True, phase=controller.phase)


@router.get("/round/events")
async def get_round_events_route(
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    """Debug endpoint: read the round event Redis Stream.

    Intended for local/dev testing when redis-cli isn't available.
    """

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")

    try:
        messages = read_round_events(r=r, count=count, start=start, end=end)
    except redis.RedisError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return {"stream": ROUND_EVENTS_STREAM, "messages": messages}
