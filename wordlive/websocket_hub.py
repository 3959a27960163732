from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket

from wordlive.core.events import RoundEvent

logger = logging.getLogger(__name__)


class RoundWebSocketHub:
    """In-process WebSocket fan-out for the single live round.

    Every connected overlay receives every round event as a JSON dict. A socket
    that fails to receive is dropped.
    """

    def __init__(self) -> None:
        self._conns: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task[None]] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._conns.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._conns.discard(websocket)

    async def broadcast(self, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._conns)

        if not conns:
            return

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(ws)

        if dead:
            logger.debug("Dropping %d dead round sockets", len(dead))
            async with self._lock:
                for ws in dead:
                    self._conns.discard(ws)

    def listener(self, event: RoundEvent) -> None:
        """Controller listener: schedule a broadcast on the running loop."""

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Controller driven outside the event loop (e.g. from a sync test).
            logger.debug("No running loop; %s not broadcast", event.type)
            return

        task = loop.create_task(self.broadcast(event.as_message()))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


hub = RoundWebSocketHub()
