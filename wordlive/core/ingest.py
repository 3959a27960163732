from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from wordlive.api.models import ChatEvent


class SequenceTracker:
    """Sequence numbers seen on one inbound channel.

    An event is new when its sequence number has not been admitted before, so
    late arrivals behind a higher number still get through. Numbers more than
    `window` below the highest one seen are treated as redeliveries.
    Events without a source sequence get the next number after the highest.
    """

    def __init__(self, *, window: int = 4096) -> None:
        self._last = 0
        self._window = window
        self._seen: set[int] = set()

    @property
    def last(self) -> int:
        return self._last

    def admit(self, seq: int | None) -> int | None:
        """Return the sequence number to use, or None for a redelivery."""

        if seq is None:
            seq = self._last + 1
        elif seq in self._seen or seq <= self._last - self._window:
            return None
        self._seen.add(seq)
        if seq > self._last:
            self._last = seq
            if len(self._seen) > 2 * self._window:
                floor = self._last - self._window
                self._seen = {s for s in self._seen if s > floor}
        return seq


@dataclass(frozen=True, slots=True)
class QueuedChat:
    seq: int
    event: ChatEvent


class EventIngestQueue:
    """FIFO of chat events waiting for the single consumer tick."""

    def __init__(self) -> None:
        self._sequence = SequenceTracker()
        self._buffer: deque[QueuedChat] = deque()

    def push(self, event: ChatEvent) -> int | None:
        seq = self._sequence.admit(event.seq)
        if seq is None:
            return None
        self._buffer.append(QueuedChat(seq=seq, event=event))
        return seq

    def pop(self) -> QueuedChat | None:
        if not self._buffer:
            return None
        return self._buffer.popleft()

    def clear(self) -> int:
        dropped = len(self._buffer)
        self._buffer.clear()
        return dropped

    @property
    def last_seq(self) -> int:
        return self._sequence.last

    def __len__(self) -> int:
        return len(self._buffer)
