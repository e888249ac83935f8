# core/streaming.py
import asyncio
import json
import time
from typing import AsyncIterator, Dict, Final, List, Literal, Optional

LINE_SEP: Final[str] = "\n"

# Flow: Narrow types for NDJSON events.
EventType = Literal["progress", "stage", "log", "status", "done", "cancelled", "error"]

TERMINAL_EVENTS: Final[frozenset] = frozenset({"done", "cancelled"})


def ndjson_line(obj: Dict[str, object]) -> bytes:
    return (json.dumps(obj, separators=(",", ":")) + LINE_SEP).encode("utf-8")


def event(
    type_: EventType, payload: Optional[Dict[str, object]] = None
) -> Dict[str, object]:
    body = dict(payload or {})
    body.setdefault("ts", int(time.time()))
    return {"type": type_, "payload": body}


class JobSession:
    """
    Ordered, in-process event history of one live job.

    Flow:
    - Controller callbacks publish() synchronously on the event loop.
    - Each follower (NDJSON stream, persistence pump) keeps its own cursor:
      it replays history from the start, then waits for live events.
    - close() ends every follower once it has drained the history.
    """

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        self._events: List[Dict[str, object]] = []
        self._wake = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(
        self, type_: EventType, payload: Optional[Dict[str, object]] = None
    ) -> None:
        if self._closed:
            return
        self._events.append(event(type_, payload))
        if type_ in TERMINAL_EVENTS:
            self._closed = True
        self._notify()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._notify()

    async def follow(self, start: int = 0) -> AsyncIterator[Dict[str, object]]:
        cursor = start
        while True:
            while cursor < len(self._events):
                yield self._events[cursor]
                cursor += 1
            if self._closed:
                return
            wake = self._wake
            await wake.wait()

    def _notify(self) -> None:
        wake, self._wake = self._wake, asyncio.Event()
        wake.set()
