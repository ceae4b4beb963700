"""
Response sinks: where the chat pipeline delivers tokens and the final result.

The pipeline is the same for both delivery modes; only the sink differs.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Optional, Union

from .models import ChatResult

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def _sse_event(name: str, data: Union[Dict[str, Any], str]) -> str:
    payload = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)
    return f"event: {name}\ndata: {payload}\n\n"


class ResponseSink(ABC):
    """Receives pipeline output for one request."""

    streaming: bool = False

    async def send_token(self, token: str) -> None:
        pass

    @abstractmethod
    async def send_result(self, result: ChatResult) -> None:
        pass


class BufferedSink(ResponseSink):
    """Keeps the final result for a single JSON response."""

    def __init__(self):
        self.result: Optional[ChatResult] = None

    async def send_result(self, result: ChatResult) -> None:
        self.result = result


class EventStreamSink(ResponseSink):
    """
    Queues server-sent events in production order.

    `send_token` emits `chunk` events, `send_result` the single `result`
    event. `events()` yields queued events until `close()` is called.
    """

    streaming = True

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self.tokens_sent = 0
        self.result_sent = False

    async def send_token(self, token: str) -> None:
        if self.result_sent:
            raise RuntimeError("Token received after the result event")
        self.tokens_sent += 1
        await self._queue.put(_sse_event("chunk", {"message": token}))

    async def send_result(self, result: ChatResult) -> None:
        if self.result_sent:
            raise RuntimeError("Result event already sent")
        self.result_sent = True
        await self._queue.put(_sse_event("result", result.to_payload()))

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    async def events(self) -> AsyncIterator[str]:
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event

    @staticmethod
    def error_event() -> str:
        return _sse_event("error", {"message": INTERNAL_ERROR_MESSAGE})
