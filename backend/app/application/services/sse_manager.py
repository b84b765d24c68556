"""SSE Manager — in-process event broadcaster for dashboard notifications."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

from app.domain.entities import Toast
from app.infrastructure.logging.colored_logger import DashboardLogger, DashboardStage

logger = logging.getLogger(__name__)


class SSEManager:
    """Manages SSE client connections and broadcasts dashboard events.

    Each connected browser tab gets its own bounded asyncio.Queue.
    Broadcasting pushes the event to all queues; a tab that stops reading
    and fills its queue is disconnected. Clients consume events via an
    async generator.
    """

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._queues: list[asyncio.Queue[str | None]] = []
        self._log = DashboardLogger("SSEManager")

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Subscribe to SSE events. Yields formatted SSE strings.

        The generator automatically unsubscribes when the client disconnects.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=self._queue_size)
        self._queues.append(queue)
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        """Broadcast an SSE event to all connected clients."""
        sse_message = f"event: {event_type}\ndata: {json.dumps(data)}\n\n"
        dead_queues: list[asyncio.Queue[str | None]] = []

        for queue in self._queues:
            try:
                queue.put_nowait(sse_message)
            except asyncio.QueueFull:
                dead_queues.append(queue)
                logger.warning("SSE client queue full — disconnecting")

        for q in dead_queues:
            self._queues.remove(q)
            # Make room for the sentinel so the subscriber loop ends
            q.get_nowait()
            q.put_nowait(None)

    async def notify(self, toast: Toast) -> None:
        """Push a toast notification to every connected dashboard."""
        self._log.step_start(
            DashboardStage.NOTIFY, toast.title, kind=toast.kind.value, clients=self.client_count
        )
        await self.broadcast("toast", toast.to_dict())

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for queue in self._queues:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(None)
        self._queues.clear()

    @property
    def client_count(self) -> int:
        return len(self._queues)
