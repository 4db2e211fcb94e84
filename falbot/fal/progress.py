"""
Progress sinks for queued fal.ai jobs [PA]

The workflow reports queue position, status transitions, remote log lines
and errors through a ProgressCallback. `ChatProgressCallback` relays them to
the user over the chat transport, throttled per kind so a long video job does
not flood the DM channel: each kind has its own minimum interval and an
identical message is never sent twice in a row.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Optional

from falbot.utils.logging import get_logger

if TYPE_CHECKING:
    from falbot.adapters.base import ChatTransport

logger = get_logger(__name__)

IN_PROGRESS_NOTICES = {
    "text2image": "The image generation is in process\nImage generation can take a few minutes",
    "image2image": "The image generation is in process\nImage generation can take a few minutes",
    "text2video": "The video generation is in process\nVideo generation can take a long time, up to 20 minutes",
    "image2video": "The video generation is in process\nVideo generation can take a long time, up to 20 minutes",
    "video2video": "The video processing is in process\nVideo processing can take a long time, up to 20 minutes",
    "text2speech": "The speech generation is in process\nSpeech generation can take a few minutes",
    "audio2audio": "The voice conversion is in process\nThis can take a few minutes",
    "text2music": "The music generation is in process\nMusic generation can take a few minutes",
    "video2audio": "The audio generation is in process\nThis can take a few minutes",
    "audio2text": "The transcription is in process\nThis can take a few minutes",
}
DEFAULT_NOTICE = "The generation is in process\nThis may take a few minutes"


def format_eta(eta_seconds: Optional[int]) -> str:
    if eta_seconds is None:
        return "unknown"
    minutes, seconds = divmod(max(int(eta_seconds), 0), 60)
    return f"{minutes}m{seconds}s" if minutes else f"{seconds}s"


class ProgressCallback(ABC):
    """Receives progress events from the job workflow."""

    @abstractmethod
    async def on_queue_update(self, position: Optional[int], eta_seconds: Optional[int]) -> None:
        pass

    @abstractmethod
    async def on_log_message(self, message: str) -> None:
        pass

    @abstractmethod
    async def on_progress(self, status: str) -> None:
        pass

    @abstractmethod
    async def on_error(self, error: Exception) -> None:
        pass


class NullProgress(ProgressCallback):
    """Discards every event."""

    async def on_queue_update(self, position, eta_seconds) -> None:
        pass

    async def on_log_message(self, message: str) -> None:
        pass

    async def on_progress(self, status: str) -> None:
        pass

    async def on_error(self, error: Exception) -> None:
        pass


class _Throttle:
    """Minimum-interval gate with de-duplication of the last sent text."""

    def __init__(self, interval: float, clock: Callable[[], float], dedupe: bool = True):
        self.interval = interval
        self.dedupe = dedupe
        self._clock = clock
        self.last_sent_at: Optional[float] = None
        self.last_sent_text: Optional[str] = None

    def ready(self, text: str) -> bool:
        now = self._clock()
        if self.last_sent_at is not None and now - self.last_sent_at < self.interval:
            return False
        if self.dedupe and text == self.last_sent_text:
            return False
        return True

    def mark(self, text: str) -> None:
        self.last_sent_at = self._clock()
        self.last_sent_text = text


class ChatProgressCallback(ProgressCallback):
    """Relays progress to a user's DMs with per-kind throttling."""

    def __init__(
        self,
        transport: "ChatTransport",
        user_id: str,
        capability: str,
        queue_interval: float = 30,
        status_interval: float = 20,
        log_interval: float = 15,
        notice_interval: float = 120,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.transport = transport
        self.user_id = user_id
        self.capability = capability
        self._queue = _Throttle(queue_interval, clock)
        self._status = _Throttle(status_interval, clock)
        self._log = _Throttle(log_interval, clock)
        self._notice = _Throttle(notice_interval, clock, dedupe=False)

    async def _send(self, throttle: _Throttle, text: str) -> None:
        if not throttle.ready(text):
            return
        throttle.mark(text)
        await self.transport.send_message(self.user_id, text)

    async def on_queue_update(self, position: Optional[int], eta_seconds: Optional[int]) -> None:
        if position is None and eta_seconds is None:
            return
        position_text = "unknown" if position is None else str(position)
        await self._send(self._queue, f"Queue position: {position_text}, ETA: {format_eta(eta_seconds)}")

    async def on_progress(self, status: str) -> None:
        await self._send(self._status, f"Status: {status}")

        if status == "IN_PROGRESS":
            notice = IN_PROGRESS_NOTICES.get(self.capability, DEFAULT_NOTICE)
            await self._send(self._notice, notice)

    async def on_log_message(self, message: str) -> None:
        lines = [line for line in message.splitlines() if line.strip()]
        last_line = lines[-1] if lines else message
        await self._send(self._log, f"Log: {last_line}")

    async def on_error(self, error: Exception) -> None:
        user_message = getattr(error, "user_message", None) or str(error)
        await self.transport.send_message(self.user_id, f"Error: {user_message}")
