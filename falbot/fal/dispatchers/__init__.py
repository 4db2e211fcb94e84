"""
Job dispatchers, one per capability group [CA]

`Dispatchers` routes a typed request to the dispatcher that owns its family.
"""

from typing import Any, List

from ..client import FalClient
from ..registry import ModelRegistry
from ..requests import JobRequest
from ..types import FalError, FalErrorType
from .audio import AudioDispatcher
from .base import BaseDispatcher
from .image import ImageDispatcher
from .speech import SpeechDispatcher
from .transcribe import TranscriptionDispatcher
from .video import VideoDispatcher

__all__ = [
    "AudioDispatcher",
    "BaseDispatcher",
    "Dispatchers",
    "ImageDispatcher",
    "SpeechDispatcher",
    "TranscriptionDispatcher",
    "VideoDispatcher",
]


class Dispatchers:
    """Routes requests by type."""

    def __init__(self, client: FalClient, registry: ModelRegistry):
        self.registry = registry
        self._dispatchers: List[BaseDispatcher] = [
            ImageDispatcher(client, registry),
            VideoDispatcher(client, registry),
            SpeechDispatcher(client, registry),
            AudioDispatcher(client, registry),
            TranscriptionDispatcher(client, registry),
        ]

    def for_request(self, request: JobRequest) -> BaseDispatcher:
        for dispatcher in self._dispatchers:
            if isinstance(request, dispatcher.request_type):
                return dispatcher
        raise FalError(
            error_type=FalErrorType.INVALID_OPTIONS,
            message=f"No dispatcher for {type(request).__name__}",
            user_message="This kind of request is not supported.",
        )

    async def dispatch(self, request: JobRequest) -> Any:
        return await self.for_request(request).dispatch(request)
