"""Speech-to-text jobs."""

from typing import Any, Callable

from ..models import Model
from ..requests import TranscriptionRequest
from ..types import Capability
from .base import BaseDispatcher
from .decoders import decode_transcription_response


class TranscriptionDispatcher(BaseDispatcher):
    request_type = TranscriptionRequest
    capabilities = (Capability.AUDIO2TEXT,)

    def decoder_for(self, model: Model) -> Callable[[bytes], Any]:
        return decode_transcription_response
