"""Voice change, music generation and video-to-audio jobs."""

from typing import Any, Callable, Dict

from ..models import Model
from ..requests import AudioRequest
from ..types import Capability
from .base import BaseDispatcher
from .decoders import decode_audio_response


class AudioDispatcher(BaseDispatcher):
    request_type = AudioRequest
    capabilities = (Capability.AUDIO2AUDIO, Capability.TEXT2MUSIC, Capability.VIDEO2AUDIO)

    def normalize_inputs(self, model: Model, inputs: Dict[str, Any]) -> Dict[str, Any]:
        # Voice changers take the recording only
        if model.capability == Capability.AUDIO2AUDIO:
            inputs.pop("prompt", None)
        return inputs

    def decoder_for(self, model: Model) -> Callable[[bytes], Any]:
        return decode_audio_response
