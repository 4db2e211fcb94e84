"""Text-to-speech jobs."""

import re
from typing import Any, Callable, Dict, List

from ..models import Model
from ..options import ELEVENLABS_VOICES, ElevenLabsDialogOptions, ModelOptions
from ..requests import SpeechRequest
from ..types import Capability, invalid_options
from .base import BaseDispatcher
from .decoders import decode_audio_response

# "Rachel: hello" at the start of the text or after whitespace
SPEAKER_LABEL = re.compile(
    r"(?:(?<=\s)|^)(" + "|".join(ELEVENLABS_VOICES) + r"):\s*",
    re.IGNORECASE,
)
_CANONICAL_VOICES = {voice.lower(): voice for voice in ELEVENLABS_VOICES}


def parse_dialogue(text: str, fallback_voice: str) -> List[Dict[str, str]]:
    """
    Split `Voice: line` dialogue into ordered turns.

    Text before the first label, or with no label at all, is spoken by the
    fallback voice.
    """
    turns: List[Dict[str, str]] = []
    parts = SPEAKER_LABEL.split(text)
    # parts = [leading, voice, line, voice, line, ...]
    leading = parts[0].strip()
    if leading:
        turns.append({"text": leading, "voice": fallback_voice})
    for i in range(1, len(parts) - 1, 2):
        line = parts[i + 1].strip()
        if line:
            turns.append({"text": line, "voice": _CANONICAL_VOICES[parts[i].lower()]})
    return turns


class SpeechDispatcher(BaseDispatcher):
    request_type = SpeechRequest
    capabilities = (Capability.TEXT2SPEECH,)

    def build_body(self, model: Model, inputs: Dict[str, Any], options: ModelOptions) -> Dict[str, Any]:
        if isinstance(options, ElevenLabsDialogOptions):
            turns = parse_dialogue(inputs["text"], options.voice_id or "Rachel")
            if not turns:
                raise invalid_options("dialogue text is empty")
            body: Dict[str, Any] = {"inputs": turns}
            wire = options.to_wire()
            wire.pop("voice_id", None)
            body.update(wire)
            return body
        return super().build_body(model, inputs, options)

    def decoder_for(self, model: Model) -> Callable[[bytes], Any]:
        return decode_audio_response
