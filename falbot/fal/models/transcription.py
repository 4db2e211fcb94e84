"""Speech-to-text models."""

from typing import List

from falbot.billing.units import Money

from ..options import ScribeV2Options
from ..types import Capability
from .base import Model


def audio_to_text_models() -> List[Model]:
    return [
        Model(
            name="elevenlabs/speech-to-text/scribe-v2",
            capability=Capability.AUDIO2TEXT,
            description="ElevenLabs Scribe v2 transcription with speaker labels",
            help_text=(
                "Usage: !transcribe [audio_url] [--option value]...\n"
                "Example: !transcribe https://example.com/interview.mp3 --num_speakers 2\n"
                "You can also attach the audio file to the command message.\n\n"
                "Parameters:\n"
                "• --task: transcribe or translate (default: transcribe)\n"
                "• --language: Language code of the audio, e.g. en (optional)\n"
                "• --chunk_level: segment or word (default: segment)\n"
                "• --diarize: Label speakers (default: true)\n"
                "• --num_speakers: Expected speakers, 1 to 50 (optional)"
            ),
            price_usd=Money("0.008"),
            per_second_pricing=True,
            default_options=ScribeV2Options(task="transcribe", chunk_level="segment", diarize=True),
            endpoint="/elevenlabs/speech-to-text/scribe-v2",
            required_inputs=("audio_url",),
        ),
    ]
