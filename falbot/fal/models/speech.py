"""Text-to-speech models."""

from typing import List

from falbot.billing.units import Money

from ..options import (
    ELEVENLABS_VOICES,
    EMOTIONS,
    MINIMAX_VOICES,
    ChatterboxOptions,
    ElevenLabsDialogOptions,
    ElevenLabsTTSOptions,
    MinimaxTTSOptions,
)
from ..types import Capability
from .base import Model

CHATTERBOX_ENDPOINT = "https://queue.fal.run/resemble-ai/chatterboxhd/text-to-speech"


def text_to_speech_models() -> List[Model]:
    return [
        Model(
            name="minimax-tts/text-to-speech",
            capability=Capability.TEXT2SPEECH,
            description="MiniMax Speech-02 HD text to speech",
            help_text=(
                "Usage: !text2speech [text] [--option value]...\n"
                "Example: !text2speech Hello there, how are you? --voice Calm_Woman --speed 1.2\n\n"
                "Parameters:\n"
                f"• --voice: Voice to use (default: Wise_Woman). Options: {', '.join(MINIMAX_VOICES)}\n"
                "• --speed: Speaking speed between 0.5 and 2.0 (default: 1.0)\n"
                "• --vol: Volume between 0 and 10 (default: 1.0)\n"
                "• --pitch: Pitch shift between -12 and 12 (optional)\n"
                f"• --emotion: {', '.join(EMOTIONS)} (optional)\n"
                "• --english_normalization: Improve number reading (optional)\n"
                "• --sample_rate: 8000, 16000, 22050, 24000, 32000, 44100 (default: 32000)\n"
                "• --bitrate: 32000, 64000, 128000, 256000 (default: 128000)\n"
                "• --format: mp3, pcm, flac (default: mp3)\n"
                "• --channel: 1 (mono) or 2 (stereo) (default: 1)"
            ),
            price_usd=Money("0.10"),
            default_options=MinimaxTTSOptions(
                voice_id="Wise_Woman",
                speed=1.0,
                vol=1.0,
                sample_rate=32000,
                bitrate=128000,
                format="mp3",
                channel=1,
            ),
            endpoint="/minimax-tts/text-to-speech",
            required_inputs=("text",),
        ),
        Model(
            name="chatterbox-tts",
            capability=Capability.TEXT2SPEECH,
            description="Resemble AI Chatterbox HD expressive text to speech",
            help_text=(
                "Usage: !text2speech [text] [--option value]...\n"
                "Example: !text2speech I can't believe it worked! --exaggeration 0.8\n\n"
                "Parameters:\n"
                "• --audio_prompt_url: Reference voice clip to clone (optional)\n"
                "• --exaggeration: Emotional intensity between 0 and 1 (default: 0.5)\n"
                "• --cfg_weight: Pace control between 0 and 1 (default: 0.5)\n"
                "• --seed: Specific seed (optional)"
            ),
            price_usd=Money("0.05"),
            default_options=ChatterboxOptions(exaggeration=0.5, cfg_weight=0.5),
            endpoint=CHATTERBOX_ENDPOINT,
            required_inputs=("text",),
        ),
        Model(
            name="elevenlabs-dialog",
            capability=Capability.TEXT2SPEECH,
            description="ElevenLabs v3 multi-speaker dialogue",
            help_text=(
                "Usage: !text2speech [dialogue] [--option value]...\n"
                "Example: !text2speech Rachel: Did you hear that? Roger: Hear what?\n\n"
                "Write one line per speaker as `Voice: text`. Lines without a voice use --voice.\n\n"
                "Parameters:\n"
                f"• --voice: Fallback voice (default: Rachel). Options: {', '.join(ELEVENLABS_VOICES)}\n"
                "• --output_format: Audio format (default: mp3_22050_32)\n"
                "• --stability: Voice stability between 0 and 1 (default: 0.5)\n"
                "• --similarity_boost: Voice similarity between 0 and 1 (default: 0.75)"
            ),
            price_usd=Money("0.30"),
            default_options=ElevenLabsDialogOptions(
                voice_id="Rachel",
                output_format="mp3_22050_32",
                stability=0.5,
                similarity_boost=0.75,
            ),
            endpoint="/elevenlabs/text-to-dialogue/eleven-v3",
            required_inputs=("text",),
        ),
        Model(
            name="elevenlabs/tts/turbo-v2.5",
            capability=Capability.TEXT2SPEECH,
            description="ElevenLabs Turbo v2.5 fast text to speech",
            help_text=(
                "Usage: !text2speech [text] [--option value]...\n"
                "Example: !text2speech Welcome to the show --voice Aria --speed 1.1\n\n"
                "Parameters:\n"
                f"• --voice: Voice to use (default: Rachel). Options: {', '.join(ELEVENLABS_VOICES)}\n"
                "• --stability: Voice stability between 0 and 1 (default: 0.5)\n"
                "• --similarity_boost: Voice similarity between 0 and 1 (default: 0.75)\n"
                "• --style: Style exaggeration between 0 and 1 (default: 0.0)\n"
                "• --speed: Speaking speed between 0.25 and 4.0 (default: 1.0)\n"
                "• --timestamps: Return word timestamps (default: false)\n"
                "• --language_code: Force a language, e.g. en (optional)"
            ),
            price_usd=Money("0.05"),
            default_options=ElevenLabsTTSOptions(
                voice="Rachel",
                stability=0.5,
                similarity_boost=0.75,
                style=0.0,
                speed=1.0,
                timestamps=False,
            ),
            endpoint="/elevenlabs/tts/turbo-v2.5",
            required_inputs=("text",),
        ),
    ]
