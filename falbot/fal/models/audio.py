"""Voice change, music and video-to-audio models."""

from typing import List

from falbot.billing.units import Money

from ..options import (
    ELEVENLABS_VOICES,
    MinimaxMusicOptions,
    MMAudioOptions,
    StableAudioOptions,
    VoiceChangerOptions,
)
from ..types import Capability
from .base import Model


def audio_to_audio_models() -> List[Model]:
    return [
        Model(
            name="elevenlabs-voice-changer",
            capability=Capability.AUDIO2AUDIO,
            description="Change the voice in a recording with ElevenLabs",
            help_text=(
                "Usage: !audio2audio [audio_url] [--option value]...\n"
                "Example: !audio2audio https://example.com/me.mp3 --voice Roger\n"
                "You can also attach the audio file to the command message.\n\n"
                "Parameters:\n"
                f"• --voice: Target voice (default: Rachel). Options: {', '.join(ELEVENLABS_VOICES)}\n"
                "• --output_format: Audio format (default: mp3_44100_128)\n"
                "• --remove_background_noise: Clean the input first (optional)\n"
                "• --seed: Specific seed (optional)"
            ),
            price_usd=Money("0.50"),
            per_second_pricing=True,
            default_options=VoiceChangerOptions(voice="Rachel", output_format="mp3_44100_128"),
            endpoint="/elevenlabs/voice-changer",
            required_inputs=("audio_url",),
        ),
    ]


def text_to_music_models() -> List[Model]:
    return [
        Model(
            name="minimax-music-v2",
            capability=Capability.TEXT2MUSIC,
            description="MiniMax Music v2 song generation",
            help_text=(
                "Usage: !text2music [prompt] [--option value]...\n"
                "Example: !text2music upbeat synthwave with female vocals --duration 90\n\n"
                "Parameters:\n"
                "• --duration: Length in seconds, 1 to 300 (default: 60)\n"
                "• --reference_audio_url: Song to take the style from (optional)\n\n"
                "Pricing: $0.01 per second of audio"
            ),
            price_usd=Money("0.01"),
            per_second_pricing=True,
            default_options=MinimaxMusicOptions(duration=60),
            endpoint="/minimax-music/v2",
            required_inputs=("prompt",),
        ),
        Model(
            name="stable-audio-25",
            capability=Capability.TEXT2MUSIC,
            description="Stable Audio 2.5 music and sound generation",
            help_text=(
                "Usage: !text2music [prompt] [--option value]...\n"
                "Example: !text2music ambient rain with soft piano --duration 45\n\n"
                "Parameters:\n"
                "• --duration: Length in seconds, 1 to 180 (default: 30)\n"
                "• --sample_rate: Output sample rate (default: 44100)\n"
                "• --output_format: wav, mp3 or ogg (default: wav)\n"
                "• --seed: Specific seed (optional)\n\n"
                "Pricing: $0.02 per second of audio"
            ),
            price_usd=Money("0.02"),
            per_second_pricing=True,
            default_options=StableAudioOptions(duration=30, sample_rate=44100, output_format="wav"),
            endpoint="/stable-audio-25/text-to-audio",
            required_inputs=("prompt",),
        ),
    ]


def video_to_audio_models() -> List[Model]:
    return [
        Model(
            name="mmaudio-v2",
            capability=Capability.VIDEO2AUDIO,
            description="Generate a soundtrack that matches a video (MMAudio v2)",
            help_text=(
                "Usage: !video2audio [video_url] [prompt] [--option value]...\n"
                "Example: !video2audio https://example.com/waves.mp4 ocean waves and seagulls\n\n"
                "Parameters:\n"
                "• prompt: Describe the sound you want (optional)\n"
                "• --duration: Length of the audio in seconds (optional)\n"
                "• --num_inference_steps: Number of steps (default: 25)\n"
                "• --seed: Specific seed (optional)"
            ),
            price_usd=Money("0.20"),
            default_options=MMAudioOptions(num_inference_steps=25),
            endpoint="/mmaudio-v2",
            required_inputs=("video_url",),
        ),
    ]
