"""Model catalogue."""

from typing import List

from .audio import audio_to_audio_models, text_to_music_models, video_to_audio_models
from .base import Model
from .image import image_to_image_models, text_to_image_models
from .speech import text_to_speech_models
from .transcription import audio_to_text_models
from .video import image_to_video_models, text_to_video_models, video_to_video_models

__all__ = ["Model", "all_models"]


def all_models() -> List[Model]:
    """Every model the bot offers, in listing order."""
    return [
        *text_to_image_models(),
        *image_to_image_models(),
        *text_to_speech_models(),
        *audio_to_audio_models(),
        *text_to_video_models(),
        *image_to_video_models(),
        *video_to_video_models(),
        *video_to_audio_models(),
        *text_to_music_models(),
        *audio_to_text_models(),
    ]
