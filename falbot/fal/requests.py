"""
Typed job requests, one family per dispatcher [CA]

Each request carries the caller's inputs, the model name, optional typed
options and the progress / queue-info sinks. `extra_options` holds raw
`--key value` flags that the family did not claim; it is kept for logging
and never forwarded to the wire.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .options import ModelOptions
from .types import Capability
from .progress import NullProgress, ProgressCallback

# Receives (queue_id, response_url) once, right after submission
QueueInfoSink = Callable[[str, str], Any]


@dataclass
class JobRequest:
    """Common header for every job family"""
    model: Optional[str] = None
    capability: Optional[Capability] = None
    user_id: str = ""
    options: Optional[ModelOptions] = None
    progress: ProgressCallback = field(default_factory=NullProgress)
    queue_info: Optional[QueueInfoSink] = None
    extra_options: Dict[str, Any] = field(default_factory=dict)

    def inputs(self) -> Dict[str, Any]:
        """Required-input name -> value, as checked by the dispatcher."""
        return {}

    def resolved_capability(self) -> Capability:
        """Explicit capability, else the one implied by the inputs."""
        if self.capability is not None:
            return self.capability
        return self._implied_capability()

    def _implied_capability(self) -> Capability:
        raise NotImplementedError


@dataclass
class ImageRequest(JobRequest):
    prompt: Optional[str] = None
    image_url: Optional[str] = None

    def inputs(self) -> Dict[str, Any]:
        return {"prompt": self.prompt, "image_url": self.image_url}

    def _implied_capability(self) -> Capability:
        return Capability.IMAGE2IMAGE if self.image_url else Capability.TEXT2IMAGE


@dataclass
class VideoRequest(JobRequest):
    prompt: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
    subject_reference_image_url: Optional[str] = None

    def inputs(self) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "image_url": self.image_url,
            "video_url": self.video_url,
            "audio_url": self.audio_url,
            "subject_reference_image_url": self.subject_reference_image_url,
        }

    def _implied_capability(self) -> Capability:
        if self.video_url:
            return Capability.VIDEO2VIDEO
        if self.image_url or self.subject_reference_image_url:
            return Capability.IMAGE2VIDEO
        return Capability.TEXT2VIDEO


@dataclass
class SpeechRequest(JobRequest):
    text: Optional[str] = None

    def inputs(self) -> Dict[str, Any]:
        return {"text": self.text}

    def _implied_capability(self) -> Capability:
        return Capability.TEXT2SPEECH


@dataclass
class AudioRequest(JobRequest):
    """Voice change, music generation and video-to-audio jobs"""
    prompt: Optional[str] = None
    audio_url: Optional[str] = None
    video_url: Optional[str] = None

    def inputs(self) -> Dict[str, Any]:
        return {"prompt": self.prompt, "audio_url": self.audio_url, "video_url": self.video_url}

    def _implied_capability(self) -> Capability:
        if self.audio_url:
            return Capability.AUDIO2AUDIO
        if self.video_url:
            return Capability.VIDEO2AUDIO
        return Capability.TEXT2MUSIC


@dataclass
class TranscriptionRequest(JobRequest):
    audio_url: Optional[str] = None

    def inputs(self) -> Dict[str, Any]:
        return {"audio_url": self.audio_url}

    def _implied_capability(self) -> Capability:
        return Capability.AUDIO2TEXT
