"""
Core types for the fal.ai generation pipeline

Defines capabilities, queue descriptors, typed job responses and the
structured FalError raised anywhere between request validation and the
final fetch [CA][REH].
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Capability(Enum):
    """Kind of generation a model performs"""
    TEXT2IMAGE = "text2image"
    IMAGE2IMAGE = "image2image"
    TEXT2SPEECH = "text2speech"
    AUDIO2AUDIO = "audio2audio"
    TEXT2VIDEO = "text2video"
    IMAGE2VIDEO = "image2video"
    VIDEO2VIDEO = "video2video"
    VIDEO2AUDIO = "video2audio"
    TEXT2MUSIC = "text2music"
    AUDIO2TEXT = "audio2text"

    @classmethod
    def parse(cls, value: str) -> "Capability":
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise FalError(
                error_type=FalErrorType.INVALID_OPTIONS,
                message=f"Unknown capability '{value}'",
                user_message=f"Unknown model type '{value}'. Valid types: {valid}",
            )


class QueueStatus(Enum):
    """Remote job status; UNKNOWN keeps unrecognised wire values flowing"""
    IN_QUEUE = "IN_QUEUE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "QueueStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (QueueStatus.COMPLETED, QueueStatus.FAILED)


class FalErrorType(Enum):
    """Categorized error types for proper handling"""
    INVALID_OPTIONS = "invalid_options"
    MISSING_REQUIRED_FIELD = "missing_required_field"
    UNKNOWN_MODEL = "unknown_model"
    CAPABILITY_MISMATCH = "capability_mismatch"
    GENERATION_FAILED = "generation_failed"
    HTTP_ERROR = "http_error"
    DECODE_ERROR = "decode_error"
    NO_OUTPUT = "no_output"
    NETWORK_ERROR = "network_error"


USER_ERROR_TYPES = frozenset(
    {
        FalErrorType.INVALID_OPTIONS,
        FalErrorType.MISSING_REQUIRED_FIELD,
        FalErrorType.UNKNOWN_MODEL,
        FalErrorType.CAPABILITY_MISMATCH,
    }
)


@dataclass
class QueueLog:
    message: str
    level: Optional[str] = None
    source: Optional[str] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueueLog":
        return cls(
            message=str(data.get("message", "")),
            level=data.get("level"),
            source=data.get("source"),
            timestamp=data.get("timestamp"),
        )


@dataclass
class FalError(Exception):
    """Structured error with categorization and user-friendly messaging"""
    error_type: FalErrorType
    message: str
    user_message: str = "The generation service failed. Please try again later."
    status_code: Optional[int] = None
    logs: List[QueueLog] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.error_type.value}: {self.message}"

    @property
    def is_user_error(self) -> bool:
        """True when the caller's input is at fault and the message is safe to show."""
        return self.error_type in USER_ERROR_TYPES


def invalid_options(message: str) -> FalError:
    return FalError(
        error_type=FalErrorType.INVALID_OPTIONS,
        message=message,
        user_message=f"Invalid options: {message}",
    )


@dataclass
class QueueDescriptor:
    """The remote queue's status object for one job"""
    queue_id: Optional[str] = None
    response_url: Optional[str] = None
    status_url: Optional[str] = None
    cancel_url: Optional[str] = None
    status: QueueStatus = QueueStatus.UNKNOWN
    raw_status: Optional[str] = None
    position: Optional[int] = None
    eta_seconds: Optional[int] = None
    logs: List[QueueLog] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueueDescriptor":
        raw_status = data.get("status")
        position = data.get("queue_position", data.get("position"))
        eta = data.get("eta")
        logs = data.get("logs") or []
        return cls(
            queue_id=data.get("request_id") or data.get("queue_id"),
            response_url=data.get("response_url"),
            status_url=data.get("status_url"),
            cancel_url=data.get("cancel_url"),
            status=QueueStatus.from_wire(raw_status),
            raw_status=raw_status,
            position=int(position) if position is not None else None,
            eta_seconds=int(eta) if eta is not None else None,
            logs=[QueueLog.from_dict(entry) for entry in logs if isinstance(entry, dict)],
        )


def decode_json(body: bytes) -> Dict[str, Any]:
    """Parse a JSON object body, mapping failures to DECODE_ERROR."""
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise FalError(
            error_type=FalErrorType.DECODE_ERROR,
            message=f"Response body is not valid JSON: {e}",
        ) from e
    if not isinstance(data, dict):
        raise FalError(
            error_type=FalErrorType.DECODE_ERROR,
            message=f"Expected a JSON object, got {type(data).__name__}",
        )
    return data


@dataclass
class ImageOutput:
    url: str
    content_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageOutput":
        return cls(
            url=data.get("url", ""),
            content_type=data.get("content_type"),
            width=data.get("width"),
            height=data.get("height"),
        )


@dataclass
class ImageResponse:
    images: List[ImageOutput] = field(default_factory=list)
    seed: Optional[int] = None
    has_nsfw_concepts: List[bool] = field(default_factory=list)
    svg: Optional[ImageOutput] = None

    @property
    def outputs(self) -> List[ImageOutput]:
        """Deliverable images; the SVG form takes precedence when present."""
        if self.svg is not None and self.svg.url:
            return [self.svg]
        return [image for image in self.images if image.url]


@dataclass
class VideoResponse:
    video_url: Optional[str] = None
    plain_url: Optional[str] = None
    nested_video_url: Optional[str] = None
    seed: Optional[int] = None

    def url(self) -> str:
        """First non-empty of video.url, url, video_url."""
        return self.nested_video_url or self.plain_url or self.video_url or ""


@dataclass
class AudioResponse:
    url: str
    content_type: str = "audio/mpeg"
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    duration: Optional[float] = None


@dataclass
class TranscriptionWord:
    text: str
    start: Optional[float] = None
    end: Optional[float] = None
    type: Optional[str] = None
    speaker_id: Optional[str] = None


@dataclass
class TranscriptionResponse:
    text: str
    language_code: Optional[str] = None
    language_probability: Optional[float] = None
    words: List[TranscriptionWord] = field(default_factory=list)

    @property
    def speakers(self) -> List[str]:
        seen: List[str] = []
        for word in self.words:
            if word.speaker_id and word.speaker_id not in seen:
                seen.append(word.speaker_id)
        return seen
