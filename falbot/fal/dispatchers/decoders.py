"""
Final-response decoders, one per output kind

The remote returns slightly different shapes per model; each decoder accepts
the known variants and raises NO_OUTPUT when nothing deliverable came back.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..types import (
    AudioResponse,
    FalError,
    FalErrorType,
    ImageOutput,
    ImageResponse,
    TranscriptionResponse,
    TranscriptionWord,
    VideoResponse,
    decode_json,
)


def _no_output(kind: str, data: Dict[str, Any]) -> FalError:
    return FalError(
        error_type=FalErrorType.NO_OUTPUT,
        message=f"No {kind} in response (keys: {sorted(data.keys())})",
        user_message=f"The generation finished but returned no {kind}.",
    )


def _file_url(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("url") or None
    if isinstance(value, str):
        return value or None
    return None


def decode_image_response(body: bytes) -> ImageResponse:
    """`{images:[...]}`, `{image:{...}}` or `{svg:{...}}`; SVG wins."""
    data = decode_json(body)
    images = [ImageOutput.from_dict(item) for item in data.get("images") or [] if isinstance(item, dict)]
    if isinstance(data.get("image"), dict):
        images.append(ImageOutput.from_dict(data["image"]))

    svg = None
    if isinstance(data.get("svg"), dict):
        svg = ImageOutput.from_dict(data["svg"])
        if not svg.content_type:
            svg.content_type = "image/svg+xml"

    nsfw = data.get("has_nsfw_concepts") or []
    response = ImageResponse(
        images=images,
        seed=data.get("seed"),
        has_nsfw_concepts=[bool(flag) for flag in nsfw] if isinstance(nsfw, list) else [],
        svg=svg,
    )
    if not response.outputs:
        raise _no_output("image", data)
    return response


def decode_video_response(body: bytes) -> VideoResponse:
    """`{video:{url}}`, `{url}` or `{video_url}`; first non-empty wins."""
    data = decode_json(body)
    response = VideoResponse(
        video_url=_file_url(data.get("video_url")),
        plain_url=_file_url(data.get("url")),
        nested_video_url=_file_url(data.get("video")),
        seed=data.get("seed"),
    )
    if not response.url():
        raise _no_output("video", data)
    return response


def decode_audio_response(body: bytes) -> AudioResponse:
    """
    `{audio:{url,...}}` with a top-level duration.

    Models that return a video with a generated soundtrack answer with
    `{video:{url,...}}` instead; that file is delivered as is.
    """
    data = decode_json(body)
    audio = data.get("audio")
    if not isinstance(audio, dict):
        audio = data.get("audio_file") if isinstance(data.get("audio_file"), dict) else None
    default_type = "audio/mpeg"
    if audio is None and isinstance(data.get("video"), dict):
        audio = data["video"]
        default_type = "video/mp4"
    if audio is None and isinstance(data.get("audio_url"), str):
        audio = {"url": data["audio_url"]}

    if not audio or not audio.get("url"):
        raise _no_output("audio", data)

    duration = data.get("duration")
    if duration is None and data.get("duration_ms") is not None:
        duration = float(data["duration_ms"]) / 1000.0

    return AudioResponse(
        url=audio["url"],
        content_type=audio.get("content_type") or default_type,
        file_name=audio.get("file_name"),
        file_size=audio.get("file_size"),
        duration=float(duration) if duration is not None else None,
    )


def decode_transcription_response(body: bytes) -> TranscriptionResponse:
    data = decode_json(body)
    text = data.get("text")
    if text is None:
        raise _no_output("transcript", data)
    words = [
        TranscriptionWord(
            text=str(word.get("text", "")),
            start=word.get("start"),
            end=word.get("end"),
            type=word.get("type"),
            speaker_id=word.get("speaker_id"),
        )
        for word in data.get("words") or []
        if isinstance(word, dict)
    ]
    return TranscriptionResponse(
        text=str(text),
        language_code=data.get("language_code"),
        language_probability=data.get("language_probability"),
        words=words,
    )
