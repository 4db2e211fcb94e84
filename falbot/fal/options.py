"""
Typed per-model options with validation [IV][CMV]

Every family is a dataclass whose fields are all Optional: None means the
caller did not provide the value, so it is filled from the model defaults and,
if still None, left out of the wire body entirely. Validation runs before any
network call and raises FalError(INVALID_OPTIONS).
"""

from __future__ import annotations

import dataclasses
import math
import typing
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Collection, Dict, Mapping, Optional

from .types import FalError, FalErrorType, invalid_options

IMAGE_SIZES = (
    "square_hd",
    "square",
    "portrait_4_3",
    "portrait_16_9",
    "landscape_4_3",
    "landscape_16_9",
)
IMAGE_OUTPUT_FORMATS = ("jpeg", "png")
SAFETY_TOLERANCES = ("1", "2", "3", "4", "5", "6")
DEFAULT_NEGATIVE_PROMPT = "blur, distort, and low quality"

MINIMAX_VOICES = (
    "Wise_Woman", "Friendly_Person", "Inspirational_girl",
    "Deep_Voice_Man", "Calm_Woman", "Casual_Guy",
    "Lively_Girl", "Patient_Man", "Young_Knight",
    "Determined_Man", "Lovely_Girl", "Decent_Boy",
    "Imposing_Manner", "Elegant_Man", "Abbess",
    "Sweet_Girl_2", "Exuberant_Girl",
)
ELEVENLABS_VOICES = (
    "Aria", "Roger", "Sarah", "Laura", "Charlie", "George", "Callum",
    "River", "Liam", "Charlotte", "Alice", "Matilda", "Will", "Jessica",
    "Eric", "Chris", "Brian", "Daniel", "Lily", "Bill", "Rachel",
)
EMOTIONS = ("happy", "sad", "angry", "fearful", "disgusted", "surprised", "neutral")

_TRUE_WORDS = {"1", "true", "yes", "on", "y"}
_FALSE_WORDS = {"0", "false", "no", "off", "n"}


def _check_choice(name: str, value: Any, choices: Collection[Any]) -> None:
    if value is not None and value not in choices:
        raise invalid_options(
            f"{name} must be one of: {', '.join(str(c) for c in choices)} (got {value})"
        )


def _check_range(name: str, value: Optional[float], low: float, high: float) -> None:
    if value is None:
        return
    if not math.isfinite(value) or value < low or value > high:
        raise invalid_options(f"{name} must be between {low} and {high} (got {value})")


def _check_non_negative(name: str, value: Optional[float]) -> None:
    if value is None:
        return
    if not math.isfinite(value) or value < 0:
        raise invalid_options(f"{name} must be a non-negative number (got {value})")


def _check_positive(name: str, value: Optional[float]) -> None:
    if value is None:
        return
    if not math.isfinite(value) or value <= 0:
        raise invalid_options(f"{name} must be positive (got {value})")


def _unwrap_optional(annotation: Any) -> Any:
    if typing.get_origin(annotation) is typing.Union:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _coerce(name: str, raw: Any, target: Any) -> Any:
    if not isinstance(raw, str):
        if target is float and isinstance(raw, int) and not isinstance(raw, bool):
            return float(raw)
        return raw
    text = raw.strip()
    try:
        if target is bool:
            lowered = text.lower()
            if lowered in _TRUE_WORDS:
                return True
            if lowered in _FALSE_WORDS:
                return False
            raise ValueError(text)
        if target is int:
            # Durations are accepted as "8" or "8s"
            if "duration" in name and text.lower().endswith("s"):
                text = text[:-1]
            return int(text)
        if target is float:
            if "duration" in name and text.lower().endswith("s"):
                text = text[:-1]
            return float(text)
    except ValueError:
        kind = {bool: "true/false", int: "a whole number", float: "a number"}[target]
        raise invalid_options(f"{name} must be {kind} (got {raw})")
    return text


@dataclass
class ModelOptions:
    """Base for all option families."""

    # field name -> wire key, where the wire differs
    WIRE_NAMES: ClassVar[Dict[str, str]] = {}
    # flag spelling -> field name, for user-facing short forms
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {}
    # field holding the requested output length, for per-second pricing
    DURATION_FIELD: ClassVar[Optional[str]] = None

    def validate(self) -> None:
        """Raise FalError(INVALID_OPTIONS) when an explicit value is out of range."""
        pass

    def with_defaults(self, defaults: Optional["ModelOptions"]) -> "ModelOptions":
        """Return a copy with None fields filled from defaults of the same family."""
        if defaults is None:
            return dataclasses.replace(self)
        if not isinstance(defaults, type(self)) and not isinstance(self, type(defaults)):
            raise FalError(
                error_type=FalErrorType.INVALID_OPTIONS,
                message=f"{type(self).__name__} cannot take defaults from {type(defaults).__name__}",
                user_message="These options do not apply to the selected model.",
            )
        changes = {}
        default_names = {f.name for f in fields(defaults)}
        for f in fields(self):
            if getattr(self, f.name) is None and f.name in default_names:
                default_value = getattr(defaults, f.name)
                if default_value is not None:
                    changes[f.name] = default_value
        return dataclasses.replace(self, **changes)

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            body[self.WIRE_NAMES.get(f.name, f.name)] = value
        return body

    @classmethod
    def field_names(cls) -> typing.List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_flags(cls, flags: Mapping[str, Any]) -> "ModelOptions":
        """
        Build options from parsed `--key value` flags.

        Keys are matched against field names (hyphens read as underscores) and
        FLAG_ALIASES; unknown keys are ignored. Values are coerced using the
        field annotations.
        """
        hints = typing.get_type_hints(cls)
        known = set(cls.field_names())
        values: Dict[str, Any] = {}
        for key, raw in flags.items():
            name = key.replace("-", "_").lstrip("_")
            name = cls.FLAG_ALIASES.get(name, name)
            if name not in known:
                continue
            target = _unwrap_optional(hints[name])
            values[name] = _coerce(name, raw, target)
        return cls(**values)

    def billable_seconds(self) -> Optional[float]:
        """Requested output length in seconds, or None when unknown."""
        if self.DURATION_FIELD is None:
            return None
        value = getattr(self, self.DURATION_FIELD, None)
        if value is None:
            return None
        return float(value)


# --- image ---


@dataclass
class FastSDXLOptions(ModelOptions):
    image_size: Optional[str] = None
    num_inference_steps: Optional[int] = None
    guidance_scale: Optional[float] = None
    negative_prompt: Optional[str] = None
    num_images: Optional[int] = None
    seed: Optional[int] = None
    enable_safety_checker: Optional[bool] = None

    def validate(self) -> None:
        _check_choice("image_size", self.image_size, IMAGE_SIZES)
        _check_non_negative("num_inference_steps", self.num_inference_steps)
        _check_non_negative("guidance_scale", self.guidance_scale)
        _check_non_negative("num_images", self.num_images)


@dataclass
class HiDreamOptions(ModelOptions):
    negative_prompt: Optional[str] = None
    image_size: Optional[str] = None
    num_inference_steps: Optional[int] = None
    seed: Optional[int] = None
    guidance_scale: Optional[float] = None
    num_images: Optional[int] = None
    enable_safety_checker: Optional[bool] = None
    output_format: Optional[str] = None

    def validate(self) -> None:
        _check_choice("image_size", self.image_size, IMAGE_SIZES)
        _check_positive("num_inference_steps", self.num_inference_steps)
        _check_non_negative("guidance_scale", self.guidance_scale)
        _check_non_negative("num_images", self.num_images)
        _check_choice("output_format", self.output_format, IMAGE_OUTPUT_FORMATS)


@dataclass
class FluxSchnellOptions(ModelOptions):
    image_size: Optional[str] = None
    num_inference_steps: Optional[int] = None
    seed: Optional[int] = None
    num_images: Optional[int] = None
    enable_safety_checker: Optional[bool] = None

    def validate(self) -> None:
        _check_choice("image_size", self.image_size, IMAGE_SIZES)
        _check_non_negative("num_inference_steps", self.num_inference_steps)
        _check_non_negative("num_images", self.num_images)


@dataclass
class FluxDevOptions(FluxSchnellOptions):
    guidance_scale: Optional[float] = None
    output_format: Optional[str] = None

    def validate(self) -> None:
        super().validate()
        _check_non_negative("guidance_scale", self.guidance_scale)
        _check_choice("output_format", self.output_format, IMAGE_OUTPUT_FORMATS)


@dataclass
class FluxProOptions(ModelOptions):
    image_size: Optional[str] = None
    seed: Optional[int] = None
    num_images: Optional[int] = None
    enable_safety_checker: Optional[bool] = None
    safety_tolerance: Optional[str] = None
    output_format: Optional[str] = None

    def validate(self) -> None:
        _check_choice("image_size", self.image_size, IMAGE_SIZES)
        _check_non_negative("num_images", self.num_images)
        _check_choice("safety_tolerance", self.safety_tolerance, SAFETY_TOLERANCES)
        _check_choice("output_format", self.output_format, IMAGE_OUTPUT_FORMATS)


@dataclass
class FluxProUltraOptions(ModelOptions):
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {"aspect": "aspect_ratio"}

    seed: Optional[int] = None
    num_images: Optional[int] = None
    enable_safety_checker: Optional[bool] = None
    safety_tolerance: Optional[str] = None
    output_format: Optional[str] = None
    aspect_ratio: Optional[str] = None
    raw: Optional[bool] = None

    ASPECT_RATIOS: ClassVar[tuple] = ("21:9", "16:9", "4:3", "3:2", "1:1", "2:3", "3:4", "9:16", "9:21")

    def validate(self) -> None:
        _check_non_negative("num_images", self.num_images)
        _check_choice("safety_tolerance", self.safety_tolerance, SAFETY_TOLERANCES)
        _check_choice("output_format", self.output_format, IMAGE_OUTPUT_FORMATS)
        _check_choice("aspect_ratio", self.aspect_ratio, self.ASPECT_RATIOS)


@dataclass
class StableDiffusion35Options(ModelOptions):
    negative_prompt: Optional[str] = None
    image_size: Optional[str] = None
    num_inference_steps: Optional[int] = None
    seed: Optional[int] = None
    guidance_scale: Optional[float] = None
    num_images: Optional[int] = None
    enable_safety_checker: Optional[bool] = None
    prompt_expansion: Optional[bool] = None
    output_format: Optional[str] = None

    def validate(self) -> None:
        _check_choice("image_size", self.image_size, IMAGE_SIZES)
        _check_non_negative("num_inference_steps", self.num_inference_steps)
        _check_non_negative("guidance_scale", self.guidance_scale)
        _check_non_negative("num_images", self.num_images)
        _check_choice("output_format", self.output_format, IMAGE_OUTPUT_FORMATS)


@dataclass
class ImageTransformOptions(ModelOptions):
    """Style-transfer and vectorisation models take only the input image."""
    pass


# --- video ---


@dataclass
class Veo2Options(ModelOptions):
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {"aspect": "aspect_ratio"}
    DURATION_FIELD: ClassVar[Optional[str]] = "duration"

    aspect_ratio: Optional[str] = None
    duration: Optional[int] = None

    def validate(self) -> None:
        _check_choice("aspect_ratio", self.aspect_ratio, ("auto", "auto_prefer_portrait", "16:9", "9:16"))
        _check_choice("duration", self.duration, (5, 6, 7, 8))

    def to_wire(self) -> Dict[str, Any]:
        body = super().to_wire()
        if "duration" in body:
            body["duration"] = f"{body['duration']}s"
        return body


@dataclass
class KlingVideoOptions(ModelOptions):
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {"aspect": "aspect_ratio", "cfg": "cfg_scale"}
    DURATION_FIELD: ClassVar[Optional[str]] = "duration"

    duration: Optional[int] = None
    aspect_ratio: Optional[str] = None
    negative_prompt: Optional[str] = None
    cfg_scale: Optional[float] = None

    ASPECT_RATIOS: ClassVar[tuple] = ("16:9", "9:16")

    def validate(self) -> None:
        _check_choice("aspect_ratio", self.aspect_ratio, self.ASPECT_RATIOS)
        if self.duration is not None and self.duration < 5:
            raise invalid_options(f"duration must be at least 5 seconds (got {self.duration})")
        _check_range("cfg_scale", self.cfg_scale, 0.0, 1.0)

    def to_wire(self) -> Dict[str, Any]:
        body = super().to_wire()
        if "duration" in body:
            body["duration"] = str(body["duration"])
        if not body.get("negative_prompt"):
            body.pop("negative_prompt", None)
        return body


@dataclass
class KlingV25Options(KlingVideoOptions):
    ASPECT_RATIOS: ClassVar[tuple] = ("16:9", "9:16", "1:1")

    def validate(self) -> None:
        super().validate()
        _check_choice("duration", self.duration, (5, 10))


@dataclass
class MinimaxVideoOptions(ModelOptions):
    prompt_optimizer: Optional[bool] = None


@dataclass
class Veo3Options(ModelOptions):
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {
        "aspect": "aspect_ratio",
        "audio": "generate_audio",
    }
    DURATION_FIELD: ClassVar[Optional[str]] = "duration"

    aspect_ratio: Optional[str] = None
    duration: Optional[int] = None
    resolution: Optional[str] = None
    generate_audio: Optional[bool] = None
    auto_fix: Optional[bool] = None
    negative_prompt: Optional[str] = None
    seed: Optional[int] = None

    def validate(self) -> None:
        _check_choice("aspect_ratio", self.aspect_ratio, ("auto", "16:9", "9:16"))
        _check_choice("duration", self.duration, (4, 6, 8))
        _check_choice("resolution", self.resolution, ("720p", "1080p"))

    def to_wire(self) -> Dict[str, Any]:
        body = super().to_wire()
        if "duration" in body:
            body["duration"] = f"{body['duration']}s"
        return body


@dataclass
class Veo31FastOptions(Veo3Options):
    pass


@dataclass
class LumaOptions(ModelOptions):
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {"aspect": "aspect_ratio"}

    aspect_ratio: Optional[str] = None
    loop: Optional[bool] = None

    def validate(self) -> None:
        _check_choice("aspect_ratio", self.aspect_ratio, ("16:9", "9:16", "4:3", "3:4", "21:9", "9:21", "1:1"))


@dataclass
class LTXVideoOptions(ModelOptions):
    negative_prompt: Optional[str] = None
    num_frames: Optional[int] = None
    frame_rate: Optional[int] = None
    num_inference_steps: Optional[int] = None
    guidance_scale: Optional[float] = None
    seed: Optional[int] = None
    enable_safety_checker: Optional[bool] = None

    def validate(self) -> None:
        _check_non_negative("num_frames", self.num_frames)
        _check_non_negative("frame_rate", self.frame_rate)
        _check_non_negative("num_inference_steps", self.num_inference_steps)
        _check_non_negative("guidance_scale", self.guidance_scale)


@dataclass
class TopazUpscaleOptions(ModelOptions):
    model: Optional[str] = None
    output_type: Optional[str] = None

    def validate(self) -> None:
        _check_choice("output_type", self.output_type, ("mp4", "mov"))


@dataclass
class SyncLipsyncOptions(ModelOptions):
    model: Optional[str] = None
    output_type: Optional[str] = None

    def validate(self) -> None:
        _check_choice("model", self.model, ("wav2lip", "wav2lip_gan"))
        _check_choice("output_type", self.output_type, ("mp4", "webm"))


@dataclass
class KlingMotionControlOptions(ModelOptions):
    WIRE_NAMES: ClassVar[Dict[str, str]] = {"orientation": "character_orientation"}
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {
        "keep_sound": "keep_original_sound",
        "character_orientation": "orientation",
    }

    orientation: Optional[str] = None
    keep_original_sound: Optional[bool] = None

    def validate(self) -> None:
        _check_choice("orientation", self.orientation, ("image", "video"))


# --- speech ---


@dataclass
class MinimaxTTSOptions(ModelOptions):
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {"voice": "voice_id", "volume": "vol"}

    VOICE_KEYS: ClassVar[tuple] = ("voice_id", "speed", "vol", "pitch", "emotion", "english_normalization")
    AUDIO_KEYS: ClassVar[tuple] = ("sample_rate", "bitrate", "format", "channel")

    voice_id: Optional[str] = None
    speed: Optional[float] = None
    vol: Optional[float] = None
    pitch: Optional[int] = None
    emotion: Optional[str] = None
    english_normalization: Optional[bool] = None
    sample_rate: Optional[int] = None
    bitrate: Optional[int] = None
    format: Optional[str] = None
    channel: Optional[int] = None

    def validate(self) -> None:
        _check_choice("voice_id", self.voice_id, MINIMAX_VOICES)
        _check_range("speed", self.speed, 0.5, 2.0)
        _check_range("vol", self.vol, 0.0, 10.0)
        _check_range("pitch", self.pitch, -12, 12)
        _check_choice("emotion", self.emotion, EMOTIONS)
        _check_choice("sample_rate", self.sample_rate, (8000, 16000, 22050, 24000, 32000, 44100))
        _check_choice("bitrate", self.bitrate, (32000, 64000, 128000, 256000))
        _check_choice("format", self.format, ("mp3", "pcm", "flac"))
        _check_choice("channel", self.channel, (1, 2))

    def to_wire(self) -> Dict[str, Any]:
        flat = super().to_wire()
        body: Dict[str, Any] = {}
        voice_setting = {k: flat[k] for k in self.VOICE_KEYS if k in flat}
        audio_setting = {k: flat[k] for k in self.AUDIO_KEYS if k in flat}
        if voice_setting:
            body["voice_setting"] = voice_setting
        if audio_setting:
            body["audio_setting"] = audio_setting
        return body


@dataclass
class ChatterboxOptions(ModelOptions):
    audio_prompt_url: Optional[str] = None
    exaggeration: Optional[float] = None
    cfg_weight: Optional[float] = None
    seed: Optional[int] = None

    def validate(self) -> None:
        _check_range("exaggeration", self.exaggeration, 0.0, 1.0)
        _check_range("cfg_weight", self.cfg_weight, 0.0, 1.0)


@dataclass
class ElevenLabsDialogOptions(ModelOptions):
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {"voice": "voice_id"}

    voice_id: Optional[str] = None
    output_format: Optional[str] = None
    stability: Optional[float] = None
    similarity_boost: Optional[float] = None

    def validate(self) -> None:
        _check_range("stability", self.stability, 0.0, 1.0)
        _check_range("similarity_boost", self.similarity_boost, 0.0, 1.0)


@dataclass
class ElevenLabsTTSOptions(ModelOptions):
    voice: Optional[str] = None
    stability: Optional[float] = None
    similarity_boost: Optional[float] = None
    style: Optional[float] = None
    speed: Optional[float] = None
    timestamps: Optional[bool] = None
    language_code: Optional[str] = None

    def validate(self) -> None:
        _check_range("stability", self.stability, 0.0, 1.0)
        _check_range("similarity_boost", self.similarity_boost, 0.0, 1.0)
        _check_range("style", self.style, 0.0, 1.0)
        _check_range("speed", self.speed, 0.25, 4.0)


# --- audio ---


@dataclass
class VoiceChangerOptions(ModelOptions):
    voice: Optional[str] = None
    output_format: Optional[str] = None
    remove_background_noise: Optional[bool] = None
    seed: Optional[int] = None


@dataclass
class MinimaxMusicOptions(ModelOptions):
    DURATION_FIELD: ClassVar[Optional[str]] = "duration"

    duration: Optional[int] = None
    reference_audio_url: Optional[str] = None

    def validate(self) -> None:
        _check_range("duration", self.duration, 1, 300)


@dataclass
class StableAudioOptions(ModelOptions):
    WIRE_NAMES: ClassVar[Dict[str, str]] = {"duration": "seconds_total"}
    DURATION_FIELD: ClassVar[Optional[str]] = "duration"

    duration: Optional[float] = None
    sample_rate: Optional[int] = None
    output_format: Optional[str] = None
    seed: Optional[int] = None

    def validate(self) -> None:
        _check_range("duration", self.duration, 1, 180)
        _check_positive("sample_rate", self.sample_rate)
        _check_choice("output_format", self.output_format, ("wav", "mp3", "ogg"))


@dataclass
class MMAudioOptions(ModelOptions):
    duration: Optional[float] = None
    num_inference_steps: Optional[int] = None
    seed: Optional[int] = None

    def validate(self) -> None:
        _check_positive("duration", self.duration)
        _check_non_negative("num_inference_steps", self.num_inference_steps)


# --- transcription ---


@dataclass
class ScribeV2Options(ModelOptions):
    FLAG_ALIASES: ClassVar[Dict[str, str]] = {"language_code": "language"}

    task: Optional[str] = None
    language: Optional[str] = None
    chunk_level: Optional[str] = None
    diarize: Optional[bool] = None
    num_speakers: Optional[int] = None

    def validate(self) -> None:
        _check_choice("task", self.task, ("transcribe", "translate"))
        _check_choice("chunk_level", self.chunk_level, ("segment", "word"))
        _check_range("num_speakers", self.num_speakers, 1, 50)
