"""
Model registry [CA]

Holds the catalogue indexed by name plus the global and per-user default
model for each capability. The catalogue is filled once at startup by
`build_registry()` and only read afterwards; the default maps are guarded by
a short-held lock.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from falbot.utils.logging import get_logger

from .models import Model, all_models
from .types import Capability, FalError, FalErrorType

logger = get_logger(__name__)

DEFAULT_MODELS: Dict[Capability, str] = {
    Capability.TEXT2IMAGE: "fast-sdxl",
    Capability.IMAGE2IMAGE: "ghiblify",
    Capability.TEXT2VIDEO: "kling-video-text",
    Capability.IMAGE2VIDEO: "veo2",
    Capability.VIDEO2VIDEO: "topaz-upscale-video",
    Capability.TEXT2SPEECH: "minimax-tts/text-to-speech",
    Capability.AUDIO2AUDIO: "elevenlabs-voice-changer",
    Capability.TEXT2MUSIC: "minimax-music-v2",
    Capability.VIDEO2AUDIO: "mmaudio-v2",
    Capability.AUDIO2TEXT: "elevenlabs/speech-to-text/scribe-v2",
}


def _unknown_model(name: str, capability: Optional[Capability] = None) -> FalError:
    where = f" for {capability.value}" if capability else ""
    return FalError(
        error_type=FalErrorType.UNKNOWN_MODEL,
        message=f"Unknown model '{name}'{where}",
        user_message=f"Unknown model '{name}'{where}. Use !listmodels to see available models.",
    )


class ModelRegistry:
    """Catalogue of models plus default-model selection."""

    def __init__(self):
        self._models: Dict[str, Model] = {}
        self._global_defaults: Dict[Capability, str] = {}
        self._user_defaults: Dict[str, Dict[Capability, str]] = {}
        self._lock = threading.Lock()

    def register(self, model: Model) -> None:
        """Add a model; duplicate names and invalid default options are rejected."""
        if model.name in self._models:
            raise ValueError(f"Model '{model.name}' is already registered")
        try:
            model.default_options.validate()
        except FalError as e:
            raise ValueError(f"Model '{model.name}' has invalid default options: {e.message}") from e
        self._models[model.name] = model

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, name: str) -> bool:
        return name in self._models

    def get_model(self, name: str, capability: Optional[Capability] = None) -> Model:
        model = self._models.get(name)
        if model is None:
            raise _unknown_model(name, capability)
        if capability is not None and model.capability != capability:
            raise FalError(
                error_type=FalErrorType.CAPABILITY_MISMATCH,
                message=f"Model '{name}' is {model.capability.value}, not {capability.value}",
                user_message=(
                    f"Model '{name}' is a {model.capability.value} model "
                    f"and cannot be used for {capability.value}."
                ),
            )
        return model

    def get_models(self, capability: Capability) -> List[Model]:
        return [m for m in self._models.values() if m.capability == capability]

    def get_current_model(self, capability: Capability, user_id: str = "") -> Model:
        """User override first, then the global default for the capability."""
        with self._lock:
            name = None
            if user_id:
                name = self._user_defaults.get(user_id, {}).get(capability)
            if name is None:
                name = self._global_defaults.get(capability)
        if name is None:
            raise FalError(
                error_type=FalErrorType.UNKNOWN_MODEL,
                message=f"No default model for {capability.value}",
                user_message=f"No model is configured for {capability.value}.",
            )
        return self.get_model(name, capability)

    def set_current_model(self, capability: Capability, name: str, user_id: str = "") -> Model:
        """Set the global default (empty user id) or a user's override."""
        model = self.get_model(name, capability)
        with self._lock:
            if user_id:
                self._user_defaults.setdefault(user_id, {})[capability] = name
            else:
                self._global_defaults[capability] = name
        logger.info(
            f"Default model for {capability.value} set to {name}",
            extra={
                "subsys": "registry",
                "event": "registry.set_model",
                "detail": {"capability": capability.value, "model": name, "user_id": user_id or None},
            },
        )
        return model

    def clear_user_defaults(self, user_id: str, capability: Optional[Capability] = None) -> None:
        """Drop one or all of a user's overrides."""
        with self._lock:
            overrides = self._user_defaults.get(user_id)
            if not overrides:
                return
            if capability is None:
                overrides.clear()
            else:
                overrides.pop(capability, None)
            if not overrides:
                self._user_defaults.pop(user_id, None)


def build_registry(models: Optional[List[Model]] = None) -> ModelRegistry:
    """Register the catalogue and the global defaults."""
    registry = ModelRegistry()
    for model in models if models is not None else all_models():
        registry.register(model)
    for capability, name in DEFAULT_MODELS.items():
        if name in registry:
            registry.set_current_model(capability, name)
    logger.info(
        f"Model registry ready with {len(registry)} models",
        extra={"subsys": "registry", "event": "registry.ready"},
    )
    return registry
