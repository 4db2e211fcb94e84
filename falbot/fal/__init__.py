"""
fal.ai generation core: model catalogue, typed requests, queue client,
dispatchers, delivery and the job orchestrator.
"""

from .client import FalClient
from .registry import ModelRegistry, build_registry
from .types import Capability, FalError, FalErrorType

__all__ = [
    "Capability",
    "FalClient",
    "FalError",
    "FalErrorType",
    "ModelRegistry",
    "build_registry",
]
