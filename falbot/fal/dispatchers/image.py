"""Text-to-image and image-to-image jobs."""

from typing import Any, Callable, Dict

from ..models import Model
from ..requests import ImageRequest
from ..types import Capability
from .base import BaseDispatcher
from .decoders import decode_image_response


class ImageDispatcher(BaseDispatcher):
    request_type = ImageRequest
    capabilities = (Capability.TEXT2IMAGE, Capability.IMAGE2IMAGE)

    def normalize_inputs(self, model: Model, inputs: Dict[str, Any]) -> Dict[str, Any]:
        # Style-transfer endpoints take the image only
        if model.capability == Capability.IMAGE2IMAGE and "prompt" not in model.required_inputs:
            inputs.pop("prompt", None)
        return inputs

    def decoder_for(self, model: Model) -> Callable[[bytes], Any]:
        return decode_image_response
