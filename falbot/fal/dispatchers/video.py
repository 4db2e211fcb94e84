"""Text-to-video, image-to-video and video-to-video jobs."""

from typing import Any, Callable, Dict

from ..models import Model
from ..requests import VideoRequest
from ..types import Capability, FalError, FalErrorType
from .base import BaseDispatcher
from .decoders import decode_video_response


class VideoDispatcher(BaseDispatcher):
    request_type = VideoRequest
    capabilities = (Capability.TEXT2VIDEO, Capability.IMAGE2VIDEO, Capability.VIDEO2VIDEO)

    def normalize_inputs(self, model: Model, inputs: Dict[str, Any]) -> Dict[str, Any]:
        # Subject-reference models read the supplied image as the subject
        if "subject_reference_image_url" in model.required_inputs:
            if not inputs.get("subject_reference_image_url") and inputs.get("image_url"):
                inputs["subject_reference_image_url"] = inputs.pop("image_url")
        if inputs.get("image_url") and not self.accepts_image(model):
            raise FalError(
                error_type=FalErrorType.INVALID_OPTIONS,
                message=f"{model.name} has no image input",
                user_message=f"image_url is not supported for {model.name} model",
            )
        return inputs

    @staticmethod
    def accepts_image(model: Model) -> bool:
        return "image_url" in model.required_inputs or model.image_endpoint is not None

    def endpoint_for(self, model: Model, inputs: Dict[str, Any]) -> str:
        if model.image_endpoint and inputs.get("image_url"):
            return model.image_endpoint
        return model.endpoint

    def decoder_for(self, model: Model) -> Callable[[bytes], Any]:
        return decode_video_response
