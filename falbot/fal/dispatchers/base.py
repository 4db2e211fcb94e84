"""
Shared dispatcher pipeline [CA][IV]

Every dispatcher runs the same steps before touching the network:

1. Resolve the model (explicit name or the caller's current default) and
   check it belongs to the request's capability.
2. Check the model's required inputs are present.
3. Fill omitted options from the model defaults and validate them.
4. Build the wire body, pick the endpoint and hand a decoder to the client.

Any failure in steps 1-3 raises a user-facing FalError with no I/O done.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Tuple

from falbot.utils.logging import get_logger

from ..client import FalClient
from ..models import Model
from ..options import ModelOptions
from ..registry import ModelRegistry
from ..requests import JobRequest
from ..types import Capability, FalError, FalErrorType

logger = get_logger(__name__)


class BaseDispatcher:
    """Resolve, validate and submit one family of job requests."""

    request_type: type = JobRequest
    capabilities: Tuple[Capability, ...] = ()

    def __init__(self, client: FalClient, registry: ModelRegistry):
        self.client = client
        self.registry = registry

    def resolve_model(self, request: JobRequest) -> Model:
        capability = request.resolved_capability()
        if capability not in self.capabilities:
            raise FalError(
                error_type=FalErrorType.CAPABILITY_MISMATCH,
                message=f"{type(self).__name__} does not handle {capability.value}",
                user_message=f"{capability.value} is not supported by this command.",
            )
        if request.model:
            return self.registry.get_model(request.model, capability)
        return self.registry.get_current_model(capability, request.user_id)

    def normalize_inputs(self, model: Model, inputs: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for families whose inputs map onto model-specific names."""
        return inputs

    def check_required(self, model: Model, inputs: Dict[str, Any]) -> None:
        missing = []
        for name in model.required_inputs:
            value = inputs.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        if missing:
            raise FalError(
                error_type=FalErrorType.MISSING_REQUIRED_FIELD,
                message=f"{model.name} requires {', '.join(missing)}",
                user_message=f"Missing required input for {model.name}: {', '.join(missing)}",
            )

    def prepare_options(self, model: Model, request: JobRequest) -> ModelOptions:
        """Merge the request options over the model defaults and validate."""
        options = request.options
        if options is None:
            options = model.options_class()
        elif not isinstance(options, model.options_class):
            raise FalError(
                error_type=FalErrorType.INVALID_OPTIONS,
                message=f"{type(options).__name__} does not apply to {model.name}",
                user_message=f"These options do not apply to {model.name}.",
            )
        merged = options.with_defaults(model.default_options)
        merged.validate()
        return merged

    def endpoint_for(self, model: Model, inputs: Dict[str, Any]) -> str:
        return model.endpoint

    def build_body(self, model: Model, inputs: Dict[str, Any], options: ModelOptions) -> Dict[str, Any]:
        """Present inputs plus the option wire fields."""
        body = {name: value for name, value in inputs.items() if value not in (None, "")}
        body.update(options.to_wire())
        return body

    def decoder_for(self, model: Model) -> Callable[[bytes], Any]:
        raise NotImplementedError

    async def dispatch(self, request: JobRequest) -> Any:
        model = self.resolve_model(request)
        inputs = self.normalize_inputs(model, dict(request.inputs()))
        self.check_required(model, inputs)
        options = self.prepare_options(model, request)
        body = self.build_body(model, inputs, options)
        endpoint = self.endpoint_for(model, inputs)

        logger.info(
            f"Dispatching {model.name}",
            extra={
                "subsys": "dispatch",
                "event": "dispatch.start",
                "user_id": request.user_id or None,
                "detail": {
                    "model": model.name,
                    "capability": model.capability.value,
                    "endpoint": endpoint,
                    "ignored_flags": sorted(request.extra_options) or None,
                },
            },
        )
        return await self.client.execute_async_workflow(
            endpoint,
            body,
            self.decoder_for(model),
            progress=request.progress,
            queue_info=request.queue_info,
        )
