"""Model definition value object."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from falbot.billing.units import Money

from ..options import ModelOptions
from ..types import Capability


@dataclass(frozen=True)
class Model:
    """
    One generation model: identity, price, defaults and endpoint.

    `price_usd` is per second of output when `per_second_pricing` is set,
    otherwise a flat price per job.
    """
    name: str
    capability: Capability
    description: str
    help_text: str
    price_usd: Money
    default_options: ModelOptions
    endpoint: str
    per_second_pricing: bool = False
    required_inputs: Tuple[str, ...] = ()
    # used instead of `endpoint` when the request carries an image
    image_endpoint: Optional[str] = None
    # billed length when a per-second model cannot know the output length
    fallback_seconds: Optional[float] = None
    # replaces `price_usd` when the job asks for generated audio
    audio_price_usd: Optional[Money] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def options_class(self) -> type:
        return type(self.default_options)

    def unit_price(self, options: Optional[ModelOptions] = None) -> Money:
        if self.audio_price_usd is None:
            return self.price_usd
        generate_audio = getattr(options, "generate_audio", None)
        if generate_audio is None:
            generate_audio = getattr(self.default_options, "generate_audio", None)
        return self.audio_price_usd if generate_audio else self.price_usd

    def quote(self, options: Optional[ModelOptions] = None) -> Money:
        """Cost in USD of one job run with the given (default-merged) options."""
        price = self.unit_price(options)
        if not self.per_second_pricing:
            return price
        seconds = None
        if options is not None:
            seconds = options.billable_seconds()
        if seconds is None:
            seconds = self.default_options.billable_seconds()
        if seconds is None:
            seconds = self.fallback_seconds
        if seconds is None:
            return price
        return price * seconds

    @property
    def price_label(self) -> str:
        suffix = "/second" if self.per_second_pricing else ""
        label = f"${_amount(self.price_usd)}{suffix}"
        if self.audio_price_usd is not None:
            label += f", ${_amount(self.audio_price_usd)}{suffix} with audio"
        return label


def _amount(price: Money) -> str:
    return format(price.to_decimal().normalize(), "f")
