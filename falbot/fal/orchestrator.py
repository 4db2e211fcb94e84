"""
Generation orchestrator [CA][REH]

One coroutine per user command:

    resolve model -> quote -> check balance -> dispatch -> deliver -> deduct -> settle

Funds are never reserved. The balance is checked before submission and
debited only after the artifact reached the user, so every failure before
delivery leaves the balance untouched. A failed debit after delivery is
logged at CRITICAL and reported for manual reconciliation, never retried.

User-facing text is produced here and nowhere below: validation errors show
their detail, service errors show a generic message and log the detail.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from falbot.adapters.base import ChatTransport
from falbot.billing.errors import InsufficientBalanceError, RateUnavailableError
from falbot.billing.gate import BillingGate, BillingResult
from falbot.billing.units import Money, format_dcr, format_usd
from falbot.exceptions import DeliveryError
from falbot.utils.logging import get_logger

from .delivery import ArtifactDeliverer
from .dispatchers import Dispatchers
from .models import Model
from .progress import ChatProgressCallback, NullProgress
from .requests import JobRequest
from .types import Capability, FalError

logger = get_logger(__name__)

VIDEO_CAPABILITIES = (Capability.TEXT2VIDEO, Capability.IMAGE2VIDEO, Capability.VIDEO2VIDEO)

RATE_UNAVAILABLE_MESSAGE = "Unable to get the current exchange rate. Please try again later."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def format_cost_message(cost_usd: Money, required_dcr: Decimal, balance_dcr: Decimal) -> str:
    return (
        f"Request cost: ${format_usd(cost_usd)} USD ({format_dcr(required_dcr)} DCR). "
        f"Your balance: {format_dcr(balance_dcr)} DCR. Processing..."
    )


def delivery_failed_message(model: Model) -> str:
    if model.capability in VIDEO_CAPABILITIES:
        return "Video generation completed, but failed to send the result."
    return "Generation completed, but failed to send the result."


def billing_failed_message(cost_usd: Money) -> str:
    return (
        f"⚠️ Billing failed after sending your result (${format_usd(cost_usd)} USD). "
        "Your balance was not charged automatically. Please contact support."
    )


@dataclass
class JobOutcome:
    """What happened to one job that reached delivery."""

    model: Model
    cost_usd: Money
    result: Any
    billing: Optional[BillingResult] = None


class GenerationOrchestrator:
    """Runs a job request end to end for one user."""

    def __init__(
        self,
        dispatchers: Dispatchers,
        gate: BillingGate,
        deliverer: ArtifactDeliverer,
        transport: ChatTransport,
        progress_intervals: Optional[Dict[str, float]] = None,
    ):
        self.dispatchers = dispatchers
        self.gate = gate
        self.deliverer = deliverer
        self.transport = transport
        self.progress_intervals = progress_intervals or {}

    async def _notify_user(self, user_id: str, text: str) -> None:
        """Best-effort message; a broken transport must not mask the original error."""
        try:
            await self.transport.send_message(user_id, text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                f"Could not notify user {user_id}: {e}",
                extra={"subsys": "orchestrator", "event": "notify.failed", "user_id": user_id},
            )

    def _attach_sinks(self, request: JobRequest, capability: Capability) -> None:
        if isinstance(request.progress, NullProgress):
            request.progress = ChatProgressCallback(
                self.transport,
                request.user_id,
                capability.value,
                **self.progress_intervals,
            )
        if request.queue_info is None:
            user_id = request.user_id

            def _record_queue_info(queue_id: str, response_url: str) -> None:
                logger.info(
                    "Job submitted",
                    extra={
                        "subsys": "orchestrator",
                        "event": "job.queue_info",
                        "user_id": user_id,
                        "job_id": queue_id,
                        "detail": {"response_url": response_url},
                    },
                )

            request.queue_info = _record_queue_info

    def prepare(self, request: JobRequest) -> Tuple[Model, Money]:
        """
        Resolve and validate a request without any I/O.

        Pins the resolved model name and the default-merged options on the
        request and returns (model, cost_usd).
        """
        dispatcher = self.dispatchers.for_request(request)
        model = dispatcher.resolve_model(request)
        inputs = dispatcher.normalize_inputs(model, dict(request.inputs()))
        dispatcher.check_required(model, inputs)
        options = dispatcher.prepare_options(model, request)
        request.model = model.name
        request.capability = model.capability
        request.options = options
        return model, model.quote(options)

    async def run(self, request: JobRequest, prompt: Optional[str] = None) -> Optional[JobOutcome]:
        """
        Run one job; every failure is reported to the user and logged.

        Returns the outcome once the artifact was delivered, None otherwise.
        Cancellation is re-raised untouched.
        """
        user_id = request.user_id
        model: Optional[Model] = None
        try:
            model, cost_usd = self.prepare(request)
            self._attach_sinks(request, model.capability)

            check = await self.gate.check_balance(user_id, cost_usd)
            if self.gate.enabled:
                await self._notify_user(
                    user_id, format_cost_message(cost_usd, check.required_dcr, check.current_dcr)
                )

            logger.info(
                f"Starting {model.name} job",
                extra={
                    "subsys": "orchestrator",
                    "event": "job.start",
                    "user_id": user_id,
                    "detail": {"model": model.name, "cost_usd": str(cost_usd.to_decimal())},
                },
            )
            result = await self.dispatchers.dispatch(request)
            await self.deliverer.deliver(user_id, model, result, prompt=prompt)

        except asyncio.CancelledError:
            logger.info(
                "Job cancelled",
                extra={
                    "subsys": "orchestrator",
                    "event": "job.cancelled",
                    "user_id": user_id,
                    "detail": {"model": model.name if model else request.model},
                },
            )
            raise
        except FalError as e:
            if e.is_user_error:
                logger.info(
                    f"Rejected request: {e.message}",
                    extra={"subsys": "orchestrator", "event": "job.invalid", "user_id": user_id},
                )
            else:
                logger.error(
                    f"Job failed: {e}",
                    extra={
                        "subsys": "orchestrator",
                        "event": "job.failed",
                        "user_id": user_id,
                        "detail": {
                            "model": model.name if model else request.model,
                            "status_code": e.status_code,
                            "logs": [log.message for log in e.logs[-5:]],
                            **e.details,
                        },
                    },
                )
            await self._notify_user(user_id, f"Error: {e.user_message}")
            return None
        except InsufficientBalanceError as e:
            await self._notify_user(user_id, e.user_message)
            return None
        except RateUnavailableError as e:
            logger.error(
                f"Rate unavailable: {e}",
                extra={"subsys": "orchestrator", "event": "job.rate_unavailable", "user_id": user_id},
            )
            await self._notify_user(user_id, RATE_UNAVAILABLE_MESSAGE)
            return None
        except DeliveryError as e:
            logger.error(
                f"Delivery failed: {e}",
                extra={
                    "subsys": "orchestrator",
                    "event": "job.delivery_failed",
                    "user_id": user_id,
                    "detail": {"model": model.name if model else request.model},
                },
            )
            await self._notify_user(user_id, delivery_failed_message(model) if model else str(e))
            return None
        except Exception as e:
            logger.exception(
                f"Unexpected job error: {e}",
                extra={"subsys": "orchestrator", "event": "job.error", "user_id": user_id},
            )
            await self._notify_user(user_id, UNEXPECTED_ERROR_MESSAGE)
            return None

        outcome = JobOutcome(model=model, cost_usd=cost_usd, result=result)
        outcome.billing = await self._settle(user_id, model, cost_usd)
        return outcome

    async def _settle(self, user_id: str, model: Model, cost_usd: Money) -> Optional[BillingResult]:
        """Deduct after delivery; failures are reported, never retried."""
        try:
            billing = await self.gate.deduct_balance(user_id, cost_usd)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.critical(
                f"Billing failed after delivery for user {user_id}: {e}",
                extra={
                    "subsys": "billing",
                    "event": "billing.reconcile_required",
                    "user_id": user_id,
                    "detail": {"model": model.name, "cost_usd": str(cost_usd.to_decimal())},
                },
            )
            await self._notify_user(user_id, billing_failed_message(cost_usd))
            return None

        if billing.billed:
            try:
                await self.gate.send_billing_message(user_id, billing)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(
                    f"Billing message not sent to {user_id}: {e}",
                    extra={"subsys": "billing", "event": "billing.message_failed", "user_id": user_id},
                )
        return billing
