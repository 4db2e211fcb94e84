"""
Billing gate: quote check before a job, deduction after delivery [CA][REH]

The gate never reserves funds. `check_balance` is side-effect free and runs
before submission; `deduct_balance` runs only once the artifact reached the
user and relies on the store's atomic check-and-deduct primitive.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from falbot.adapters.base import BalanceStore, ChatTransport
from falbot.utils.logging import get_logger

from .errors import InsufficientBalanceError
from .rates import RateCache
from .units import Money, atoms_to_dcr, dcr_to_atoms, format_dcr, format_usd

logger = get_logger(__name__)


@dataclass
class BalanceCheck:
    """Outcome of a pre-job balance check."""

    required_dcr: Decimal
    current_dcr: Decimal
    cost_usd: Money


@dataclass
class BillingResult:
    """Outcome of a post-delivery deduction."""

    charged_dcr: Decimal
    charged_usd: Money
    new_balance_dcr: Decimal
    billed: bool = True


def format_billing_message(result: BillingResult) -> str:
    return (
        "💰 Billing Information:\n"
        f"• Charged: {format_dcr(result.charged_dcr)} DCR (${format_usd(result.charged_usd)} USD)\n"
        f"• Remaining Balance: {format_dcr(result.new_balance_dcr)} DCR"
    )


class BillingGate:
    """Check, deduct and settle a user's DCR balance around a job."""

    def __init__(
        self,
        store: BalanceStore,
        rates: RateCache,
        transport: Optional[ChatTransport] = None,
        enabled: bool = True,
        debug: bool = False,
    ):
        self.store = store
        self.rates = rates
        self.transport = transport
        self.enabled = enabled
        self.debug = debug

    def _is_enabled(self, billing_enabled: Optional[bool]) -> bool:
        return self.enabled if billing_enabled is None else billing_enabled

    async def check_balance(
        self,
        user_id: str,
        cost_usd: Money,
        billing_enabled: Optional[bool] = None,
    ) -> BalanceCheck:
        """
        Verify the user can cover cost_usd.

        Raises:
            InsufficientBalanceError: when the balance is short
            RateUnavailableError: when no rate can be obtained
        """
        cost_usd = Money(cost_usd)
        current_dcr = atoms_to_dcr(await self.store.get_balance(user_id))

        if not self._is_enabled(billing_enabled):
            return BalanceCheck(required_dcr=Decimal(0), current_dcr=current_dcr, cost_usd=cost_usd)

        required_dcr = await self.rates.usd_to_dcr(cost_usd)
        if dcr_to_atoms(current_dcr) < dcr_to_atoms(required_dcr):
            logger.info(
                "Insufficient balance",
                extra={
                    "subsys": "billing",
                    "event": "billing.check.insufficient",
                    "user_id": user_id,
                    "detail": {
                        "required_dcr": format_dcr(required_dcr),
                        "current_dcr": format_dcr(current_dcr),
                        "cost_usd": str(cost_usd),
                    },
                },
            )
            raise InsufficientBalanceError(required_dcr, current_dcr, cost_usd)

        return BalanceCheck(required_dcr=required_dcr, current_dcr=current_dcr, cost_usd=cost_usd)

    async def deduct_balance(
        self,
        user_id: str,
        cost_usd: Money,
        billing_enabled: Optional[bool] = None,
    ) -> BillingResult:
        """
        Deduct cost_usd after successful delivery.

        Raises InsufficientBalanceError only if the atomic primitive reports
        that funds vanished since the check. Never retried.
        """
        cost_usd = Money(cost_usd)

        if not self._is_enabled(billing_enabled):
            current_dcr = atoms_to_dcr(await self.store.get_balance(user_id))
            return BillingResult(
                charged_dcr=Decimal(0),
                charged_usd=Money.zero(),
                new_balance_dcr=current_dcr,
                billed=False,
            )

        debited_atoms = await self.store.check_and_deduct_balance(user_id, cost_usd, self.debug)
        if debited_atoms is None:
            required_dcr = await self.rates.usd_to_dcr(cost_usd)
            current_dcr = atoms_to_dcr(await self.store.get_balance(user_id))
            raise InsufficientBalanceError(required_dcr, current_dcr, cost_usd)

        # Report what the store actually debited, not a fresh conversion
        charged_dcr = atoms_to_dcr(debited_atoms)
        new_balance_dcr = atoms_to_dcr(await self.store.get_balance(user_id))
        logger.info(
            "Balance deducted",
            extra={
                "subsys": "billing",
                "event": "billing.deduct",
                "user_id": user_id,
                "detail": {
                    "charged_dcr": format_dcr(charged_dcr),
                    "charged_usd": str(cost_usd),
                    "new_balance_dcr": format_dcr(new_balance_dcr),
                },
            },
        )
        return BillingResult(
            charged_dcr=charged_dcr,
            charged_usd=cost_usd,
            new_balance_dcr=new_balance_dcr,
        )

    async def send_billing_message(self, user_id: str, result: BillingResult) -> None:
        if self.transport is None:
            return
        await self.transport.send_message(user_id, format_billing_message(result))
