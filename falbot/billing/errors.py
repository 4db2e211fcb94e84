"""Billing error types."""

from decimal import Decimal

from falbot.exceptions import APIError, BotBaseException

from .units import Money, format_dcr, format_usd


class InsufficientBalanceError(BotBaseException):
    """Raised when a user's balance cannot cover a quoted job."""

    def __init__(self, required_dcr: Decimal, current_dcr: Decimal, cost_usd: Money):
        self.required_dcr = required_dcr
        self.current_dcr = current_dcr
        self.cost_usd = Money(cost_usd)
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        return (
            f"Insufficient balance. You have {format_dcr(self.current_dcr)} DCR, "
            f"but this operation requires {format_dcr(self.required_dcr)} DCR "
            f"(${format_usd(self.cost_usd)} USD). Please send a tip to use this feature."
        )


class RateUnavailableError(APIError):
    """Raised when no usable exchange rate can be obtained from the oracle."""

    pass
