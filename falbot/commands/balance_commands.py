"""
Balance and exchange-rate commands.
"""

from decimal import Decimal, InvalidOperation

from discord.ext import commands

from falbot.billing.errors import RateUnavailableError
from falbot.billing.units import atoms_to_dcr, dcr_to_atoms, format_dcr, format_usd
from falbot.exceptions import BalanceStoreError
from falbot.logger import log_command
from falbot.utils.logging import get_logger

logger = get_logger(__name__)


def format_balance_message(balance_dcr: Decimal, usd_per_dcr: Decimal) -> str:
    return (
        "💰 Your Balance:\n"
        f"• {format_dcr(balance_dcr)} DCR\n"
        f"• ${format_usd(balance_dcr * usd_per_dcr)} USD"
    )


def format_rate_message(usd_per_dcr: Decimal, btc_per_dcr: Decimal) -> str:
    return (
        "Current DCR Exchange Rates:\n"
        f"USD: ${format_usd(usd_per_dcr)}\n"
        f"BTC: {format_dcr(btc_per_dcr)} BTC\n"
        "Source: CoinGecko"
    )


class BalanceCommands(commands.Cog):
    """balance, rate and the owner-only credit command"""

    def __init__(self, bot):
        self.bot = bot

    @commands.command(name="balance")
    async def balance(self, ctx):
        """Show your DCR balance and its USD value."""
        user_id = str(ctx.author.id)
        try:
            balance_dcr = atoms_to_dcr(await self.bot.store.get_balance(user_id))
        except BalanceStoreError as e:
            logger.error(
                f"Balance lookup failed for {user_id}: {e}",
                extra={"subsys": "billing", "event": "balance.error", "user_id": user_id},
            )
            await ctx.reply("Unable to read your balance right now. Please try again later.", mention_author=False)
            return

        try:
            usd_per_dcr, _ = await self.bot.rates.get_dcr_price()
            message = format_balance_message(balance_dcr, usd_per_dcr)
        except RateUnavailableError as e:
            logger.warning(
                f"Rate unavailable for balance display: {e}",
                extra={"subsys": "billing", "event": "balance.rate_unavailable", "user_id": user_id},
            )
            message = f"💰 Your Balance:\n• {format_dcr(balance_dcr)} DCR"

        log_command(ctx, "balance")
        await ctx.reply(message, mention_author=False)

    @commands.command(name="rate")
    async def rate(self, ctx):
        """Show the current DCR exchange rates."""
        try:
            usd_per_dcr, btc_per_dcr = await self.bot.rates.get_dcr_price()
        except RateUnavailableError as e:
            logger.error(
                f"Rate command failed: {e}",
                extra={"subsys": "billing", "event": "rate.error"},
            )
            await ctx.reply(
                "Unable to get the current exchange rate. Please try again later.",
                mention_author=False,
            )
            return
        log_command(ctx, "rate")
        await ctx.reply(format_rate_message(usd_per_dcr, btc_per_dcr), mention_author=False)

    @commands.command(name="credit")
    @commands.is_owner()
    async def credit(self, ctx, user_id: str = "", amount: str = ""):
        """Credit a user's balance in DCR (owner only)."""
        try:
            dcr = Decimal(amount)
        except InvalidOperation:
            dcr = Decimal(0)
        if not user_id.isdigit() or not dcr.is_finite() or dcr <= 0:
            await ctx.reply("Usage: !credit <user_id> <dcr_amount>", mention_author=False)
            return

        try:
            new_balance = await self.bot.store.update_balance(user_id, dcr_to_atoms(dcr))
        except BalanceStoreError as e:
            log_command(ctx, "credit_failed", {"target": user_id}, success=False)
            await ctx.reply(f"❌ Credit failed: {e}", mention_author=False)
            return

        log_command(ctx, "credit", {"target": user_id, "dcr": format_dcr(dcr)})
        await ctx.reply(
            f"✅ Credited {format_dcr(dcr)} DCR to {user_id}. "
            f"New balance: {format_dcr(atoms_to_dcr(new_balance))} DCR",
            mention_author=False,
        )


async def setup(bot):
    await bot.add_cog(BalanceCommands(bot))
