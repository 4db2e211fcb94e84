"""
Global command error handler.

Converts discord.py command errors into short embeds in the invoking
channel [REH]. Internal details stay in the logs [SFT].
"""
from difflib import get_close_matches
from typing import List

import discord
from discord.ext import commands

from falbot.utils.logging import get_logger

logger = get_logger(__name__)


class CommandErrorHandler:
    """Maps command errors to user-facing embeds and logs the context."""

    ERROR_MESSAGES = {
        "command_not_found": {
            "emoji": "❓",
            "title": "Command Not Found",
            "description": "That command doesn't exist. Use `{prefix}help` to see available commands.",
            "color": discord.Color.orange(),
        },
        "command_not_found_suggestion": {
            "emoji": "💡",
            "title": "Did You Mean?",
            "description": "Command not found. Did you mean: `{suggestions}`?",
            "color": discord.Color.blue(),
        },
        "bad_argument": {
            "emoji": "❌",
            "title": "Invalid Arguments",
            "description": "Invalid arguments provided. Check the command usage with `{prefix}help {command}`.",
            "color": discord.Color.red(),
        },
        "missing_required_argument": {
            "emoji": "📝",
            "title": "Missing Arguments",
            "description": "Required arguments are missing. Check usage with `{prefix}help {command}`.",
            "color": discord.Color.red(),
        },
        "check_failure": {
            "emoji": "🚫",
            "title": "Command Check Failed",
            "description": "You don't meet the requirements to use this command.",
            "color": discord.Color.red(),
        },
        "command_invoke_error": {
            "emoji": "⚠️",
            "title": "Command Error",
            "description": "An error occurred while executing this command. Please try again.",
            "color": discord.Color.red(),
        },
    }

    def __init__(self, bot, prefix: str = "!"):
        self.bot = bot
        self.prefix = prefix
        self.error_counts = {}

    def _embed(self, key: str, **fmt) -> discord.Embed:
        template = self.ERROR_MESSAGES[key]
        return discord.Embed(
            title=f"{template['emoji']} {template['title']}",
            description=template["description"].format(prefix=self.prefix, **fmt),
            color=template["color"],
        )

    def suggestions_for(self, attempted: str) -> List[str]:
        names = []
        for command in self.bot.commands:
            names.append(command.name)
            names.extend(command.aliases)
        return get_close_matches(attempted, names, n=3, cutoff=0.6)

    def _log_error(self, ctx: commands.Context, error: Exception, error_type: str) -> None:
        command_name = ctx.command.name if ctx.command else "unknown"
        key = f"{command_name}:{error_type}"
        self.error_counts[key] = self.error_counts.get(key, 0) + 1

        extra = {
            "subsys": "commands",
            "event": "command.error",
            "user_id": str(ctx.author.id),
            "guild_id": ctx.guild.id if ctx.guild else None,
            "detail": {"command": command_name, "error_type": error_type},
        }
        if isinstance(error, commands.CommandNotFound):
            logger.debug(f"Unknown command from {ctx.author.id}: {error}", extra=extra)
        elif isinstance(error, commands.UserInputError):
            logger.info(f"Bad input for {command_name}: {error}", extra=extra)
        elif isinstance(error, commands.CommandInvokeError):
            logger.error(
                f"Command {command_name} failed: {error.original}",
                exc_info=error.original,
                extra=extra,
            )
        else:
            logger.warning(f"Command {command_name} rejected: {error}", extra=extra)

    async def handle_command_error(self, ctx: commands.Context, error: Exception) -> None:
        error_type = type(error).__name__
        try:
            self._log_error(ctx, error, error_type)
            command_name = ctx.command.name if ctx.command else "unknown"

            if isinstance(error, commands.CommandNotFound):
                attempted = ctx.invoked_with or ""
                suggestions = self.suggestions_for(attempted.lower())
                if suggestions:
                    embed = self._embed("command_not_found_suggestion", suggestions="`, `".join(suggestions))
                else:
                    embed = self._embed("command_not_found")
                await ctx.send(embed=embed, delete_after=30)
            elif isinstance(error, commands.MissingRequiredArgument):
                embed = self._embed("missing_required_argument", command=command_name)
                embed.add_field(name="Missing Parameter", value=f"`{error.param.name}`", inline=False)
                await ctx.send(embed=embed, delete_after=30)
            elif isinstance(error, commands.UserInputError):
                await ctx.send(embed=self._embed("bad_argument", command=command_name), delete_after=30)
            elif isinstance(error, commands.CheckFailure):
                await ctx.send(embed=self._embed("check_failure"), delete_after=20)
            else:
                embed = self._embed("command_invoke_error")
                embed.add_field(name="Command", value=f"`{command_name}`", inline=True)
                embed.set_footer(text="This error has been logged for investigation.")
                await ctx.send(embed=embed, delete_after=30)
        except discord.DiscordException as handler_error:
            logger.critical(f"🚨 Error handler failed: {handler_error}", exc_info=True)
            await self._send_fallback_error_message(ctx)

    async def _send_fallback_error_message(self, ctx: commands.Context) -> None:
        try:
            await ctx.send("❌ An error occurred. Please try again.", delete_after=10)
        except discord.DiscordException:
            logger.critical("Failed to send fallback error message")


def setup_command_error_handler(bot, prefix: str = "!") -> CommandErrorHandler:
    """Register the global on_command_error handler on the bot."""
    error_handler = CommandErrorHandler(bot, prefix)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: Exception):
        await error_handler.handle_command_error(ctx, error)

    logger.info("✅ Global command error handler registered", extra={"subsys": "commands"})
    return error_handler
