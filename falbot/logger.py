import logging
from typing import Optional, Dict, Any

from discord.ext import commands

logger = logging.getLogger(__name__)


def log_command(
    ctx: commands.Context,
    event: str,
    detail: Optional[Dict[str, Any]] = None,
    success: bool = True,
):
    """
    Logs a command execution with structured context.

    Args:
        ctx: The command context from discord.py.
        event: A string describing the event (e.g., 'job_submitted').
        detail: An optional dictionary for additional structured details.
        success: A boolean indicating if the command was successful.
    """
    guild_id = ctx.guild.id if ctx.guild else "DM"
    user_id = ctx.author.id
    command_name = ctx.command.name if ctx.command else "?"

    level = logging.INFO if success else logging.ERROR
    status_icon = "✔" if success else "✖"

    log_message = f"{status_icon} CMD [guild: {guild_id}, user: {user_id}, cmd: {command_name}] {event}"
    if detail:
        detail_str = ", ".join(f"{k}: {v}" for k, v in detail.items())
        log_message += f" ({detail_str})"

    logger.log(
        level,
        log_message,
        extra={
            "subsys": "command",
            "guild_id": guild_id,
            "user_id": user_id,
            "event": event,
            "detail": detail or {},
        },
    )
