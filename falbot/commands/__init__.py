"""
Command cogs for the Discord bot.
"""

import importlib

from falbot.utils.logging import get_logger

logger = get_logger(__name__)

# module name -> cog name
COMMAND_MODULES = {
    "model_commands": "ModelCommands",
    "generation_commands": "GenerationCommands",
    "balance_commands": "BalanceCommands",
}


async def setup_commands(bot) -> None:
    """
    Load every command cog onto the bot.

    A cog that fails to import or set up is logged and skipped so the rest
    of the commands stay available.
    """
    logger.info(
        "Loading command cogs",
        extra={"subsys": "commands", "event": "commands.setup.start"},
    )
    loaded_cogs = set(bot.cogs.keys())
    successful_loads = 0
    failed_loads = 0

    for module_name, cog_name in COMMAND_MODULES.items():
        if cog_name in loaded_cogs:
            logger.debug(f"Skipping already loaded cog: {cog_name}")
            continue
        try:
            module = importlib.import_module(f"{__name__}.{module_name}")
            await module.setup(bot)
        except Exception as e:
            logger.error(
                f"❌ Failed to load {cog_name}: {e}",
                exc_info=True,
                extra={"subsys": "commands", "event": "commands.setup.cog_failed", "detail": {"cog": cog_name}},
            )
            failed_loads += 1
            continue

        if bot.get_cog(cog_name):
            successful_loads += 1
        else:
            logger.error(f"❌ {cog_name} setup completed but cog not found")
            failed_loads += 1

    all_commands = [cmd.name for cog in bot.cogs.values() for cmd in cog.get_commands()]
    logger.info(
        f"Command setup complete: {successful_loads} loaded, {failed_loads} failed",
        extra={
            "subsys": "commands",
            "event": "commands.setup.done",
            "detail": {"commands": all_commands},
        },
    )
    if failed_loads:
        logger.warning(f"⚠️ {failed_loads} cogs failed to load - some commands may not be available")
