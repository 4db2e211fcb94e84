"""
Discord bot main entry point - bootstrap only.
"""
import asyncio
import os
import sys

import aiohttp
import discord

from falbot.config import ConfigurationError, load_config, reset_config_cache, validate_required_env
from falbot.core.bot import FalBot
from falbot.core.cli import parse_arguments, show_version_info, validate_configuration_only
from falbot.utils.logging import get_logger, init_logging, shutdown_logging_and_exit


async def main() -> None:
    """Parse flags, validate configuration and run the bot until it exits."""
    args = parse_arguments()

    if args.version:
        show_version_info()
        return

    if args.debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        os.environ["DEBUG"] = "true"
        reset_config_cache()

    init_logging()
    logger = get_logger(__name__)

    if args.config_check:
        shutdown_logging_and_exit(0 if validate_configuration_only() else 1)

    try:
        validate_required_env()
        config = load_config()
    except ConfigurationError as e:
        logger.critical(f"Configuration error during startup: {e}", extra={"subsys": "core", "event": "startup.config_fail"})
        shutdown_logging_and_exit(1)

    bot = FalBot(config=config)

    max_retries = 3
    base_delay = 5  # seconds
    async with bot:
        for attempt in range(max_retries):
            try:
                logger.info(f"Connecting to Discord... (Attempt {attempt + 1}/{max_retries})")
                await bot.start(config["DISCORD_TOKEN"])
                return
            except discord.LoginFailure:
                logger.error("Failed to log in. Please check your Discord token.")
                shutdown_logging_and_exit(1)
            except (discord.HTTPException, aiohttp.ClientConnectorError):
                if attempt == max_retries - 1:
                    logger.error("Could not connect to Discord after retries.")
                    shutdown_logging_and_exit(1)
                delay = base_delay * (2 ** attempt)
                logger.warning(f"Connection failed, retrying in {delay}s...")
                await asyncio.sleep(delay)


def run_bot() -> None:
    """Entry point for running the bot with proper error handling."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot shutdown requested by user.")
        shutdown_logging_and_exit(0)
    except Exception as e:
        print(f"FATAL ERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        shutdown_logging_and_exit(1)


if __name__ == "__main__":
    run_bot()
