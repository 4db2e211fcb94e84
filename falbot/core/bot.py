"""Core bot implementation for the fal.ai generation bot."""

from __future__ import annotations

import asyncio
import os
from typing import Any, Dict, Optional

import discord
from discord.ext import commands
from rich.console import Console
from rich.panel import Panel
from rich.tree import Tree

from falbot.adapters.discord_transport import DiscordTransport
from falbot.billing.gate import BillingGate
from falbot.billing.rates import RateCache
from falbot.billing.store import JsonBalanceStore
from falbot.commands import setup_commands
from falbot.events import setup_command_error_handler
from falbot.fal.client import FalClient
from falbot.fal.delivery import ArtifactDeliverer
from falbot.fal.dispatchers import Dispatchers
from falbot.fal.orchestrator import GenerationOrchestrator
from falbot.fal.registry import ModelRegistry, build_registry
from falbot.fal.types import Capability
from falbot.utils.logging import get_logger

console = Console()


def create_bot_intents() -> discord.Intents:
    """Intents needed for prefix commands and DMs."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.dm_messages = True
    return intents


def log_services_setup(console: Console, registry: ModelRegistry, config: Dict[str, Any]) -> None:
    """Print a startup summary of the model catalogue and billing state."""
    tree = Tree("🎬 fal.ai services")
    models_branch = tree.add(f"📦 Models ({len(registry)})")
    for capability in Capability:
        count = len(registry.get_models(capability))
        current = registry.get_current_model(capability).name if count else "none"
        models_branch.add(f"{capability.value}: {current} ({count} available)")
    billing = "enabled" if config.get("BILLING_ENABLED", True) else "disabled"
    tree.add(f"💰 Billing {billing}")
    console.print(Panel(tree, title="Startup Report", border_style="blue", padding=(1, 2)))


class FalBot(commands.Bot):
    """Discord bot that brokers fal.ai jobs and bills them in DCR."""

    def __init__(self, *args, config: Optional[dict] = None, **kwargs):
        self.config = config or {}
        kwargs.setdefault("command_prefix", self.config.get("COMMAND_PREFIX") or os.getenv("COMMAND_PREFIX", "!"))
        kwargs.setdefault("intents", create_bot_intents())
        kwargs.setdefault("help_command", None)
        super().__init__(*args, **kwargs)

        self.logger = get_logger(__name__)
        self._boot_completed = False
        self._is_ready = asyncio.Event()

        self.registry: Optional[ModelRegistry] = None
        self.fal_client: Optional[FalClient] = None
        self.rates: Optional[RateCache] = None
        self.store: Optional[JsonBalanceStore] = None
        self.transport: Optional[DiscordTransport] = None
        self.gate: Optional[BillingGate] = None
        self.deliverer: Optional[ArtifactDeliverer] = None
        self.dispatchers: Optional[Dispatchers] = None
        self.orchestrator: Optional[GenerationOrchestrator] = None

    def build_services(self) -> None:
        """Wire the registry, fal client, billing and delivery layers from config."""
        config = self.config
        debug = bool(config.get("DEBUG", False))

        self.registry = build_registry()
        self.fal_client = FalClient(
            api_key=config.get("FAL_API_KEY", ""),
            base_url=config.get("FAL_BASE_URL", "https://queue.fal.run/fal-ai"),
            poll_interval=config.get("FAL_POLL_INTERVAL_S", 5.0),
            timeout=config.get("FAL_REQUEST_TIMEOUT_S", 30.0),
            debug=debug,
        )
        self.rates = RateCache(
            dcr_url=config["RATE_ORACLE_URL"],
            btc_url=config["RATE_BTC_ORACLE_URL"],
            ttl_seconds=config.get("RATE_CACHE_TTL_S", 600),
            timeout_seconds=config.get("RATE_TIMEOUT_S", 10),
        )
        self.store = JsonBalanceStore(
            config["BALANCE_STORE_PATH"],
            ledger_path=config.get("BALANCE_LEDGER_PATH"),
            rates=self.rates,
        )
        self.transport = DiscordTransport(self)
        self.gate = BillingGate(
            self.store,
            self.rates,
            transport=self.transport,
            enabled=config.get("BILLING_ENABLED", True),
            debug=debug,
        )
        self.deliverer = ArtifactDeliverer(
            self.transport, timeout=config.get("FAL_DOWNLOAD_TIMEOUT_S", 300)
        )
        self.dispatchers = Dispatchers(self.fal_client, self.registry)
        self.orchestrator = GenerationOrchestrator(
            self.dispatchers,
            self.gate,
            self.deliverer,
            self.transport,
            progress_intervals={
                "queue_interval": config.get("PROGRESS_QUEUE_INTERVAL_S", 30),
                "status_interval": config.get("PROGRESS_STATUS_INTERVAL_S", 20),
                "log_interval": config.get("PROGRESS_LOG_INTERVAL_S", 15),
                "notice_interval": config.get("PROGRESS_NOTICE_INTERVAL_S", 120),
            },
        )

    async def setup_hook(self) -> None:
        """Asynchronous setup phase for the bot."""
        if self._boot_completed:
            self.logger.debug("🔄 Setup hook called but boot already completed, skipping")
            return
        self._boot_completed = True
        self.logger.info("🔧 Starting bot setup", extra={"subsys": "core", "event": "setup.start"})

        self.build_services()
        setup_command_error_handler(self, prefix=self.config.get("COMMAND_PREFIX", "!"))
        await setup_commands(self)
        log_services_setup(console, self.registry, self.config)

        self.logger.info("✅ Bot setup complete", extra={"subsys": "core", "event": "setup.done"})

    async def on_ready(self):
        """Called when the bot is ready and connected to Discord."""
        if not self._is_ready.is_set():
            self.logger.info(f"🤖 Logged in as {self.user} (ID: {self.user.id})")
            self._is_ready.set()
            self.logger.info("🎉 Bot is ready to receive commands!")

    async def close(self) -> None:
        """Clean up resources before shutdown."""
        self.logger.info("Bot is shutting down...", extra={"subsys": "core", "event": "shutdown"})
        try:
            await asyncio.wait_for(super().close(), timeout=8.0)
        except asyncio.TimeoutError:
            self.logger.warning("Discord close timed out, forcing closure")

        for name, resource in (
            ("fal client", self.fal_client),
            ("rate oracle", self.rates),
            ("deliverer", self.deliverer),
        ):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                self.logger.warning(f"Error closing {name}: {e}")
        self.logger.info("Bot shutdown complete")
