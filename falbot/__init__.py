"""
fal.ai generation bot package

A Discord bot that brokers fal.ai generative jobs, featuring:
- A model registry covering image, video, speech, music and transcription models
- An async submit/poll/fetch queue workflow with progress relayed to chat
- Decred-denominated per-user balances billed only after delivery
- Structured dual-sink logging and env-driven configuration
"""

__title__ = "falbot"
__version__ = "1.0.0"
__description__ = "Discord bot for fal.ai generation with DCR billing"
__license__ = "MIT"

# Avoid importing heavy submodules at package import time to keep tests lightweight
__all__ = []


def __getattr__(name: str):
    """Lazy loader so importing falbot.fal.* does not pull in discord.py."""
    if name == "FalBot":
        from .core.bot import FalBot as _FalBot

        return _FalBot
    raise AttributeError(name)
