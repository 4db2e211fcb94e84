"""
Narrow contracts the generation core consumes [CA]

The orchestrator, billing gate and progress sink only talk to these
interfaces; concrete Discord and file-backed implementations live beside them.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from falbot.billing.units import Money


class ChatTransport(ABC):
    """Outbound private-message delivery to a user."""

    @abstractmethod
    async def send_message(self, user_id: str, text: str) -> None:
        """
        Send a text message to the user.

        Text may contain inline `--embed[alt=...,type=...,data=...]--`
        segments, which the transport delivers as media.
        """
        pass

    @abstractmethod
    async def send_file(
        self, user_id: str, path: Path, filename: Optional[str] = None
    ) -> None:
        """Upload a local file to the user."""
        pass


class BalanceStore(ABC):
    """Persistent per-user balance in integer DCR atoms."""

    @abstractmethod
    async def get_balance(self, user_id: str) -> int:
        pass

    @abstractmethod
    async def check_and_deduct_balance(
        self, user_id: str, cost_usd: Money, debug: bool = False
    ) -> Optional[int]:
        """Atomically re-check funds and subtract; returns the atoms debited, None when funds are short."""
        pass

    @abstractmethod
    async def update_balance(self, user_id: str, delta_atoms: int) -> int:
        pass
