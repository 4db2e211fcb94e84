"""
JSON-file balance store [RM][CMV]

Balances are integer DCR atoms keyed by user id, persisted as one JSON
document. Check-and-deduct runs under a per-user lock; the document is
rewritten through a temp file and `os.replace` so readers never see a
partial file. Every debit and credit is appended to a JSONL ledger.
"""

from __future__ import annotations

import asyncio
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles

from falbot.adapters.base import BalanceStore
from falbot.exceptions import BalanceStoreError
from falbot.utils.logging import get_logger

from .rates import RateCache
from .units import Money, atoms_to_dcr, dcr_to_atoms

logger = get_logger(__name__)


class JsonBalanceStore(BalanceStore):
    """Balance store persisted to a JSON file with an append-only ledger."""

    def __init__(
        self,
        path: Path,
        ledger_path: Optional[Path] = None,
        rates: Optional[RateCache] = None,
    ):
        self.path = Path(path)
        self.ledger_path = Path(ledger_path) if ledger_path else None
        self.rates = rates

        self._balances: Dict[str, int] = {}
        self._loaded = False
        self._load_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_user_lock(self, user_id: str) -> asyncio.Lock:
        """Get or create lock for user"""
        if user_id not in self._locks:
            self._locks[user_id] = asyncio.Lock()
        return self._locks[user_id]

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            if self.path.exists():
                try:
                    async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                        data = json.loads(await f.read() or "{}")
                except (OSError, ValueError) as e:
                    raise BalanceStoreError(f"Failed to read balance store {self.path}: {e}") from e
                balances = data.get("balances", {}) if isinstance(data, dict) else {}
                self._balances = {str(k): int(v) for k, v in balances.items()}
            self._loaded = True
            logger.debug(
                f"Loaded {len(self._balances)} balances from {self.path}",
                extra={"subsys": "billing", "event": "store.load"},
            )

    async def _save(self) -> None:
        """Atomically rewrite the balance document."""
        async with self._write_lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = self.path.with_name(self.path.name + ".tmp")
            payload = json.dumps({"balances": self._balances}, indent=2, sort_keys=True)
            try:
                async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
                    await f.write(payload)
                    await f.flush()
                os.replace(temp_file, self.path)
            except OSError as e:
                if temp_file.exists():
                    temp_file.unlink()
                raise BalanceStoreError(f"Failed to write balance store {self.path}: {e}") from e

    async def _append_ledger(self, record: Dict[str, Any]) -> None:
        if self.ledger_path is None:
            return
        record = {"timestamp": datetime.now(timezone.utc).isoformat(), **record}
        try:
            self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.ledger_path, "a", encoding="utf-8") as f:
                await f.write(json.dumps(record, ensure_ascii=False) + "\n")
                await f.flush()
        except OSError as e:
            # Balance is already saved at this point
            logger.error(
                f"Failed to append ledger record: {e}",
                extra={"subsys": "billing", "event": "store.ledger_error", "detail": record},
            )

    async def get_balance(self, user_id: str) -> int:
        await self._ensure_loaded()
        return self._balances.get(str(user_id), 0)

    async def check_and_deduct_balance(
        self, user_id: str, cost_usd: Money, debug: bool = False
    ) -> Optional[int]:
        """
        Atomically convert cost_usd to atoms, re-check funds and subtract.

        Returns the atoms debited, or None, leaving the balance untouched,
        when funds are short.
        """
        if self.rates is None:
            raise BalanceStoreError("Balance store has no rate source for USD conversion")

        user_id = str(user_id)
        await self._ensure_loaded()
        cost_dcr = await self.rates.usd_to_dcr(Money(cost_usd))
        cost_atoms = dcr_to_atoms(cost_dcr)

        async with self._get_user_lock(user_id):
            current = self._balances.get(user_id, 0)
            if debug:
                logger.debug(
                    "Check-and-deduct",
                    extra={
                        "subsys": "billing",
                        "event": "store.deduct.check",
                        "user_id": user_id,
                        "detail": {
                            "cost_usd": str(Money(cost_usd)),
                            "cost_atoms": cost_atoms,
                            "current_atoms": current,
                        },
                    },
                )
            if current < cost_atoms:
                return None

            self._balances[user_id] = current - cost_atoms
            try:
                await self._save()
            except BalanceStoreError:
                self._balances[user_id] = current
                raise

        await self._append_ledger(
            {
                "type": "debit",
                "user_id": user_id,
                "atoms": cost_atoms,
                "dcr": f"{atoms_to_dcr(cost_atoms):f}",
                "usd": Money(cost_usd).to_json_value(),
                "balance_atoms": current - cost_atoms,
            }
        )
        return cost_atoms

    async def update_balance(self, user_id: str, delta_atoms: int) -> int:
        """Apply a signed atom delta (credits are positive) and return the new balance."""
        user_id = str(user_id)
        await self._ensure_loaded()

        async with self._get_user_lock(user_id):
            current = self._balances.get(user_id, 0)
            new_balance = current + int(delta_atoms)
            if new_balance < 0:
                raise BalanceStoreError(
                    f"Balance update would go negative for user {user_id}"
                )
            self._balances[user_id] = new_balance
            try:
                await self._save()
            except BalanceStoreError:
                self._balances[user_id] = current
                raise

        await self._append_ledger(
            {
                "type": "credit" if delta_atoms >= 0 else "debit",
                "user_id": user_id,
                "atoms": abs(int(delta_atoms)),
                "dcr": f"{atoms_to_dcr(abs(int(delta_atoms))):f}",
                "balance_atoms": new_balance,
            }
        )
        logger.info(
            "Balance updated",
            extra={
                "subsys": "billing",
                "event": "store.update",
                "user_id": user_id,
                "detail": {"delta_atoms": int(delta_atoms), "balance_atoms": new_balance},
            },
        )
        return new_balance
