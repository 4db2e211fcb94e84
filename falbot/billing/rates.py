"""
Exchange rate cache backed by the CoinGecko simple-price oracle [PA][REH]

Rates are fetched lazily on read and cached for a TTL (10 minutes by default).
Concurrent readers that find the cache stale share a single refresh: the
first one fetches under the lock, the rest re-check freshness after acquiring
it and return the value just stored.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Tuple

import aiohttp

from falbot.utils.logging import get_logger

from .errors import RateUnavailableError
from .units import Money

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateSnapshot:
    """DCR prices as of one oracle fetch."""

    usd_per_dcr: Decimal
    btc_per_dcr: Decimal
    fetched_at: float


@dataclass(frozen=True)
class BtcSnapshot:
    usd_per_btc: Decimal
    fetched_at: float


class RateCache:
    """Process-wide DCR/BTC price cache with single-flight refresh."""

    def __init__(
        self,
        dcr_url: str,
        btc_url: str,
        ttl_seconds: float = 600,
        timeout_seconds: float = 10,
        session: Optional[aiohttp.ClientSession] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.dcr_url = dcr_url
        self.btc_url = btc_url
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self.session = session
        self._owns_session = session is None
        self._clock = clock

        self._dcr: Optional[RateSnapshot] = None
        self._btc: Optional[BtcSnapshot] = None
        self._dcr_lock = asyncio.Lock()
        self._btc_lock = asyncio.Lock()
        self.refresh_count = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session with the oracle timeout [RM]"""
        if self.session is None or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self.session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self.session

    def _is_fresh(self, fetched_at: float) -> bool:
        return (self._clock() - fetched_at) < self.ttl_seconds

    async def get_dcr_price(self) -> Tuple[Decimal, Decimal]:
        """Return (usd_per_dcr, btc_per_dcr), refreshing at most once per TTL window."""
        snapshot = self._dcr
        if snapshot is not None and self._is_fresh(snapshot.fetched_at):
            return snapshot.usd_per_dcr, snapshot.btc_per_dcr

        async with self._dcr_lock:
            snapshot = self._dcr
            if snapshot is not None and self._is_fresh(snapshot.fetched_at):
                return snapshot.usd_per_dcr, snapshot.btc_per_dcr

            data = await self._fetch_json(self.dcr_url)
            usd = self._extract_price(data, "decred", "usd")
            btc = self._extract_price(data, "decred", "btc")
            self._dcr = RateSnapshot(usd_per_dcr=usd, btc_per_dcr=btc, fetched_at=self._clock())
            self.refresh_count += 1

            logger.info(
                "DCR rate refreshed",
                extra={
                    "subsys": "billing",
                    "event": "rates.refresh",
                    "detail": {"usd_per_dcr": str(usd), "btc_per_dcr": str(btc)},
                },
            )
            return usd, btc

    async def get_btc_price(self) -> Decimal:
        """Return the USD price of one bitcoin."""
        snapshot = self._btc
        if snapshot is not None and self._is_fresh(snapshot.fetched_at):
            return snapshot.usd_per_btc

        async with self._btc_lock:
            snapshot = self._btc
            if snapshot is not None and self._is_fresh(snapshot.fetched_at):
                return snapshot.usd_per_btc

            data = await self._fetch_json(self.btc_url)
            usd = self._extract_price(data, "bitcoin", "usd")
            self._btc = BtcSnapshot(usd_per_btc=usd, fetched_at=self._clock())
            return usd

    async def usd_to_dcr(self, cost: Money) -> Decimal:
        """Convert a USD amount to DCR at the cached rate."""
        usd_per_dcr, _ = await self.get_dcr_price()
        if usd_per_dcr <= 0:
            raise RateUnavailableError("DCR price is zero; cannot convert USD to DCR")
        return Money(cost).to_decimal() / usd_per_dcr

    async def _fetch_json(self, url: str) -> Dict[str, Any]:
        session = await self._get_session()
        try:
            async with session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            ) as resp:
                if resp.status != 200:
                    raise RateUnavailableError(
                        f"Rate oracle returned HTTP {resp.status} for {url}"
                    )
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RateUnavailableError(f"Rate oracle request failed: {e}") from e
        except ValueError as e:
            raise RateUnavailableError(f"Rate oracle returned malformed JSON: {e}") from e

        if not isinstance(data, dict):
            raise RateUnavailableError("Rate oracle returned an unexpected body")
        return data

    @staticmethod
    def _extract_price(data: Dict[str, Any], coin: str, currency: str) -> Decimal:
        try:
            value = data[coin][currency]
            price = Decimal(str(value))
        except (KeyError, TypeError, InvalidOperation) as e:
            raise RateUnavailableError(f"Missing {coin}.{currency} in oracle response") from e
        if price <= 0:
            raise RateUnavailableError(f"Oracle reported non-positive {coin}.{currency} price")
        return price

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
