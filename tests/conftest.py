"""
Shared fixtures: an in-memory aiohttp session, a recording chat transport
and a fixed-price rate source.
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from falbot.adapters.base import ChatTransport
from falbot.billing.errors import RateUnavailableError
from falbot.billing.units import Money


class FakeContent:
    def __init__(self, body: bytes):
        self._body = body

    async def iter_chunked(self, size: int):
        for start in range(0, len(self._body), size):
            yield self._body[start:start + size]


class FakeResponse:
    """Stands in for aiohttp.ClientResponse inside `async with`."""

    def __init__(self, status: int = 200, body: Any = b"", content_type: str = "application/json"):
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode()
        elif isinstance(body, str):
            body = body.encode()
        self.status = status
        self.body = body
        self.content_type = content_type
        self.content = FakeContent(body)

    async def read(self) -> bytes:
        return self.body

    async def json(self, content_type=None):
        return json.loads(self.body)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _Pending:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """
    Routes requests by exact URL to queued responses.

    The last queued response for a URL is repeated once the queue runs dry.
    Queue an exception instance to have the request raise it.
    """

    def __init__(self):
        self.routes: Dict[str, List[Any]] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.closed = False

    def add(self, url: str, *outcomes) -> "FakeSession":
        self.routes.setdefault(url, []).extend(outcomes)
        return self

    def request(self, method: str, url: str, **kwargs):
        self.calls.append((method, url, kwargs))
        queue = self.routes.get(url)
        if not queue:
            return _Pending(FakeResponse(404, {"detail": f"no route for {url}"}))
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        return _Pending(outcome)

    def get(self, url: str, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self.request("POST", url, **kwargs)

    def calls_to(self, url: str) -> List[Tuple[str, str, Dict[str, Any]]]:
        return [call for call in self.calls if call[1] == url]

    async def close(self):
        self.closed = True


class RecordingTransport(ChatTransport):
    """Keeps every message and uploaded file, optionally failing on demand."""

    def __init__(self, fail_messages: bool = False, fail_files: bool = False):
        self.messages: List[Tuple[str, str]] = []
        self.files: List[Tuple[str, str, bytes]] = []
        self.fail_messages = fail_messages
        self.fail_files = fail_files

    async def send_message(self, user_id: str, text: str) -> None:
        if self.fail_messages:
            raise RuntimeError("chat unavailable")
        self.messages.append((user_id, text))

    async def send_file(self, user_id: str, path: Path, filename: Optional[str] = None) -> None:
        if self.fail_files:
            raise RuntimeError("upload rejected")
        self.files.append((user_id, filename or Path(path).name, Path(path).read_bytes()))

    def texts(self, user_id: Optional[str] = None) -> List[str]:
        return [text for uid, text in self.messages if user_id is None or uid == user_id]


class FixedRates:
    """Rate source with a fixed USD/DCR price."""

    def __init__(self, usd_per_dcr: str = "20", btc_per_dcr: str = "0.0002", unavailable: bool = False):
        self.usd_per_dcr = Decimal(usd_per_dcr)
        self.btc_per_dcr = Decimal(btc_per_dcr)
        self.unavailable = unavailable
        self.calls = 0

    async def get_dcr_price(self):
        self.calls += 1
        if self.unavailable:
            raise RateUnavailableError("oracle down")
        return self.usd_per_dcr, self.btc_per_dcr

    async def usd_to_dcr(self, cost):
        usd, _ = await self.get_dcr_price()
        return Money(cost).to_decimal() / usd

    async def close(self):
        pass


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def rates():
    return FixedRates()
