"""
Tests for the fal.ai queue client's submit -> poll -> fetch workflow.
"""
import asyncio
import json

import aiohttp
import pytest

from conftest import FakeResponse, FakeSession, RecordingTransport
from falbot.fal.client import FalClient
from falbot.fal.progress import IN_PROGRESS_NOTICES, ChatProgressCallback, ProgressCallback
from falbot.fal.types import FalError, FalErrorType

BASE = "https://queue.fal.run/fal-ai"
RESPONSE_URL = f"{BASE}/fast-sdxl/requests/req-1"
STATUS_URL = RESPONSE_URL + "/status?logs=1"


class RecordingProgress(ProgressCallback):
    def __init__(self):
        self.events = []

    async def on_queue_update(self, position, eta_seconds):
        self.events.append(("queue", position, eta_seconds))

    async def on_log_message(self, message):
        self.events.append(("log", message))

    async def on_progress(self, status):
        self.events.append(("status", status))

    async def on_error(self, error):
        self.events.append(("error", error))


def _submitted(position=2):
    return FakeResponse(200, {
        "status": "IN_QUEUE",
        "request_id": "req-1",
        "response_url": RESPONSE_URL,
        "status_url": STATUS_URL,
        "queue_position": position,
    })


def _status(status, logs=(), position=None, code=200):
    body = {"status": status, "logs": [{"message": m} for m in logs]}
    if position is not None:
        body["queue_position"] = position
    return FakeResponse(code, body)


def _client(session):
    return FalClient("test-key", base_url=BASE, poll_interval=0, session=session)


def _decode(body: bytes):
    return json.loads(body)


@pytest.mark.asyncio
async def test_workflow_completes_and_decodes(fake_session):
    fake_session.add(f"{BASE}/fast-sdxl", _submitted())
    fake_session.add(
        STATUS_URL,
        _status("IN_QUEUE", position=1),
        _status("IN_PROGRESS", logs=["loading"], code=202),
        _status("IN_PROGRESS", logs=["loading", "step 10/30"]),
        _status("COMPLETED", logs=["loading", "step 10/30", "done"]),
    )
    fake_session.add(RESPONSE_URL, FakeResponse(200, {"images": [{"url": "https://cdn/x.png"}]}))

    progress = RecordingProgress()
    queue_info = []
    result = await _client(fake_session).execute_async_workflow(
        "/fast-sdxl",
        {"prompt": "a cat"},
        _decode,
        progress=progress,
        queue_info=lambda qid, url: queue_info.append((qid, url)),
    )

    assert result == {"images": [{"url": "https://cdn/x.png"}]}
    assert queue_info == [("req-1", RESPONSE_URL)]

    method, _, kwargs = fake_session.calls[0]
    assert method == "POST"
    assert kwargs["json"] == {"prompt": "a cat"}
    assert kwargs["headers"]["Authorization"] == "Key test-key"

    logs = [e[1] for e in progress.events if e[0] == "log"]
    assert logs == ["loading", "step 10/30", "done"]
    statuses = [e[1] for e in progress.events if e[0] == "status"]
    assert statuses == ["IN_QUEUE", "IN_PROGRESS", "IN_PROGRESS"]
    assert progress.events[0] == ("queue", 2, None)
    assert ("queue", 1, None) in progress.events


class ClockedSession(FakeSession):
    """Moves a fake clock forward by one poll interval on every status poll."""

    def __init__(self, step: float = 5.0):
        super().__init__()
        self.now = 1000.0
        self.step = step

    def clock(self) -> float:
        return self.now

    def request(self, method, url, **kwargs):
        if url == STATUS_URL:
            self.now += self.step
        return super().request(method, url, **kwargs)


@pytest.mark.asyncio
async def test_in_progress_reaches_throttled_chat_sink():
    session = ClockedSession()
    session.add(f"{BASE}/fast-sdxl", _submitted())
    session.add(STATUS_URL, _status("IN_QUEUE"), *[_status("IN_PROGRESS") for _ in range(12)], _status("COMPLETED"))
    session.add(RESPONSE_URL, FakeResponse(200, {"video": {"url": "https://cdn/v.mp4"}}))

    transport = RecordingTransport()
    sink = ChatProgressCallback(transport, "42", "image2video", clock=session.clock)
    await _client(session).execute_async_workflow("/fast-sdxl", {}, _decode, progress=sink)

    texts = transport.texts()
    assert texts.count("Status: IN_QUEUE") == 1
    assert texts.count("Status: IN_PROGRESS") == 1
    assert texts.count(IN_PROGRESS_NOTICES["image2video"]) == 1
    assert texts.index("Status: IN_QUEUE") < texts.index(IN_PROGRESS_NOTICES["image2video"])


@pytest.mark.asyncio
async def test_failed_job_raises_generation_failed(fake_session):
    fake_session.add(f"{BASE}/fast-sdxl", _submitted())
    fake_session.add(STATUS_URL, _status("FAILED", logs=["NSFW content detected"]))

    with pytest.raises(FalError) as exc:
        await _client(fake_session).execute_async_workflow("/fast-sdxl", {}, _decode)

    assert exc.value.error_type == FalErrorType.GENERATION_FAILED
    assert [log.message for log in exc.value.logs] == ["NSFW content detected"]
    assert not fake_session.calls_to(RESPONSE_URL)


@pytest.mark.asyncio
async def test_submit_http_error_is_mapped(fake_session):
    fake_session.add(f"{BASE}/fast-sdxl", FakeResponse(401, {"detail": "bad key"}))

    with pytest.raises(FalError) as exc:
        await _client(fake_session).execute_async_workflow("/fast-sdxl", {}, _decode)

    assert exc.value.error_type == FalErrorType.HTTP_ERROR
    assert exc.value.status_code == 401
    assert "bad key" in exc.value.message
    assert not exc.value.is_user_error


@pytest.mark.asyncio
async def test_poll_non_accepted_status_fails(fake_session):
    fake_session.add(f"{BASE}/fast-sdxl", _submitted())
    fake_session.add(STATUS_URL, FakeResponse(500, b"upstream down", content_type="text/plain"))

    with pytest.raises(FalError) as exc:
        await _client(fake_session).execute_async_workflow("/fast-sdxl", {}, _decode)
    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_missing_response_url_is_decode_error(fake_session):
    fake_session.add(f"{BASE}/fast-sdxl", FakeResponse(200, {"status": "IN_QUEUE"}))

    with pytest.raises(FalError) as exc:
        await _client(fake_session).execute_async_workflow("/fast-sdxl", {}, _decode)
    assert exc.value.error_type == FalErrorType.DECODE_ERROR


@pytest.mark.asyncio
async def test_network_error_is_mapped(fake_session):
    fake_session.add(f"{BASE}/fast-sdxl", aiohttp.ClientConnectionError("reset"))

    with pytest.raises(FalError) as exc:
        await _client(fake_session).execute_async_workflow("/fast-sdxl", {}, _decode)
    assert exc.value.error_type == FalErrorType.NETWORK_ERROR


@pytest.mark.asyncio
async def test_absolute_endpoint_bypasses_base_url(fake_session):
    url = "https://queue.fal.run/resemble-ai/chatterboxhd/text-to-speech"
    fake_session.add(url, FakeResponse(500, b"{}"))

    with pytest.raises(FalError):
        await _client(fake_session).execute_async_workflow(url, {}, _decode)
    assert fake_session.calls[0][1] == url


@pytest.mark.asyncio
async def test_progress_sink_failures_do_not_abort(fake_session):
    class BrokenProgress(RecordingProgress):
        async def on_queue_update(self, position, eta_seconds):
            raise RuntimeError("chat down")

    fake_session.add(f"{BASE}/fast-sdxl", _submitted())
    fake_session.add(STATUS_URL, _status("COMPLETED"))
    fake_session.add(RESPONSE_URL, FakeResponse(200, {"ok": True}))

    result = await _client(fake_session).execute_async_workflow(
        "/fast-sdxl", {}, _decode, progress=BrokenProgress()
    )
    assert result == {"ok": True}


@pytest.mark.asyncio
async def test_cancellation_stops_polling():
    session = FakeSession()
    session.add(f"{BASE}/fast-sdxl", _submitted())
    session.add(STATUS_URL, _status("IN_PROGRESS"))
    client = FalClient("test-key", base_url=BASE, poll_interval=0.01, session=session)

    task = asyncio.create_task(client.execute_async_workflow("/fast-sdxl", {}, _decode))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    polls = len(session.calls_to(STATUS_URL))
    await asyncio.sleep(0.05)
    assert len(session.calls_to(STATUS_URL)) == polls
    assert not session.calls_to(RESPONSE_URL)


def test_missing_api_key_rejected():
    with pytest.raises(FalError):
        FalClient("")
