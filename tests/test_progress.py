"""
Tests for the throttled chat progress sink.
"""
import pytest

from falbot.fal.progress import (
    DEFAULT_NOTICE,
    IN_PROGRESS_NOTICES,
    ChatProgressCallback,
    NullProgress,
    format_eta,
)
from falbot.fal.types import FalError, FalErrorType


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def progress(transport, clock):
    return ChatProgressCallback(
        transport,
        "42",
        "text2video",
        queue_interval=30,
        status_interval=20,
        log_interval=15,
        notice_interval=120,
        clock=clock,
    )


def test_format_eta():
    assert format_eta(None) == "unknown"
    assert format_eta(45) == "45s"
    assert format_eta(125) == "2m5s"
    assert format_eta(-3) == "0s"


@pytest.mark.asyncio
async def test_queue_updates_are_throttled(progress, transport, clock):
    await progress.on_queue_update(5, 90)
    await progress.on_queue_update(4, 80)
    assert transport.texts("42") == ["Queue position: 5, ETA: 1m30s"]

    clock.advance(31)
    await progress.on_queue_update(3, None)
    assert transport.texts("42")[-1] == "Queue position: 3, ETA: unknown"


@pytest.mark.asyncio
async def test_queue_update_without_data_is_silent(progress, transport):
    await progress.on_queue_update(None, None)
    assert transport.messages == []


@pytest.mark.asyncio
async def test_identical_message_not_repeated(progress, transport, clock):
    await progress.on_log_message("step 1")
    clock.advance(60)
    await progress.on_log_message("step 1")
    assert transport.texts() == ["Log: step 1"]

    await progress.on_log_message("loading\nstep 2\n")
    assert transport.texts()[-1] == "Log: step 2"


@pytest.mark.asyncio
async def test_in_progress_sends_capability_notice(progress, transport, clock):
    await progress.on_progress("IN_QUEUE")
    clock.advance(21)
    await progress.on_progress("IN_PROGRESS")

    assert transport.texts() == [
        "Status: IN_QUEUE",
        "Status: IN_PROGRESS",
        IN_PROGRESS_NOTICES["text2video"],
    ]


@pytest.mark.asyncio
async def test_status_deferred_until_interval_opens(progress, transport, clock):
    await progress.on_progress("IN_QUEUE")
    clock.advance(5)
    await progress.on_progress("IN_PROGRESS")
    assert transport.texts() == ["Status: IN_QUEUE", IN_PROGRESS_NOTICES["text2video"]]

    clock.advance(15)
    await progress.on_progress("IN_PROGRESS")
    assert transport.texts()[-1] == "Status: IN_PROGRESS"
    clock.advance(20)
    await progress.on_progress("IN_PROGRESS")
    assert transport.texts().count("Status: IN_PROGRESS") == 1


@pytest.mark.asyncio
async def test_notice_has_its_own_interval(progress, transport, clock):
    await progress.on_progress("IN_PROGRESS")
    clock.advance(21)
    await progress.on_progress("IN_QUEUE")
    clock.advance(21)
    await progress.on_progress("IN_PROGRESS")

    notices = [t for t in transport.texts() if t == IN_PROGRESS_NOTICES["text2video"]]
    assert len(notices) == 1

    clock.advance(120)
    await progress.on_progress("IN_QUEUE")
    clock.advance(21)
    await progress.on_progress("IN_PROGRESS")
    notices = [t for t in transport.texts() if t == IN_PROGRESS_NOTICES["text2video"]]
    assert len(notices) == 2


@pytest.mark.asyncio
async def test_unknown_capability_uses_default_notice(transport, clock):
    progress = ChatProgressCallback(transport, "42", "something-new", clock=clock)
    await progress.on_progress("IN_PROGRESS")
    assert transport.texts()[-1] == DEFAULT_NOTICE


@pytest.mark.asyncio
async def test_error_uses_user_message(progress, transport):
    error = FalError(FalErrorType.GENERATION_FAILED, "raw", user_message="It broke")
    await progress.on_error(error)
    await progress.on_error(RuntimeError("plain"))
    assert transport.texts() == ["Error: It broke", "Error: plain"]


@pytest.mark.asyncio
async def test_null_progress_discards_everything():
    sink = NullProgress()
    await sink.on_queue_update(1, 2)
    await sink.on_log_message("x")
    await sink.on_progress("IN_PROGRESS")
    await sink.on_error(RuntimeError("x"))
