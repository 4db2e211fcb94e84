"""
fal.ai queue client [PA][REH][RM]

Implements the submit -> poll -> fetch workflow shared by every model:

1. POST the body to the model endpoint and parse the queue descriptor.
2. Hand (queue_id, response_url) to the optional queue-info sink.
3. Report the initial queue position, then poll `<response_url>/status?logs=1`
   every poll interval, forwarding new log lines, status changes and
   position/ETA changes to the progress sink.
4. On COMPLETED, GET the response URL and run the caller's decoder over the
   raw body. On FAILED, raise GENERATION_FAILED with the remote logs.

The client never retries; any non-accepted HTTP status fails the job.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import aiohttp

from falbot.utils.logging import get_logger

from .progress import NullProgress, ProgressCallback
from .types import FalError, FalErrorType, QueueDescriptor, QueueStatus

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://queue.fal.run/fal-ai"
STATUS_SUFFIX = "/status?logs=1"
POLL_OK_STATUSES = (200, 202)


class FalClient:
    """Async client for the fal.ai queue API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        poll_interval: float = 5.0,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
        debug: bool = False,
    ):
        if not api_key:
            raise FalError(
                error_type=FalErrorType.HTTP_ERROR,
                message="FAL_API_KEY is not configured",
                user_message="Generation is not properly configured.",
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.debug = debug
        self.session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session with proper headers [RM]"""
        if self.session is None or self.session.closed:
            headers = {
                "Authorization": f"Key {self.api_key}",
                "Content-Type": "application/json",
                "User-Agent": "falbot/1.0",
            }
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self.session = aiohttp.ClientSession(
                headers=headers,
                timeout=timeout,
                connector=aiohttp.TCPConnector(limit=20),
            )
            self._owns_session = True
        return self.session

    @property
    def _auth_headers(self) -> Dict[str, str]:
        # Sent per request as well, so injected sessions are authenticated too
        return {"Authorization": f"Key {self.api_key}", "Content-Type": "application/json"}

    def _resolve_url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        if not endpoint.startswith("/"):
            endpoint = "/" + endpoint
        return self.base_url + endpoint

    def _map_http_error(self, status: int, body: bytes, url: str) -> FalError:
        """Map HTTP errors to structured FalError [REH]"""
        detail = body[:500].decode("utf-8", errors="replace")
        try:
            parsed = json.loads(body)
            if isinstance(parsed, dict):
                detail = str(parsed.get("detail") or parsed.get("message") or parsed.get("error") or detail)
        except ValueError:
            pass

        if status in (401, 403):
            user_message = "The generation service rejected our credentials. Please contact an admin."
        elif status == 422:
            user_message = "The generation service rejected the request parameters."
        elif status == 429:
            user_message = "The generation service is rate limiting requests. Please try again shortly."
        elif status >= 500:
            user_message = "The generation service is temporarily unavailable. Please try again later."
        else:
            user_message = "The generation service returned an unexpected error."

        return FalError(
            error_type=FalErrorType.HTTP_ERROR,
            message=f"HTTP {status} from {url}: {detail}",
            user_message=user_message,
            status_code=status,
            details={"url": url},
        )

    async def _request(
        self,
        method: str,
        url: str,
        body: Optional[Dict[str, Any]] = None,
        accepted: Callable[[int], bool] = lambda s: 200 <= s < 300,
    ) -> bytes:
        session = await self._get_session()
        try:
            async with session.request(
                method,
                url,
                json=body,
                headers=self._auth_headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                data = await resp.read()
                if not accepted(resp.status):
                    raise self._map_http_error(resp.status, data, url)
                return data
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FalError(
                error_type=FalErrorType.NETWORK_ERROR,
                message=f"{method} {url} failed: {e!r}",
                user_message="Network connection to the generation service failed. Please try again.",
                details={"url": url},
            ) from e

    async def _notify(self, coro: Awaitable[None], event: str) -> None:
        """Run a progress-sink call; sink failures are logged, never raised."""
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                f"Progress sink failed during {event}: {e}",
                extra={"subsys": "fal", "event": "fal.progress.error", "detail": {"sink_event": event}},
            )

    async def _emit_queue_info(self, sink: Callable[[str, str], Any], descriptor: QueueDescriptor) -> None:
        try:
            result = sink(descriptor.queue_id or "", descriptor.response_url or "")
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                f"Queue-info sink failed: {e}",
                extra={"subsys": "fal", "event": "fal.queue_info.error"},
            )

    async def execute_async_workflow(
        self,
        endpoint: str,
        body: Dict[str, Any],
        decoder: Callable[[bytes], T],
        progress: Optional[ProgressCallback] = None,
        queue_info: Optional[Callable[[str, str], Any]] = None,
    ) -> T:
        """
        Submit a job, poll it to a terminal state and decode the final body.

        Raises:
            FalError: on HTTP, network, decode or remote generation failure
            asyncio.CancelledError: when the calling task is cancelled
        """
        progress = progress or NullProgress()
        url = self._resolve_url(endpoint)

        logger.info(
            f"Submitting job to {endpoint}",
            extra={
                "subsys": "fal",
                "event": "fal.submit",
                "detail": {"endpoint": endpoint, "keys": sorted(body.keys())},
            },
        )
        raw = await self._request("POST", url, body)
        try:
            submit_data = json.loads(raw)
        except ValueError as e:
            raise FalError(
                error_type=FalErrorType.DECODE_ERROR,
                message=f"Queue submit returned invalid JSON: {e}",
            ) from e
        descriptor = QueueDescriptor.from_dict(submit_data if isinstance(submit_data, dict) else {})

        if not descriptor.response_url:
            raise FalError(
                error_type=FalErrorType.DECODE_ERROR,
                message=f"Queue submit to {endpoint} returned no response_url",
                details={"body": submit_data},
            )

        logger.info(
            "Job queued",
            extra={
                "subsys": "fal",
                "event": "fal.queued",
                "job_id": descriptor.queue_id,
                "detail": {"position": descriptor.position, "eta": descriptor.eta_seconds},
            },
        )

        if queue_info is not None:
            await self._emit_queue_info(queue_info, descriptor)

        await self._notify(
            progress.on_queue_update(descriptor.position, descriptor.eta_seconds),
            "queue_update",
        )

        final_url = await self._poll_queue_status(descriptor, progress)
        final_body = await self._request("GET", final_url)

        if self.debug:
            logger.debug(
                f"Final response body: {final_body[:2000]!r}",
                extra={"subsys": "fal", "event": "fal.final_body", "job_id": descriptor.queue_id},
            )
        return decoder(final_body)

    async def _poll_queue_status(
        self, descriptor: QueueDescriptor, progress: ProgressCallback
    ) -> str:
        """Poll until COMPLETED (returning the result URL) or FAILED (raising) [PA]"""
        base_url = descriptor.response_url or ""
        if base_url.endswith(STATUS_SUFFIX):
            base_url = base_url[: -len(STATUS_SUFFIX)]
        status_url = base_url + STATUS_SUFFIX

        last_position = descriptor.position
        last_eta = descriptor.eta_seconds
        logs_sent = 0

        while True:
            await asyncio.sleep(self.poll_interval)

            raw = await self._request("GET", status_url, accepted=lambda s: s in POLL_OK_STATUSES)
            try:
                data = json.loads(raw)
            except ValueError as e:
                raise FalError(
                    error_type=FalErrorType.DECODE_ERROR,
                    message=f"Status poll returned invalid JSON: {e}",
                ) from e
            current = QueueDescriptor.from_dict(data if isinstance(data, dict) else {})

            # The remote repeats the full log list on every poll
            for entry in current.logs[logs_sent:]:
                await self._notify(progress.on_log_message(entry.message), "log_message")
            logs_sent = max(logs_sent, len(current.logs))

            if current.status == QueueStatus.COMPLETED:
                logger.info(
                    "Job completed",
                    extra={"subsys": "fal", "event": "fal.completed", "job_id": descriptor.queue_id},
                )
                return base_url

            if current.status == QueueStatus.FAILED:
                logger.warning(
                    "Job failed remotely",
                    extra={
                        "subsys": "fal",
                        "event": "fal.failed",
                        "job_id": descriptor.queue_id,
                        "detail": {"logs": [log.message for log in current.logs[-5:]]},
                    },
                )
                raise FalError(
                    error_type=FalErrorType.GENERATION_FAILED,
                    message=f"Job {descriptor.queue_id} failed",
                    user_message="Generation failed. Please try again with different parameters.",
                    logs=current.logs,
                )

            # Every poll is reported; the sink applies its own throttling
            status_text = current.raw_status or current.status.value
            await self._notify(progress.on_progress(status_text), "progress")

            if current.position != last_position or current.eta_seconds != last_eta:
                last_position = current.position
                last_eta = current.eta_seconds
                await self._notify(
                    progress.on_queue_update(current.position, current.eta_seconds),
                    "queue_update",
                )

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
