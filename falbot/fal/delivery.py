"""
Artifact delivery [RM][REH]

Turns a decoded job result into something the user receives:

- images and speech are downloaded and sent inline as `--embed[...]--`
  messages, falling back to a file upload when they are too large;
- videos (and anything else large) are streamed into a temp file, uploaded
  with `send_file` and removed on every exit path;
- transcripts are sent as text.

Any download or transport failure is raised as DeliveryError so the caller
knows the user did not get the artifact.
"""

from __future__ import annotations

import asyncio
import mimetypes
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Tuple

import aiofiles
import aiohttp

from falbot.adapters.base import ChatTransport
from falbot.adapters.embeds import format_embed
from falbot.exceptions import DeliveryError
from falbot.utils.logging import get_logger

from .models import Model
from .types import (
    AudioResponse,
    Capability,
    ImageOutput,
    ImageResponse,
    TranscriptionResponse,
    VideoResponse,
)

logger = get_logger(__name__)

# Discord's default upload limit
MAX_EMBED_BYTES = 8 * 1024 * 1024
CHUNK_SIZE = 1024 * 1024

_EXTRA_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/svg+xml": ".svg",
    "audio/mpeg": ".mp3",
    "audio/ogg": ".ogg",
    "audio/wav": ".wav",
    "video/mp4": ".mp4",
}


def extension_for(content_type: Optional[str], url: str = "", default: str = ".bin") -> str:
    if content_type:
        base = content_type.split(";", 1)[0].strip().lower()
        if base in _EXTRA_EXTENSIONS:
            return _EXTRA_EXTENSIONS[base]
        guessed = mimetypes.guess_extension(base)
        if guessed:
            return guessed
    suffix = Path(url.split("?", 1)[0]).suffix
    return suffix if 1 < len(suffix) <= 5 else default


def format_transcript(result: TranscriptionResponse) -> str:
    """Plain transcript with language and speaker summary."""
    header = []
    if result.language_code:
        if result.language_probability is not None:
            header.append(f"Language: {result.language_code} ({result.language_probability:.0%})")
        else:
            header.append(f"Language: {result.language_code}")
    if result.speakers:
        header.append(f"Speakers: {len(result.speakers)}")
    text = result.text.strip() or "(no speech detected)"
    if not header:
        return f"📝 Transcript:\n{text}"
    return "📝 Transcript (" + ", ".join(header) + f"):\n{text}"


class ArtifactDeliverer:
    """Downloads job outputs and sends them over the chat transport."""

    def __init__(
        self,
        transport: ChatTransport,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 300,
        max_embed_bytes: int = MAX_EMBED_BYTES,
    ):
        self.transport = transport
        self.session = session
        self.timeout = timeout
        self.max_embed_bytes = max_embed_bytes
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self.session

    async def download(self, url: str) -> Tuple[bytes, Optional[str]]:
        """Fetch a small artifact into memory."""
        session = await self._get_session()
        try:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                if resp.status != 200:
                    raise DeliveryError(f"Download of {url} failed with HTTP {resp.status}")
                data = await resp.read()
                return data, resp.content_type
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DeliveryError(f"Download of {url} failed: {e!r}") from e

    async def send_as_file(
        self,
        user_id: str,
        url: str,
        prefix: str,
        content_type: Optional[str] = None,
    ) -> None:
        """Stream url into a temp file, upload it and remove it."""
        suffix = extension_for(content_type, url)
        fd, tmp_name = tempfile.mkstemp(prefix=f"{prefix}-", suffix=suffix)
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            session = await self._get_session()
            try:
                async with session.get(url, timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                    if resp.status != 200:
                        raise DeliveryError(f"Download of {url} failed with HTTP {resp.status}")
                    async with aiofiles.open(tmp_path, "wb") as f:
                        async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                            if not chunk:
                                continue
                            await f.write(chunk)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise DeliveryError(f"Download of {url} failed: {e!r}") from e

            try:
                await self.transport.send_file(user_id, tmp_path, filename=f"{prefix}{suffix}")
            except DeliveryError:
                raise
            except asyncio.CancelledError:
                raise
            except Exception as e:
                raise DeliveryError(f"Sending file to {user_id} failed: {e}") from e
        finally:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(
                    f"Could not remove temp file {tmp_path}: {e}",
                    extra={"subsys": "delivery", "event": "delivery.cleanup_failed"},
                )

    async def _send_text(self, user_id: str, text: str) -> None:
        try:
            await self.transport.send_message(user_id, text)
        except DeliveryError:
            raise
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise DeliveryError(f"Sending message to {user_id} failed: {e}") from e

    async def _send_inline(
        self, user_id: str, url: str, alt: str, fallback_type: str, prefix: str
    ) -> None:
        data, content_type = await self.download(url)
        mime_type = fallback_type
        if content_type and content_type != "application/octet-stream":
            mime_type = content_type
        if len(data) > self.max_embed_bytes:
            await self.send_as_file(user_id, url, prefix, mime_type)
            return
        await self._send_text(user_id, format_embed(alt, mime_type, data))

    async def deliver_images(self, user_id: str, outputs: List[ImageOutput], alt: str) -> None:
        for index, image in enumerate(outputs, start=1):
            prefix = "image" if len(outputs) == 1 else f"image-{index}"
            await self._send_inline(user_id, image.url, alt, image.content_type or "image/jpeg", prefix)

    async def deliver(
        self,
        user_id: str,
        model: Model,
        result: Any,
        prompt: Optional[str] = None,
    ) -> None:
        """
        Send the job result to the user.

        Raises:
            DeliveryError: when the artifact could not be fetched or sent
        """
        if isinstance(result, ImageResponse):
            await self.deliver_images(user_id, result.outputs, prompt or model.name)
        elif isinstance(result, VideoResponse):
            await self.send_as_file(user_id, result.url(), "video", "video/mp4")
        elif isinstance(result, AudioResponse):
            if result.content_type.startswith("video/"):
                await self.send_as_file(user_id, result.url, "video", result.content_type)
            else:
                kind = "speech" if model.capability == Capability.TEXT2SPEECH else "audio"
                await self._send_inline(user_id, result.url, f"{model.name} {kind}", result.content_type, kind)
        elif isinstance(result, TranscriptionResponse):
            await self._send_text(user_id, format_transcript(result))
        else:
            raise DeliveryError(f"Cannot deliver result of type {type(result).__name__}")

        logger.info(
            f"Delivered {model.name} result",
            extra={
                "subsys": "delivery",
                "event": "delivery.sent",
                "user_id": user_id,
                "detail": {"model": model.name, "kind": type(result).__name__},
            },
        )

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
