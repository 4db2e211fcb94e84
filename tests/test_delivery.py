"""
Tests for artifact delivery over the chat transport.
"""
from pathlib import Path

import aiohttp
import pytest

from conftest import FakeResponse, RecordingTransport
from falbot.adapters.embeds import parse_embeds
from falbot.exceptions import DeliveryError
from falbot.fal.delivery import ArtifactDeliverer, extension_for, format_transcript
from falbot.fal.registry import build_registry
from falbot.fal.types import (
    AudioResponse,
    ImageOutput,
    ImageResponse,
    TranscriptionResponse,
    TranscriptionWord,
    VideoResponse,
)


class PathRecordingTransport(RecordingTransport):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.paths = []

    async def send_file(self, user_id, path, filename=None):
        self.paths.append(Path(path))
        await super().send_file(user_id, path, filename)


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def deliverer(transport, fake_session):
    return ArtifactDeliverer(transport, session=fake_session, max_embed_bytes=64)


def test_extension_for():
    assert extension_for("image/png") == ".png"
    assert extension_for("image/jpeg") == ".jpg"
    assert extension_for("audio/mpeg; charset=binary") == ".mp3"
    assert extension_for(None, "https://cdn/clip.webm?sig=1") == ".webm"
    assert extension_for(None, "https://cdn/blob") == ".bin"


def test_format_transcript():
    result = TranscriptionResponse(
        text=" hi there ",
        language_code="en",
        language_probability=0.98,
        words=[TranscriptionWord("hi", speaker_id="a"), TranscriptionWord("there", speaker_id="b")],
    )
    assert format_transcript(result) == "📝 Transcript (Language: en (98%), Speakers: 2):\nhi there"
    assert format_transcript(TranscriptionResponse(text="")) == "📝 Transcript:\n(no speech detected)"


@pytest.mark.asyncio
async def test_images_are_embedded_with_prompt_as_alt(deliverer, fake_session, transport, registry):
    fake_session.add("https://cdn/a.png", FakeResponse(200, b"PNGDATA", content_type="image/png"))
    result = ImageResponse(images=[ImageOutput("https://cdn/a.png", "image/png")])

    await deliverer.deliver("42", registry.get_model("fast-sdxl"), result, prompt="a red fox")

    (user_id, text), = transport.messages
    assert user_id == "42"
    plain, embeds = parse_embeds(text)
    assert plain == ""
    assert embeds[0].alt == "a red fox"
    assert embeds[0].mime_type == "image/png"
    assert embeds[0].data == b"PNGDATA"


@pytest.mark.asyncio
async def test_large_image_falls_back_to_file(deliverer, fake_session, transport, registry):
    big = b"x" * 100
    fake_session.add("https://cdn/big.png", FakeResponse(200, big, content_type="image/png"))
    result = ImageResponse(images=[ImageOutput("https://cdn/big.png", "image/png")])

    await deliverer.deliver("42", registry.get_model("fast-sdxl"), result, prompt="big")

    assert transport.messages == []
    assert transport.files == [("42", "image.png", big)]


@pytest.mark.asyncio
async def test_video_streamed_to_temp_file_and_removed(fake_session, registry):
    transport = PathRecordingTransport()
    deliverer = ArtifactDeliverer(transport, session=fake_session)
    body = b"\x00\x01" * 5000
    fake_session.add("https://cdn/v.mp4", FakeResponse(200, body, content_type="video/mp4"))

    await deliverer.deliver("42", registry.get_model("veo3"), VideoResponse(nested_video_url="https://cdn/v.mp4"))

    assert transport.files == [("42", "video.mp4", body)]
    assert not transport.paths[0].exists()


@pytest.mark.asyncio
async def test_temp_file_removed_when_upload_fails(fake_session, registry):
    transport = PathRecordingTransport(fail_files=True)
    deliverer = ArtifactDeliverer(transport, session=fake_session)
    fake_session.add("https://cdn/v.mp4", FakeResponse(200, b"data", content_type="video/mp4"))

    with pytest.raises(DeliveryError):
        await deliverer.deliver("42", registry.get_model("veo3"), VideoResponse(plain_url="https://cdn/v.mp4"))
    assert not transport.paths[0].exists()


@pytest.mark.asyncio
async def test_speech_is_sent_inline(deliverer, fake_session, transport, registry):
    fake_session.add("https://cdn/s.mp3", FakeResponse(200, b"ID3", content_type="audio/mpeg"))
    model = registry.get_model("chatterbox-tts")

    await deliverer.deliver("42", model, AudioResponse(url="https://cdn/s.mp3"))

    _, embeds = parse_embeds(transport.texts()[0])
    assert embeds[0].alt == "chatterbox-tts speech"
    assert embeds[0].mime_type == "audio/mpeg"


@pytest.mark.asyncio
async def test_audio_with_video_container_is_a_file(deliverer, fake_session, transport, registry):
    fake_session.add("https://cdn/m.mp4", FakeResponse(200, b"mp4", content_type="video/mp4"))
    result = AudioResponse(url="https://cdn/m.mp4", content_type="video/mp4")

    await deliverer.deliver("42", registry.get_model("mmaudio-v2"), result)

    assert transport.files == [("42", "video.mp4", b"mp4")]


@pytest.mark.asyncio
async def test_transcript_is_text(deliverer, transport, registry):
    model = registry.get_model("elevenlabs/speech-to-text/scribe-v2")
    await deliverer.deliver("42", model, TranscriptionResponse(text="hello"))
    assert transport.texts() == ["📝 Transcript:\nhello"]


@pytest.mark.asyncio
async def test_download_failure_is_delivery_error(deliverer, fake_session, transport, registry):
    fake_session.add("https://cdn/gone.png", FakeResponse(404, b""))
    fake_session.add("https://cdn/reset.png", aiohttp.ClientConnectionError("reset"))

    for url in ("https://cdn/gone.png", "https://cdn/reset.png"):
        with pytest.raises(DeliveryError):
            await deliverer.deliver(
                "42", registry.get_model("fast-sdxl"), ImageResponse(images=[ImageOutput(url)])
            )
    assert transport.messages == []


@pytest.mark.asyncio
async def test_transport_failure_is_delivery_error(fake_session, registry):
    deliverer = ArtifactDeliverer(RecordingTransport(fail_messages=True), session=fake_session)
    fake_session.add("https://cdn/a.png", FakeResponse(200, b"PNG", content_type="image/png"))

    with pytest.raises(DeliveryError):
        await deliverer.deliver(
            "42", registry.get_model("fast-sdxl"), ImageResponse(images=[ImageOutput("https://cdn/a.png")])
        )


@pytest.mark.asyncio
async def test_unknown_result_type(deliverer, registry):
    with pytest.raises(DeliveryError):
        await deliverer.deliver("42", registry.get_model("fast-sdxl"), {"raw": True})
