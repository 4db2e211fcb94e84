"""
Tests for the final-response decoders.
"""
import json

import pytest

from falbot.fal.dispatchers.decoders import (
    decode_audio_response,
    decode_image_response,
    decode_transcription_response,
    decode_video_response,
)
from falbot.fal.types import FalError, FalErrorType


def _body(data):
    return json.dumps(data).encode()


def test_image_list():
    response = decode_image_response(_body({
        "images": [{"url": "https://cdn/a.png", "content_type": "image/png", "width": 512, "height": 512}],
        "seed": 7,
        "has_nsfw_concepts": [False],
    }))
    assert [i.url for i in response.outputs] == ["https://cdn/a.png"]
    assert response.seed == 7
    assert response.has_nsfw_concepts == [False]


def test_single_image_and_svg_preference():
    response = decode_image_response(_body({"image": {"url": "https://cdn/a.png"}}))
    assert response.outputs[0].url == "https://cdn/a.png"

    vector = decode_image_response(_body({
        "images": [{"url": "https://cdn/preview.png"}],
        "svg": {"url": "https://cdn/out.svg"},
    }))
    assert [o.url for o in vector.outputs] == ["https://cdn/out.svg"]
    assert vector.outputs[0].content_type == "image/svg+xml"


def test_image_without_output():
    with pytest.raises(FalError) as exc:
        decode_image_response(_body({"images": []}))
    assert exc.value.error_type == FalErrorType.NO_OUTPUT


def test_video_url_variants():
    assert decode_video_response(_body({"video": {"url": "https://cdn/v.mp4"}})).url() == "https://cdn/v.mp4"
    assert decode_video_response(_body({"url": "https://cdn/u.mp4"})).url() == "https://cdn/u.mp4"
    assert decode_video_response(_body({"video_url": "https://cdn/w.mp4"})).url() == "https://cdn/w.mp4"
    nested_wins = decode_video_response(_body({"video": {"url": "https://cdn/n.mp4"}, "url": "https://cdn/p.mp4"}))
    assert nested_wins.url() == "https://cdn/n.mp4"


def test_video_without_output():
    with pytest.raises(FalError) as exc:
        decode_video_response(_body({"video": {}}))
    assert exc.value.error_type == FalErrorType.NO_OUTPUT


def test_audio_with_duration_ms():
    response = decode_audio_response(_body({
        "audio": {"url": "https://cdn/s.mp3", "file_name": "s.mp3", "file_size": 1234},
        "duration_ms": 2500,
    }))
    assert response.url == "https://cdn/s.mp3"
    assert response.content_type == "audio/mpeg"
    assert response.duration == 2.5


def test_audio_from_video_result():
    response = decode_audio_response(_body({"video": {"url": "https://cdn/with-sound.mp4"}}))
    assert response.content_type == "video/mp4"


def test_audio_without_output():
    with pytest.raises(FalError):
        decode_audio_response(_body({"audio": {"url": ""}}))


def test_invalid_json_is_decode_error():
    with pytest.raises(FalError) as exc:
        decode_audio_response(b"<html>")
    assert exc.value.error_type == FalErrorType.DECODE_ERROR


def test_transcription_with_speakers():
    response = decode_transcription_response(_body({
        "text": "hi there",
        "language_code": "en",
        "language_probability": 0.98,
        "words": [
            {"text": "hi", "start": 0.0, "end": 0.2, "type": "word", "speaker_id": "speaker_0"},
            {"text": "there", "start": 0.3, "end": 0.5, "type": "word", "speaker_id": "speaker_1"},
        ],
    }))
    assert response.text == "hi there"
    assert response.speakers == ["speaker_0", "speaker_1"]
