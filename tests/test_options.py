"""
Tests for typed model options: flag coercion, validation and wire bodies.
"""
import pytest

from falbot.fal.options import (
    ChatterboxOptions,
    FastSDXLOptions,
    KlingMotionControlOptions,
    KlingV25Options,
    KlingVideoOptions,
    MinimaxTTSOptions,
    ScribeV2Options,
    StableAudioOptions,
    Veo3Options,
    VoiceChangerOptions,
)
from falbot.fal.types import FalError, FalErrorType


def test_from_flags_coerces_by_annotation():
    options = FastSDXLOptions.from_flags(
        {"num_images": "2", "guidance_scale": "7.5", "enable_safety_checker": "no", "image_size": "square"}
    )
    assert options.num_images == 2
    assert options.guidance_scale == 7.5
    assert options.enable_safety_checker is False
    assert options.image_size == "square"


def test_from_flags_ignores_unknown_and_applies_aliases():
    options = MinimaxTTSOptions.from_flags({"voice": "Calm_Woman", "volume": "3", "colour": "red"})
    assert options.voice_id == "Calm_Woman"
    assert options.vol == 3.0


def test_from_flags_accepts_seconds_suffix_for_duration():
    assert Veo3Options.from_flags({"duration": "6s"}).duration == 6


def test_from_flags_rejects_bad_number():
    with pytest.raises(FalError) as exc:
        FastSDXLOptions.from_flags({"num_images": "many"})
    assert exc.value.error_type == FalErrorType.INVALID_OPTIONS
    assert "num_images" in exc.value.user_message


@pytest.mark.parametrize(
    "options",
    [
        FastSDXLOptions(image_size="huge"),
        FastSDXLOptions(num_images=-1),
        KlingVideoOptions(duration=3),
        KlingVideoOptions(cfg_scale=1.5),
        KlingV25Options(duration=7),
        Veo3Options(duration=5),
        MinimaxTTSOptions(speed=3.0),
        MinimaxTTSOptions(voice_id="Nobody"),
        ChatterboxOptions(exaggeration=2.0),
        StableAudioOptions(duration=500),
        ScribeV2Options(task="summarise"),
        KlingMotionControlOptions(orientation="sideways"),
    ],
)
def test_validate_rejects_out_of_range(options):
    with pytest.raises(FalError) as exc:
        options.validate()
    assert exc.value.error_type == FalErrorType.INVALID_OPTIONS


def test_validate_accepts_absent_fields():
    FastSDXLOptions().validate()
    Veo3Options().validate()
    MinimaxTTSOptions().validate()


def test_with_defaults_keeps_explicit_values():
    defaults = FastSDXLOptions(image_size="landscape_4_3", num_images=1, guidance_scale=7.5)
    merged = FastSDXLOptions(num_images=3).with_defaults(defaults)
    assert merged.num_images == 3
    assert merged.image_size == "landscape_4_3"
    assert merged.guidance_scale == 7.5
    assert merged.seed is None


def test_with_defaults_rejects_other_family():
    with pytest.raises(FalError):
        FastSDXLOptions().with_defaults(Veo3Options())


def test_to_wire_omits_absent_fields():
    assert FastSDXLOptions(num_images=1).to_wire() == {"num_images": 1}


def test_duration_wire_formats():
    assert Veo3Options(duration=8).to_wire()["duration"] == "8s"
    assert KlingVideoOptions(duration=5, negative_prompt="").to_wire() == {"duration": "5"}


def test_minimax_tts_nests_settings():
    body = MinimaxTTSOptions(voice_id="Wise_Woman", speed=1.0, format="mp3", channel=1).to_wire()
    assert body == {
        "voice_setting": {"voice_id": "Wise_Woman", "speed": 1.0},
        "audio_setting": {"format": "mp3", "channel": 1},
    }


def test_wire_names_are_renamed():
    assert StableAudioOptions(duration=30).to_wire() == {"seconds_total": 30}
    assert KlingMotionControlOptions(orientation="image").to_wire() == {"character_orientation": "image"}


def test_billable_seconds():
    assert Veo3Options(duration=8).billable_seconds() == 8.0
    assert Veo3Options().billable_seconds() is None
    assert VoiceChangerOptions(voice="Rachel").billable_seconds() is None
