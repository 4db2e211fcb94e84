"""Video models: text-to-video, image-to-video and video-to-video."""

from typing import List

from falbot.billing.units import Money

from ..options import (
    DEFAULT_NEGATIVE_PROMPT,
    KlingMotionControlOptions,
    KlingV25Options,
    KlingVideoOptions,
    LTXVideoOptions,
    LumaOptions,
    MinimaxVideoOptions,
    SyncLipsyncOptions,
    TopazUpscaleOptions,
    Veo2Options,
    Veo3Options,
    Veo31FastOptions,
)
from ..types import Capability
from .base import Model

KLING_IMAGE_ENDPOINT = "/kling-video/v2/master/image-to-video"

KLING_HELP = """Usage: {usage}
Example: {example}

Parameters:
• --duration: Video length in seconds (default: 5)
• --aspect_ratio: 16:9 or 9:16 (default: 16:9)
• --negative_prompt: Things to avoid (default: "{negative}")
• --cfg_scale: Prompt adherence between 0 and 1 (default: 0.5)"""


def _kling_defaults() -> KlingVideoOptions:
    return KlingVideoOptions(
        duration=5,
        aspect_ratio="16:9",
        negative_prompt=DEFAULT_NEGATIVE_PROMPT,
        cfg_scale=0.5,
    )


def text_to_video_models() -> List[Model]:
    return [
        Model(
            name="kling-video-text",
            capability=Capability.TEXT2VIDEO,
            description="Generate videos from text descriptions (Kling 2.0 Master)",
            help_text=KLING_HELP.format(
                usage="!text2video [prompt] [--option value]...",
                example="!text2video a dog running in a field --duration 10",
                negative=DEFAULT_NEGATIVE_PROMPT,
            ),
            price_usd=Money("2.00"),
            default_options=_kling_defaults(),
            endpoint="/kling-video/v2/master/text-to-video",
            required_inputs=("prompt",),
            image_endpoint=KLING_IMAGE_ENDPOINT,
        ),
        Model(
            name="minimax/video-01",
            capability=Capability.TEXT2VIDEO,
            description="Generate 6 second videos from text prompts (MiniMax Hailuo)",
            help_text=(
                "Usage: !text2video [prompt] [--option value]...\n"
                "Example: !text2video a paper boat sailing down a rainy street\n\n"
                "Parameters:\n"
                "• --prompt_optimizer: Let the model rewrite the prompt (default: true)"
            ),
            price_usd=Money("0.50"),
            default_options=MinimaxVideoOptions(prompt_optimizer=True),
            endpoint="/minimax/video-01",
            required_inputs=("prompt",),
        ),
        Model(
            name="minimax/video-01-director",
            capability=Capability.TEXT2VIDEO,
            description="Text-to-video with camera movement instructions (MiniMax Director)",
            help_text=(
                "Usage: !text2video [prompt] [--option value]...\n"
                "Example: !text2video [Pan left] a lighthouse at dusk [Zoom in]\n\n"
                "Camera moves are written in brackets inside the prompt, for example "
                "[Truck left], [Pan right], [Push in], [Pull out], [Tilt up], "
                "[Zoom in], [Tracking shot], [Static shot].\n\n"
                "Parameters:\n"
                "• --prompt_optimizer: Let the model rewrite the prompt (default: true)"
            ),
            price_usd=Money("0.50"),
            default_options=MinimaxVideoOptions(prompt_optimizer=True),
            endpoint="/minimax/video-01-director",
            required_inputs=("prompt",),
        ),
    ]


def image_to_video_models() -> List[Model]:
    veo3_help = """Usage: !image2video [image_url] [prompt] [--option value]...
Example: !image2video https://example.com/cat.png the cat starts dancing --duration 6

Parameters:
• --aspect_ratio: {aspects} (default: {aspect})
• --duration: 4, 6 or 8 seconds (default: 8)
• --resolution: 720p or 1080p (default: 720p)
• --generate_audio: Add generated sound (default: true)
• --auto_fix: Rewrite prompts that fail content checks (default: false)
• --negative_prompt: Things to avoid (optional)
• --seed: Specific seed (optional)

Pricing: {price} per second of video"""

    return [
        Model(
            name="veo2",
            capability=Capability.IMAGE2VIDEO,
            description="Google's Veo 2 image-to-video model",
            help_text=(
                "Usage: !image2video [image_url] [prompt] [--option value]...\n"
                "Example: !image2video https://example.com/cat.png the cat looks around --duration 8\n"
                "You can also attach the image to the command message.\n\n"
                "Parameters:\n"
                "• --aspect_ratio: auto, auto_prefer_portrait, 16:9, 9:16 (default: 16:9)\n"
                "• --duration: 5, 6, 7 or 8 seconds (default: 5)"
            ),
            price_usd=Money("3.50"),
            default_options=Veo2Options(aspect_ratio="16:9", duration=5),
            endpoint="/veo2/image-to-video",
            required_inputs=("image_url", "prompt"),
        ),
        Model(
            name="kling-video-image",
            capability=Capability.IMAGE2VIDEO,
            description="Animate an image with a text prompt (Kling 2.0 Master)",
            help_text=KLING_HELP.format(
                usage="!image2video [image_url] [prompt] [--option value]...",
                example="!image2video https://example.com/cat.png the cat jumps --duration 10",
                negative=DEFAULT_NEGATIVE_PROMPT,
            ),
            price_usd=Money("2.00"),
            default_options=_kling_defaults(),
            endpoint=KLING_IMAGE_ENDPOINT,
            required_inputs=("image_url", "prompt"),
            image_endpoint=KLING_IMAGE_ENDPOINT,
        ),
        Model(
            name="minimax/video-01-subject-reference",
            capability=Capability.IMAGE2VIDEO,
            description="Video that keeps the look of a reference subject (MiniMax)",
            help_text=(
                "Usage: !image2video [subject_image_url] [prompt] [--option value]...\n"
                "Example: !image2video https://example.com/face.png this person walking on a beach\n\n"
                "The image is used as the subject reference, not as the first frame.\n\n"
                "Parameters:\n"
                "• --prompt_optimizer: Let the model rewrite the prompt (default: true)"
            ),
            price_usd=Money("0.80"),
            default_options=MinimaxVideoOptions(prompt_optimizer=True),
            endpoint="/minimax/video-01-subject-reference",
            required_inputs=("subject_reference_image_url", "prompt"),
        ),
        Model(
            name="minimax/video-01-live",
            capability=Capability.IMAGE2VIDEO,
            description="Animate illustrations and stills with smooth motion (MiniMax Live)",
            help_text=(
                "Usage: !image2video [image_url] [prompt] [--option value]...\n"
                "Example: !image2video https://example.com/drawing.png the character waves\n\n"
                "Parameters:\n"
                "• --prompt_optimizer: Let the model rewrite the prompt (default: true)"
            ),
            price_usd=Money("0.80"),
            default_options=MinimaxVideoOptions(prompt_optimizer=True),
            endpoint="/minimax/video-01-live/image-to-video",
            required_inputs=("image_url", "prompt"),
        ),
        Model(
            name="veo3",
            capability=Capability.IMAGE2VIDEO,
            description="Google's Veo 3 image-to-video model with generated audio",
            help_text=veo3_help.format(aspects="auto, 16:9, 9:16", aspect="16:9", price="$0.45"),
            price_usd=Money("0.45"),
            per_second_pricing=True,
            default_options=Veo3Options(
                aspect_ratio="16:9",
                duration=8,
                resolution="720p",
                generate_audio=True,
                auto_fix=False,
            ),
            endpoint="/veo3/image-to-video",
            required_inputs=("image_url", "prompt"),
        ),
        Model(
            name="veo31fast",
            capability=Capability.IMAGE2VIDEO,
            description="Google's Veo 3.1 Fast image-to-video model",
            help_text=veo3_help.format(
                aspects="auto, 16:9, 9:16", aspect="auto", price="$0.10 ($0.15 with audio)"
            ),
            price_usd=Money("0.10"),
            audio_price_usd=Money("0.15"),
            per_second_pricing=True,
            default_options=Veo31FastOptions(
                aspect_ratio="auto",
                duration=8,
                resolution="720p",
                generate_audio=True,
                auto_fix=False,
            ),
            endpoint="/veo3.1/fast/image-to-video",
            required_inputs=("image_url", "prompt"),
        ),
        Model(
            name="kling-video-v25-image",
            capability=Capability.IMAGE2VIDEO,
            description="Kling 2.5 Turbo Pro image-to-video",
            help_text=(
                "Usage: !image2video [image_url] [prompt] [--option value]...\n"
                "Example: !image2video https://example.com/car.png the car drives away --duration 10\n\n"
                "Parameters:\n"
                "• --duration: 5 or 10 seconds (default: 5)\n"
                "• --aspect_ratio: 16:9, 9:16 or 1:1 (default: 16:9)\n"
                f"• --negative_prompt: Things to avoid (default: \"{DEFAULT_NEGATIVE_PROMPT}\")\n"
                "• --cfg_scale: Prompt adherence between 0 and 1 (default: 0.5)\n\n"
                "Pricing: $0.32 per second of video"
            ),
            price_usd=Money("0.32"),
            per_second_pricing=True,
            default_options=KlingV25Options(
                duration=5,
                aspect_ratio="16:9",
                negative_prompt=DEFAULT_NEGATIVE_PROMPT,
                cfg_scale=0.5,
            ),
            endpoint="/kling-video/v2.5-turbo/pro/image-to-video",
            required_inputs=("image_url", "prompt"),
        ),
        Model(
            name="luma-dream-machine",
            capability=Capability.IMAGE2VIDEO,
            description="Luma Dream Machine image-to-video",
            help_text=(
                "Usage: !image2video [image_url] [prompt] [--option value]...\n"
                "Example: !image2video https://example.com/sea.png waves crash --loop true\n\n"
                "Parameters:\n"
                "• --aspect_ratio: 16:9, 9:16, 4:3, 3:4, 21:9, 9:21, 1:1 (default: 16:9)\n"
                "• --loop: Make the video loop seamlessly (default: false)"
            ),
            price_usd=Money("0.40"),
            default_options=LumaOptions(aspect_ratio="16:9", loop=False),
            endpoint="/luma-dream-machine/image-to-video",
            required_inputs=("image_url", "prompt"),
        ),
        Model(
            name="ltx-video-13b",
            capability=Capability.IMAGE2VIDEO,
            description="LTX Video 13B distilled image-to-video",
            help_text=(
                "Usage: !image2video [image_url] [prompt] [--option value]...\n"
                "Example: !image2video https://example.com/tree.png leaves blowing in the wind\n\n"
                "Parameters:\n"
                "• --negative_prompt: Things to avoid (optional)\n"
                "• --num_frames: Number of frames (default: 97)\n"
                "• --frame_rate: Frames per second (default: 25)\n"
                "• --num_inference_steps: Number of steps (default: 30)\n"
                "• --guidance_scale: Prompt adherence (default: 3.0)\n"
                "• --seed: Specific seed (optional)\n"
                "• --enable_safety_checker: Enable safety filter (default: true)"
            ),
            price_usd=Money("0.30"),
            default_options=LTXVideoOptions(
                num_frames=97,
                frame_rate=25,
                num_inference_steps=30,
                guidance_scale=3.0,
                enable_safety_checker=True,
            ),
            endpoint="/ltx-video-13b-distilled/image-to-video",
            required_inputs=("image_url", "prompt"),
        ),
    ]


def video_to_video_models() -> List[Model]:
    return [
        Model(
            name="topaz-upscale-video",
            capability=Capability.VIDEO2VIDEO,
            description="Upscale a video with Topaz Video AI",
            help_text=(
                "Usage: !video2video [video_url] [--option value]...\n"
                "Example: !video2video https://example.com/clip.mp4\n\n"
                "Parameters:\n"
                "• --model: Topaz model name (default: auto)\n"
                "• --output_type: mp4 or mov (default: mp4)"
            ),
            price_usd=Money("0.50"),
            default_options=TopazUpscaleOptions(model="auto", output_type="mp4"),
            endpoint="/topaz/upscale/video",
            required_inputs=("video_url",),
        ),
        Model(
            name="sync-lipsync-v2",
            capability=Capability.VIDEO2VIDEO,
            description="Lip-sync a video to a new audio track",
            help_text=(
                "Usage: !video2video [video_url] [audio_url] [--option value]...\n"
                "Example: !video2video https://example.com/talk.mp4 https://example.com/voice.mp3\n\n"
                "Parameters:\n"
                "• --model: wav2lip or wav2lip_gan (default: wav2lip)\n"
                "• --output_type: mp4 or webm (default: mp4)\n\n"
                "Pricing: $0.10 per second of video"
            ),
            price_usd=Money("0.10"),
            per_second_pricing=True,
            default_options=SyncLipsyncOptions(model="wav2lip", output_type="mp4"),
            endpoint="/sync-lipsync/v2",
            required_inputs=("video_url", "audio_url"),
        ),
        Model(
            name="kling-video-v26-motion-control",
            capability=Capability.VIDEO2VIDEO,
            description="Transfer the motion of a reference video onto a character image (Kling 2.6)",
            help_text=(
                "Usage: !video2video [video_url] [image_url] [--option value]...\n"
                "Example: !video2video https://example.com/dance.mp4 https://example.com/me.png\n\n"
                "Parameters:\n"
                "• --orientation: Follow the character orientation of the image or the video (default: video)\n"
                "• --keep_original_sound: Keep the reference video's audio (default: true)\n\n"
                "Pricing: $0.10 per second of video, billed as 15 seconds"
            ),
            price_usd=Money("0.10"),
            per_second_pricing=True,
            default_options=KlingMotionControlOptions(orientation="video", keep_original_sound=True),
            endpoint="/kling-video/v2.6/standard/motion-control",
            required_inputs=("image_url", "video_url"),
            fallback_seconds=15,
        ),
    ]
