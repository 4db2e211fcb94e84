"""Text-to-image and image-to-image models."""

from typing import List

from falbot.billing.units import Money

from ..options import (
    FastSDXLOptions,
    FluxDevOptions,
    FluxProOptions,
    FluxProUltraOptions,
    FluxSchnellOptions,
    HiDreamOptions,
    ImageTransformOptions,
    StableDiffusion35Options,
)
from ..types import Capability
from .base import Model

SIZES_HELP = "square_hd, square, portrait_4_3, portrait_16_9, landscape_4_3, landscape_16_9"

HIDREAM_HELP = """Usage: !text2image [prompt] [--option value]...
Example: !text2image a futuristic city --negative_prompt blur

Parameters:
• prompt: Text description (required)
• --negative_prompt: Things to avoid (optional)
• --image_size: Output dimensions (default: square_hd). Options: {sizes}
• --num_inference_steps: Number of steps (default: {steps})
• --seed: Specific seed (optional){guidance}
• --num_images: Number of images (default: 1)
• --enable_safety_checker: Enable safety filter (default: true)
• --output_format: jpeg, png (default: jpeg)"""


def text_to_image_models() -> List[Model]:
    return [
        Model(
            name="fast-sdxl",
            capability=Capability.TEXT2IMAGE,
            description="Fast model for generating images quickly",
            help_text=(
                "Usage: !text2image [prompt] [--option value]...\n"
                "Example: !text2image a beautiful sunset over mountains\n\n"
                "Parameters:\n"
                "• prompt: Text description of the image you want to generate\n"
                f"• --image_size: Output dimensions. Options: {SIZES_HELP}\n"
                "• --num_images: Number of images (default: 1)\n"
                "• --negative_prompt: Things to avoid (optional)"
            ),
            price_usd=Money("0.02"),
            default_options=FastSDXLOptions(),
            endpoint="/fast-sdxl",
            required_inputs=("prompt",),
        ),
        Model(
            name="hidream-i1-full",
            capability=Capability.TEXT2IMAGE,
            description="High-quality model for detailed images (HiDream I1 Full 17B)",
            help_text=HIDREAM_HELP.format(
                sizes=SIZES_HELP,
                steps=50,
                guidance="\n• --guidance_scale: Prompt adherence (default: 5.0)",
            ),
            price_usd=Money("0.10"),
            default_options=HiDreamOptions(
                image_size="square_hd",
                num_inference_steps=50,
                guidance_scale=5.0,
                num_images=1,
                enable_safety_checker=True,
                output_format="jpeg",
            ),
            endpoint="/hidream-i1-full",
            required_inputs=("prompt",),
        ),
        Model(
            name="hidream-i1-dev",
            capability=Capability.TEXT2IMAGE,
            description="Development version of the HiDream model",
            help_text=HIDREAM_HELP.format(sizes=SIZES_HELP, steps=28, guidance=""),
            price_usd=Money("0.06"),
            default_options=HiDreamOptions(
                image_size="square_hd",
                num_inference_steps=28,
                num_images=1,
                enable_safety_checker=True,
                output_format="jpeg",
            ),
            endpoint="/hidream-i1-dev",
            required_inputs=("prompt",),
        ),
        Model(
            name="hidream-i1-fast",
            capability=Capability.TEXT2IMAGE,
            description="Faster version of the HiDream model",
            help_text=HIDREAM_HELP.format(sizes=SIZES_HELP, steps=16, guidance=""),
            price_usd=Money("0.03"),
            default_options=HiDreamOptions(
                image_size="square_hd",
                num_inference_steps=16,
                num_images=1,
                enable_safety_checker=True,
                output_format="jpeg",
            ),
            endpoint="/hidream-i1-fast",
            required_inputs=("prompt",),
        ),
        Model(
            name="flux-pro/v1.1",
            capability=Capability.TEXT2IMAGE,
            description="Professional model for high-end image generation (FLUX1.1 pro)",
            help_text=(
                "Usage: !text2image [prompt] [--option value]...\n"
                "Example: !text2image a hyperrealistic cat --num_images 2 --image_size square\n\n"
                "Parameters:\n"
                "• prompt: Text description of the image (required)\n"
                f"• --image_size: Output dimensions (default: landscape_4_3). Options: {SIZES_HELP}\n"
                "• --seed: Specific seed for reproducibility (optional)\n"
                "• --num_images: Number of images to generate (default: 1)\n"
                "• --enable_safety_checker: Enable safety filter (default: true)\n"
                "• --safety_tolerance: Safety strictness (1-6, default: 2)\n"
                "• --output_format: Image format (jpeg, png. default: jpeg)"
            ),
            price_usd=Money("0.08"),
            default_options=FluxProOptions(
                image_size="landscape_4_3",
                num_images=1,
                enable_safety_checker=True,
                safety_tolerance="2",
                output_format="jpeg",
            ),
            endpoint="/flux-pro/v1.1",
            required_inputs=("prompt",),
        ),
        Model(
            name="flux-pro/v1.1-ultra",
            capability=Capability.TEXT2IMAGE,
            description="Ultra version of the professional model (FLUX pro ultra)",
            help_text=(
                "Usage: !text2image [prompt] [--option value]...\n"
                "Example: !text2image cinematic photo --aspect_ratio 9:16 --raw true\n\n"
                "Parameters:\n"
                "• prompt: Text description (required)\n"
                "• --seed: Specific seed (optional)\n"
                "• --num_images: Number of images (default: 1)\n"
                "• --enable_safety_checker: Enable safety filter (default: true)\n"
                "• --safety_tolerance: Safety strictness (1-6, default: 2)\n"
                "• --output_format: jpeg, png (default: jpeg)\n"
                "• --aspect_ratio: Output aspect ratio (default: 16:9). "
                "Options: 21:9, 16:9, 4:3, 3:2, 1:1, 2:3, 3:4, 9:16, 9:21\n"
                "• --raw: Generate less processed image (default: false)"
            ),
            price_usd=Money("0.12"),
            default_options=FluxProUltraOptions(
                num_images=1,
                enable_safety_checker=True,
                safety_tolerance="2",
                output_format="jpeg",
                aspect_ratio="16:9",
                raw=False,
            ),
            endpoint="/flux-pro/v1.1-ultra",
            required_inputs=("prompt",),
        ),
        Model(
            name="flux/schnell",
            capability=Capability.TEXT2IMAGE,
            description="Quick model for rapid image generation (FLUX.1 schnell)",
            help_text=(
                "Usage: !text2image [prompt] [--option value]...\n"
                "Example: !text2image a hyperrealistic cat --num_images 2 --image_size square\n\n"
                "Parameters:\n"
                "• prompt: Text description of the image (required)\n"
                f"• --image_size: Output dimensions (default: landscape_4_3). Options: {SIZES_HELP}\n"
                "• --num_inference_steps: Number of steps (default: 4)\n"
                "• --seed: Specific seed for reproducibility (optional)\n"
                "• --num_images: Number of images to generate (default: 1)\n"
                "• --enable_safety_checker: Enable safety filter (default: true)"
            ),
            price_usd=Money("0.02"),
            default_options=FluxSchnellOptions(
                image_size="landscape_4_3",
                num_inference_steps=4,
                num_images=1,
                enable_safety_checker=True,
            ),
            endpoint="/flux/schnell",
            required_inputs=("prompt",),
        ),
        Model(
            name="flux/dev",
            capability=Capability.TEXT2IMAGE,
            description="FLUX.1 [dev] - 12B parameter flow transformer for high-quality image generation",
            help_text=(
                "Usage: !text2image [prompt] [--option value]...\n"
                "Example: !text2image a futuristic city --num_images 2 --image_size square\n\n"
                "Parameters:\n"
                "• prompt: Text description of the image (required)\n"
                f"• --image_size: Output dimensions (default: landscape_4_3). Options: {SIZES_HELP}\n"
                "• --num_inference_steps: Number of steps (default: 28)\n"
                "• --seed: Specific seed for reproducibility (optional)\n"
                "• --guidance_scale: Prompt adherence (default: 3.5)\n"
                "• --num_images: Number of images to generate (default: 1)\n"
                "• --enable_safety_checker: Enable safety filter (default: true)\n"
                "• --output_format: jpeg, png (default: jpeg)"
            ),
            price_usd=Money("0.025"),
            default_options=FluxDevOptions(
                image_size="landscape_4_3",
                num_inference_steps=28,
                guidance_scale=3.5,
                num_images=1,
                enable_safety_checker=True,
                output_format="jpeg",
            ),
            endpoint="/flux/dev",
            required_inputs=("prompt",),
        ),
        Model(
            name="stable-diffusion-v35-large",
            capability=Capability.TEXT2IMAGE,
            description="Stable Diffusion 3.5 Large - Image quality, typography, complex prompt understanding",
            help_text=(
                "Usage: !text2image [prompt] [--option value]...\n"
                "Example: !text2image a hyperrealistic portrait --negative_prompt blur --guidance_scale 5\n\n"
                "Parameters:\n"
                "• prompt: Text description of the image (required)\n"
                "• --negative_prompt: Things to avoid (optional)\n"
                f"• --image_size: Output dimensions (default: square_hd). Options: {SIZES_HELP}\n"
                "• --num_inference_steps: Number of steps (default: 40)\n"
                "• --seed: Specific seed for reproducibility (optional)\n"
                "• --guidance_scale: Prompt adherence (default: 4.5)\n"
                "• --num_images: Number of images to generate (default: 1)\n"
                "• --enable_safety_checker: Enable safety filter (default: true)\n"
                "• --prompt_expansion: Use prompt expansion (default: true)\n"
                "• --output_format: jpeg, png (default: jpeg)"
            ),
            price_usd=Money("0.065"),
            default_options=StableDiffusion35Options(
                image_size="square_hd",
                num_inference_steps=40,
                guidance_scale=4.5,
                num_images=1,
                enable_safety_checker=True,
                prompt_expansion=True,
                output_format="jpeg",
            ),
            endpoint="/stable-diffusion-v35-large",
            required_inputs=("prompt",),
        ),
    ]


def image_to_image_models() -> List[Model]:
    transform_help = (
        "Usage: !image2image [image_url]\n"
        "Example: !image2image https://example.com/image.jpg\n"
        "You can also attach the image to the command message.\n\n"
        "Parameters:\n"
        "• image_url: URL of the image to transform"
    )
    return [
        Model(
            name="ghiblify",
            capability=Capability.IMAGE2IMAGE,
            description="Transforms images into Studio Ghibli style artwork",
            help_text=transform_help,
            price_usd=Money("0.02"),
            default_options=ImageTransformOptions(),
            endpoint="/ghiblify",
            required_inputs=("image_url",),
        ),
        Model(
            name="cartoonify",
            capability=Capability.IMAGE2IMAGE,
            description="Transforms images into Pixar like 3d cartoon-style artwork",
            help_text=transform_help,
            price_usd=Money("0.02"),
            default_options=ImageTransformOptions(),
            endpoint="/cartoonify",
            required_inputs=("image_url",),
        ),
        Model(
            name="star-vector",
            capability=Capability.IMAGE2IMAGE,
            description="Convert images to SVG using AI vectorization",
            help_text=(
                transform_help
                + "\n\nTo use this model, first set it as your default:\n"
                "!setmodel image2image star-vector\n\n"
                "Pricing:\n• Base price: $1.00 per image"
            ),
            price_usd=Money("1.00"),
            default_options=ImageTransformOptions(),
            endpoint="/star-vector",
            required_inputs=("image_url",),
        ),
    ]
