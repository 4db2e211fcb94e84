"""
Generation commands: one per capability.

Each command parses its text and flags, resolves the caller's model so the
flags can be typed against that model's options, and hands a typed request
to the orchestrator. Results, progress and billing notices go to the
caller's DMs; the command itself only acknowledges in guild channels.
"""

from typing import List, Optional, Tuple

from discord.ext import commands

from falbot.adapters.discord_transport import reply_chunks
from falbot.fal.models import Model
from falbot.fal.requests import (
    AudioRequest,
    ImageRequest,
    JobRequest,
    SpeechRequest,
    TranscriptionRequest,
    VideoRequest,
)
from falbot.fal.types import Capability, FalError
from falbot.logger import log_command
from falbot.utils.logging import get_logger

from .args import ParsedArgs, parse_args

logger = get_logger(__name__)


def attachment_urls(ctx: commands.Context) -> List[str]:
    message = getattr(ctx, "message", None)
    return [a.url for a in getattr(message, "attachments", None) or []]


class GenerationCommands(commands.Cog):
    """Image, video, speech, audio and transcription commands"""

    def __init__(self, bot):
        self.bot = bot

    def _resolve(self, ctx: commands.Context, capability: Capability, parsed: ParsedArgs) -> Model:
        """`--model name` for this job only, else the caller's current model."""
        registry = self.bot.registry
        current = registry.get_current_model(capability, str(ctx.author.id))
        name = parsed.flags.get("model")
        if not name:
            return current
        # Some models take their own `model` option (e.g. Topaz)
        if name not in registry and "model" in current.options_class.field_names():
            return current
        parsed.pop_flag("model")
        return registry.get_model(name, capability)

    def _fill(self, request: JobRequest, ctx: commands.Context, model: Model, parsed: ParsedArgs) -> JobRequest:
        options_class = model.options_class
        known = set(options_class.field_names()) | set(options_class.FLAG_ALIASES)
        request.model = model.name
        request.capability = model.capability
        request.user_id = str(ctx.author.id)
        request.options = options_class.from_flags(parsed.flags)
        request.extra_options = {k: v for k, v in parsed.flags.items() if k not in known}
        return request

    async def _usage(self, ctx: commands.Context, model: Model) -> None:
        await reply_chunks(ctx, f"**{model.name}**\n{model.help_text}")

    async def _submit(
        self, ctx: commands.Context, request: JobRequest, prompt: Optional[str] = None
    ) -> None:
        log_command(ctx, "job_submitted", {"model": request.model})
        if ctx.guild is not None:
            await ctx.reply("📬 Working on it, I'll send the result to your DMs.", mention_author=False)
        outcome = await self.bot.orchestrator.run(request, prompt=prompt)
        log_command(
            ctx,
            "job_finished" if outcome is not None else "job_not_completed",
            {"model": request.model},
            success=outcome is not None,
        )

    async def _prepare(
        self, ctx: commands.Context, capability: Capability, args: str
    ) -> Tuple[Optional[Model], ParsedArgs]:
        parsed = parse_args(args)
        try:
            model = self._resolve(ctx, capability, parsed)
        except FalError as e:
            await ctx.reply(f"Error: {e.user_message}", mention_author=False)
            return None, parsed
        return model, parsed

    async def _run(self, ctx, capability: Capability, args: str, build) -> None:
        """Shared command body; `build(model, parsed, urls)` returns (request, prompt) or None for usage."""
        model, parsed = await self._prepare(ctx, capability, args)
        if model is None:
            return
        urls = parsed.urls + attachment_urls(ctx)
        built = build(model, parsed, urls)
        if built is None:
            await self._usage(ctx, model)
            return
        request, prompt = built
        try:
            self._fill(request, ctx, model, parsed)
        except FalError as e:
            await ctx.reply(f"Error: {e.user_message}", mention_author=False)
            return
        await self._submit(ctx, request, prompt)

    @commands.command(name="text2image")
    async def text2image(self, ctx, *, args: str = ""):
        """Generate images from a text prompt."""

        def build(model, parsed, urls):
            prompt = " ".join(urls + parsed.words).strip()
            if not prompt:
                return None
            return ImageRequest(prompt=prompt), prompt

        await self._run(ctx, Capability.TEXT2IMAGE, args, build)

    @commands.command(name="image2image")
    async def image2image(self, ctx, *, args: str = ""):
        """Transform an image (URL or attachment)."""

        def build(model, parsed, urls):
            if not urls:
                return None
            prompt = parsed.text or None
            return ImageRequest(image_url=urls[0], prompt=prompt), prompt or model.name

        await self._run(ctx, Capability.IMAGE2IMAGE, args, build)

    @commands.command(name="text2video")
    async def text2video(self, ctx, *, args: str = ""):
        """Generate a video from a text prompt."""

        def build(model, parsed, urls):
            prompt = " ".join(urls + parsed.words).strip()
            if not prompt:
                return None
            return VideoRequest(prompt=prompt), prompt

        await self._run(ctx, Capability.TEXT2VIDEO, args, build)

    @commands.command(name="image2video")
    async def image2video(self, ctx, *, args: str = ""):
        """Animate an image (URL or attachment) with a prompt."""

        def build(model, parsed, urls):
            if not urls or not parsed.text:
                return None
            return VideoRequest(image_url=urls[0], prompt=parsed.text), parsed.text

        await self._run(ctx, Capability.IMAGE2VIDEO, args, build)

    @commands.command(name="video2video")
    async def video2video(self, ctx, *, args: str = ""):
        """Upscale, lip-sync or motion-transfer a video."""

        def build(model, parsed, urls):
            if not urls:
                return None
            request = VideoRequest(video_url=urls[0], prompt=parsed.text or None)
            if len(urls) > 1:
                # The second URL is whatever else this model needs
                if "audio_url" in model.required_inputs:
                    request.audio_url = urls[1]
                else:
                    request.image_url = urls[1]
            return request, None

        await self._run(ctx, Capability.VIDEO2VIDEO, args, build)

    @commands.command(name="text2speech", aliases=["tts"])
    async def text2speech(self, ctx, *, args: str = ""):
        """Speak the given text."""

        def build(model, parsed, urls):
            text = " ".join(urls + parsed.words).strip()
            if not text:
                return None
            return SpeechRequest(text=text), text

        await self._run(ctx, Capability.TEXT2SPEECH, args, build)

    @commands.command(name="audio2audio")
    async def audio2audio(self, ctx, *, args: str = ""):
        """Change the voice in a recording (URL or attachment)."""

        def build(model, parsed, urls):
            if not urls:
                return None
            return AudioRequest(audio_url=urls[0]), None

        await self._run(ctx, Capability.AUDIO2AUDIO, args, build)

    @commands.command(name="text2music")
    async def text2music(self, ctx, *, args: str = ""):
        """Generate music from a text prompt."""

        def build(model, parsed, urls):
            prompt = " ".join(urls + parsed.words).strip()
            if not prompt:
                return None
            return AudioRequest(prompt=prompt), prompt

        await self._run(ctx, Capability.TEXT2MUSIC, args, build)

    @commands.command(name="video2audio")
    async def video2audio(self, ctx, *, args: str = ""):
        """Generate a soundtrack for a video."""

        def build(model, parsed, urls):
            if not urls:
                return None
            return AudioRequest(video_url=urls[0], prompt=parsed.text or None), parsed.text or None

        await self._run(ctx, Capability.VIDEO2AUDIO, args, build)

    @commands.command(name="transcribe", aliases=["audio2text"])
    async def transcribe(self, ctx, *, args: str = ""):
        """Transcribe a recording (URL or attachment)."""

        def build(model, parsed, urls):
            if not urls:
                return None
            return TranscriptionRequest(audio_url=urls[0]), None

        await self._run(ctx, Capability.AUDIO2TEXT, args, build)


async def setup(bot):
    await bot.add_cog(GenerationCommands(bot))
