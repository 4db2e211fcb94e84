"""
Model selection and help commands.
"""

from typing import List

from discord.ext import commands

from falbot.adapters.discord_transport import reply_chunks
from falbot.fal.types import Capability, FalError
from falbot.logger import log_command
from falbot.utils.logging import get_logger

from .args import COMMAND_CAPABILITIES

logger = get_logger(__name__)

GENERAL_HELP = """**Available commands**
• !text2image <prompt> - Generate images from text
• !image2image <image_url> - Transform an image
• !text2video <prompt> - Generate a video from text
• !image2video <image_url> <prompt> - Animate an image
• !video2video <video_url> [audio_url|image_url] - Upscale, lip-sync or motion-transfer a video
• !text2speech <text> - Convert text to speech
• !audio2audio <audio_url> - Change the voice in a recording
• !text2music <prompt> - Generate music
• !video2audio <video_url> [prompt] - Generate a soundtrack for a video
• !transcribe <audio_url> - Transcribe speech
• !listmodels <type> - List models for a type
• !setmodel <type> <model|default> - Choose your model for a type
• !balance - Show your balance
• !rate - Show DCR exchange rates
• !help <command> [model] - Detailed help

Options are passed as `--name value`. Images and audio can be attached instead of given as URLs."""


def _capability_for(name: str) -> Capability:
    """Accept both command names and capability names."""
    key = name.strip().lower()
    if key in COMMAND_CAPABILITIES:
        return COMMAND_CAPABILITIES[key]
    return Capability.parse(key)


class ModelCommands(commands.Cog):
    """listmodels, setmodel and help"""

    def __init__(self, bot):
        self.bot = bot

    def _format_models(self, capability: Capability, user_id: str) -> str:
        registry = self.bot.registry
        current = registry.get_current_model(capability, user_id)
        lines: List[str] = [f"**Available {capability.value} models:**"]
        for model in registry.get_models(capability):
            marker = " (current)" if model.name == current.name else ""
            lines.append(f"• {model.name}{marker}: {model.description} ({model.price_label})")
        lines.append(f"\nUse !setmodel {capability.value} <model> to choose one.")
        return "\n".join(lines)

    @commands.command(name="listmodels")
    async def listmodels(self, ctx, capability: str = ""):
        """List the models available for a type."""
        if not capability:
            types = ", ".join(c.value for c in Capability)
            await ctx.reply(f"Usage: !listmodels <type>\nTypes: {types}", mention_author=False)
            return
        try:
            cap = _capability_for(capability)
            text = self._format_models(cap, str(ctx.author.id))
        except FalError as e:
            await ctx.reply(f"Error: {e.user_message}", mention_author=False)
            return
        log_command(ctx, "listmodels", {"capability": cap.value})
        await reply_chunks(ctx, text)

    @commands.command(name="setmodel")
    async def setmodel(self, ctx, capability: str = "", name: str = ""):
        """Choose your model for a type; `default` restores the global default."""
        if not capability or not name:
            await ctx.reply("Usage: !setmodel <type> <model|default>", mention_author=False)
            return
        user_id = str(ctx.author.id)
        registry = self.bot.registry
        try:
            cap = _capability_for(capability)
            if name.lower() == "default":
                registry.clear_user_defaults(user_id, cap)
                model = registry.get_current_model(cap, user_id)
                message = f"Your {cap.value} model was reset to the default: {model.name}"
            else:
                model = registry.set_current_model(cap, name, user_id)
                message = f"Your {cap.value} model is now {model.name} ({model.price_label})"
        except FalError as e:
            log_command(ctx, "setmodel_rejected", {"capability": capability, "model": name}, success=False)
            await ctx.reply(f"Error: {e.user_message}", mention_author=False)
            return
        log_command(ctx, "setmodel", {"capability": cap.value, "model": model.name})
        await ctx.reply(message, mention_author=False)

    @commands.command(name="help")
    async def help(self, ctx, command: str = "", model: str = ""):
        """Show general help, help for a command, or help for one model."""
        if not command:
            await reply_chunks(ctx, GENERAL_HELP)
            return
        registry = self.bot.registry
        try:
            cap = _capability_for(command)
            if model:
                selected = registry.get_model(model, cap)
            else:
                selected = registry.get_current_model(cap, str(ctx.author.id))
        except FalError as e:
            await reply_chunks(ctx, f"Error: {e.user_message}\n\n{GENERAL_HELP}")
            return

        text = (
            f"**{selected.name}** ({selected.price_label})\n"
            f"{selected.description}\n\n{selected.help_text}"
        )
        if not model:
            others = [m.name for m in registry.get_models(cap) if m.name != selected.name]
            if others:
                text += f"\n\nOther models: {', '.join(others)}\nUse !help {command} <model> for details."
        await reply_chunks(ctx, text)


async def setup(bot):
    await bot.add_cog(ModelCommands(bot))
