"""
Discord DM transport [CA][REH]

Delivers text and files to a user's direct messages. Inline embed segments
are lifted out of the text and uploaded as attachments, since Discord has
no in-band media syntax.
"""

import io
from pathlib import Path
from typing import List, Optional

import discord
from discord.ext import commands

from falbot.exceptions import DeliveryError
from falbot.utils.logging import get_logger

from .base import ChatTransport
from .embeds import parse_embeds

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 2000
MAX_FILES_PER_MESSAGE = 10


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """Split text into Discord-sized chunks, preferring line boundaries."""
    if not text:
        return []
    chunks: List[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


class DiscordTransport(ChatTransport):
    """ChatTransport that DMs the user through a discord.py bot."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def _get_user(self, user_id: str) -> discord.abc.User:
        user = self.bot.get_user(int(user_id))
        if user is None:
            user = await self.bot.fetch_user(int(user_id))
        return user

    async def send_message(self, user_id: str, text: str) -> None:
        plain, embeds = parse_embeds(text)
        chunks = split_message(plain)
        files = [
            discord.File(io.BytesIO(embed.data), filename=embed.filename)
            for embed in embeds
        ]

        try:
            user = await self._get_user(user_id)
            # Text goes first; attachments ride along with the last chunk
            for chunk in chunks[:-1]:
                await user.send(chunk)
            last = chunks[-1] if chunks else None
            if not files:
                if last:
                    await user.send(last)
                return
            for start in range(0, len(files), MAX_FILES_PER_MESSAGE):
                batch = files[start:start + MAX_FILES_PER_MESSAGE]
                await user.send(content=last, files=batch)
                last = None
        except (discord.HTTPException, ValueError) as e:
            logger.error(
                f"Failed to DM user {user_id}: {e}",
                extra={"subsys": "transport", "event": "transport.send_message.error", "user_id": user_id},
            )
            raise DeliveryError(f"Could not send message to user {user_id}: {e}") from e

    async def send_file(
        self, user_id: str, path: Path, filename: Optional[str] = None
    ) -> None:
        path = Path(path)
        try:
            user = await self._get_user(user_id)
            await user.send(file=discord.File(str(path), filename=filename or path.name))
        except (discord.HTTPException, OSError, ValueError) as e:
            logger.error(
                f"Failed to upload {path.name} to user {user_id}: {e}",
                extra={"subsys": "transport", "event": "transport.send_file.error", "user_id": user_id},
            )
            raise DeliveryError(f"Could not send file to user {user_id}: {e}") from e


async def reply_chunks(ctx: commands.Context, text: str) -> None:
    """Reply in the invoking channel, split to Discord's message limit."""
    for chunk in split_message(text):
        await ctx.reply(chunk, mention_author=False)
