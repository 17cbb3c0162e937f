"""Automatic reactions to messages in specific channels."""

import discord

from core.logging import get_module_logger
from event_distribution import CommandHandler, DiscordEvent, EventLocation, command

logger = get_module_logger()

POLL_OPTIONS = ["🇦", "🅱️"]
VOTE_OPTIONS = ["👍", "👎"]


async def react_all(message: discord.Message, emojis) -> None:
    for emoji in emojis:
        await message.react(emoji)


@command(
    event=DiscordEvent.MESSAGE,
    channel_names=["polls"],
    location=EventLocation.SERVER,
    description="Adds answer options to every poll",
)
class PollReactions(CommandHandler):
    async def handle(self, message: discord.Message) -> None:
        await react_all(message, POLL_OPTIONS)


@command(
    event=DiscordEvent.MESSAGE,
    channel_names=["feature-requests"],
    location=EventLocation.SERVER,
    description="Adds voting options to every feature request",
)
class FeatureRequestVotes(CommandHandler):
    async def handle(self, message: discord.Message) -> None:
        await react_all(message, VOTE_OPTIONS)


@command(
    event=DiscordEvent.MESSAGE,
    location=EventLocation.SERVER,
    content_regex=r"^F(\s|$)",
    description="Pays respects",
)
class PayRespects(CommandHandler):
    async def handle(self, message: discord.Message) -> None:
        logger.debug("respects_paid", channel=getattr(message.channel, "name", None))
        await message.react("🇫")
