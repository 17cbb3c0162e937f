"""Reaction add and remove adapters."""

from typing import Any, List, Optional

import discord

from event_distribution.events.base import EventAdapter, channel_name, names_or_wildcard
from event_distribution.models import (
    DiscordEvent,
    HandlerInfo,
    ReactionHandlerOptions,
)


def emoji_key(emoji: Any) -> str:
    """Key a reaction emoji by its unicode character or custom emoji name."""
    if isinstance(emoji, str):
        return emoji
    return getattr(emoji, "name", None) or str(emoji)


class ReactionAdapter(EventAdapter):
    """Routes reactions by emoji, then by the message's channel name.

    Handlers receive ``(reaction, user)``.
    """

    event_types = (DiscordEvent.REACTION_ADD, DiscordEvent.REACTION_REMOVE)

    def key_paths(self, options: ReactionHandlerOptions) -> List[List[str]]:
        return [
            [options.emoji, name] for name in names_or_wildcard(options.channel_names)
        ]

    def extract_info(
        self, reaction: discord.Reaction, user: discord.abc.User
    ) -> List[HandlerInfo]:
        message = reaction.message
        guild: Optional[discord.Guild] = message.guild
        member = guild.get_member(user.id) if guild is not None else None

        return [
            HandlerInfo(
                handler_keys=[emoji_key(reaction.emoji), channel_name(message.channel)],
                is_direct_message=guild is None,
                member=member,
                content=message.content,
            )
        ]

    async def reject(
        self, text: str, reaction: discord.Reaction, user: discord.abc.User
    ) -> None:
        await user.send(text)
