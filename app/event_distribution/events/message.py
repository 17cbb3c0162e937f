"""Message event adapter."""

from typing import List

import discord

from event_distribution.events.base import EventAdapter, channel_name, names_or_wildcard
from event_distribution.models import (
    DiscordEvent,
    HandlerInfo,
    MessageHandlerOptions,
)


class MessageAdapter(EventAdapter):
    """Routes messages by channel name.

    A message sent in a thread yields an occurrence for the thread and one
    for its parent channel, so handlers registered for a channel also see
    messages in that channel's threads.
    """

    event_types = (DiscordEvent.MESSAGE,)

    def key_paths(self, options: MessageHandlerOptions) -> List[List[str]]:
        return [[name] for name in names_or_wildcard(options.channel_names)]

    def extract_info(self, message: discord.Message) -> List[HandlerInfo]:
        is_direct_message = message.guild is None
        member = None if is_direct_message else message.author

        def info(keys: List[str]) -> HandlerInfo:
            return HandlerInfo(
                handler_keys=keys,
                is_direct_message=is_direct_message,
                member=member,
                content=message.content,
            )

        if is_direct_message:
            return [info([])]

        channel = message.channel
        infos = [info([channel_name(channel)])]
        if isinstance(channel, discord.Thread) and channel.parent is not None:
            infos.append(info([channel_name(channel.parent)]))

        return infos

    async def reject(self, text: str, message: discord.Message) -> None:
        await message.reply(text)
