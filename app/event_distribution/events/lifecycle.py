"""Thread, ready and timer adapters."""

from typing import Any, List

import discord

from event_distribution.events.base import EventAdapter, channel_name, names_or_wildcard
from event_distribution.models import (
    DiscordEvent,
    GenericHandlerOptions,
    HandlerInfo,
    ThreadCreateHandlerOptions,
    Timer,
    TimerHandlerOptions,
)


class ThreadCreateAdapter(EventAdapter):
    """Routes new threads by their parent channel's name."""

    event_types = (DiscordEvent.THREAD_CREATE,)

    def key_paths(self, options: ThreadCreateHandlerOptions) -> List[List[str]]:
        return [[name] for name in names_or_wildcard(options.parent_names)]

    def extract_info(self, thread: discord.Thread) -> List[HandlerInfo]:
        return [
            HandlerInfo(
                handler_keys=[channel_name(thread.parent)],
                member=thread.owner,
            )
        ]


class ReadyAdapter(EventAdapter):
    """The client finished connecting. Handlers receive the client."""

    event_types = (DiscordEvent.READY,)

    def key_paths(self, options: GenericHandlerOptions) -> List[List[str]]:
        return [[""]]

    def extract_info(self, client: Any) -> List[HandlerInfo]:
        return [HandlerInfo(handler_keys=[])]


class TimerAdapter(EventAdapter):
    """Routes timers by handler identifier."""

    event_types = (DiscordEvent.TIMER,)

    def key_paths(self, options: TimerHandlerOptions) -> List[List[str]]:
        return [[options.handler_identifier]]

    def extract_info(self, timer: Timer) -> List[HandlerInfo]:
        return [HandlerInfo(handler_keys=[timer.handler_identifier])]
