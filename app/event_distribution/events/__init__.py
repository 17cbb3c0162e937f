"""Per-event adapters.

Maps every DiscordEvent to the adapter that derives key paths, occurrences
and rejection replies for it.

Usage:

    from event_distribution.events import extract_event_info, key_paths_for

    key_paths_for(options)  # [["general"], ["memes"]]
    extract_event_info(DiscordEvent.MESSAGE, message)  # [HandlerInfo(...)]
"""

from typing import Any, Dict, List

from event_distribution.events.base import EventAdapter
from event_distribution.events.interactions import (
    ButtonAdapter,
    ContextMenuAdapter,
    SlashCommandAdapter,
    reply_ephemeral,
    resolve_command_path,
)
from event_distribution.events.lifecycle import ReadyAdapter, ThreadCreateAdapter, TimerAdapter
from event_distribution.events.members import GuildMemberUpdateAdapter, MemberJoinLeaveAdapter
from event_distribution.events.message import MessageAdapter
from event_distribution.events.reactions import ReactionAdapter
from event_distribution.events.voice_state import VoiceStateAdapter, voice_state_changes
from event_distribution.models import DiscordEvent, HandlerInfo, HandlerOptions

ADAPTERS: Dict[DiscordEvent, EventAdapter] = {}

for _adapter in (
    MessageAdapter(),
    ReactionAdapter(),
    ButtonAdapter(),
    SlashCommandAdapter(),
    ContextMenuAdapter(),
    MemberJoinLeaveAdapter(),
    GuildMemberUpdateAdapter(),
    VoiceStateAdapter(),
    ThreadCreateAdapter(),
    ReadyAdapter(),
    TimerAdapter(),
):
    for _event in _adapter.event_types:
        ADAPTERS[_event] = _adapter


def get_adapter(event: DiscordEvent) -> EventAdapter:
    """Get the adapter for an event kind."""
    return ADAPTERS[event]


def key_paths_for(options: HandlerOptions) -> List[List[str]]:
    """Get the key paths a handler with these options is registered at."""
    return get_adapter(options.event).key_paths(options)


def extract_event_info(event: DiscordEvent, *args: Any) -> List[HandlerInfo]:
    """Derive occurrences from raw event arguments."""
    return get_adapter(event).extract_info(*args)


async def reject_with_error(text: str, event: DiscordEvent, *args: Any) -> None:
    """Send a rejection message for an event back to its origin."""
    await get_adapter(event).reject(text, *args)


__all__ = [
    "ADAPTERS",
    "EventAdapter",
    "get_adapter",
    "key_paths_for",
    "extract_event_info",
    "reject_with_error",
    "reply_ephemeral",
    "resolve_command_path",
    "voice_state_changes",
]
