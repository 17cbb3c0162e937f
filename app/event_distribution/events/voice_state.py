"""Voice state update adapter."""

from typing import List

import discord

from event_distribution.events.base import EventAdapter
from event_distribution.models import (
    DiscordEvent,
    HandlerInfo,
    VoiceStateChange,
    VoiceStateUpdateHandlerOptions,
)


def voice_state_changes(
    before: discord.VoiceState, after: discord.VoiceState
) -> List[VoiceStateChange]:
    """Classify the transition between two voice states."""
    changes: List[VoiceStateChange] = []

    if before.channel is None and after.channel is not None:
        changes.append(VoiceStateChange.JOINED)
    elif before.channel is not None and after.channel is None:
        changes.append(VoiceStateChange.LEFT)
    elif (
        before.channel is not None
        and after.channel is not None
        and before.channel.id != after.channel.id
    ):
        changes.append(VoiceStateChange.SWITCHED_CHANNEL)

    if not before.self_mute and after.self_mute:
        changes.append(VoiceStateChange.MUTED)
    elif before.self_mute and not after.self_mute:
        changes.append(VoiceStateChange.UNMUTED)

    return changes


class VoiceStateAdapter(EventAdapter):
    """Routes voice state updates by the kind of change.

    Handlers receive ``(member, before, after)``.
    """

    event_types = (DiscordEvent.VOICE_STATE_UPDATE,)

    def key_paths(self, options: VoiceStateUpdateHandlerOptions) -> List[List[str]]:
        if not options.changes:
            return [[""]]
        return [[change.value] for change in options.changes]

    def extract_info(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> List[HandlerInfo]:
        changes = voice_state_changes(before, after)
        keys = [[change.value] for change in changes] or [[]]
        return [HandlerInfo(handler_keys=k, member=member) for k in keys]
