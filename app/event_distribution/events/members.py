"""Guild member adapters."""

from typing import List

import discord

from event_distribution.events.base import EventAdapter
from event_distribution.models import (
    DiscordEvent,
    GenericHandlerOptions,
    GuildMemberUpdateHandlerOptions,
    HandlerInfo,
    MemberUpdateChange,
)


class MemberJoinLeaveAdapter(EventAdapter):
    """Members joining or leaving the guild. Every handler sees every event."""

    event_types = (DiscordEvent.MEMBER_JOIN, DiscordEvent.MEMBER_LEAVE)

    def key_paths(self, options: GenericHandlerOptions) -> List[List[str]]:
        return [[""]]

    def extract_info(self, member: discord.Member) -> List[HandlerInfo]:
        return [HandlerInfo(handler_keys=[], member=member)]


class GuildMemberUpdateAdapter(EventAdapter):
    """Routes member updates by the roles that were added or removed.

    Handlers receive ``(before, after)``. An update without role changes
    (nickname, avatar, ...) only reaches handlers registered without roles.
    """

    event_types = (DiscordEvent.GUILD_MEMBER_UPDATE,)

    def key_paths(self, options: GuildMemberUpdateHandlerOptions) -> List[List[str]]:
        paths = [
            [MemberUpdateChange.ROLE_ADDED.value, name]
            for name in options.role_names_added
        ]
        paths += [
            [MemberUpdateChange.ROLE_REMOVED.value, name]
            for name in options.role_names_removed
        ]
        return paths or [["", ""]]

    def extract_info(
        self, before: discord.Member, after: discord.Member
    ) -> List[HandlerInfo]:
        before_roles = [role.name for role in before.roles]
        after_roles = [role.name for role in after.roles]

        keys = [
            [MemberUpdateChange.ROLE_ADDED.value, name]
            for name in after_roles
            if name not in before_roles
        ]
        keys += [
            [MemberUpdateChange.ROLE_REMOVED.value, name]
            for name in before_roles
            if name not in after_roles
        ]

        return [HandlerInfo(handler_keys=k, member=after) for k in keys or [[]]]
