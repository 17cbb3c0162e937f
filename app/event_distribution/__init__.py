"""Event distribution and handler routing.

Feature modules declare handlers with ``command``. The bot process owns one
EventDistribution, initializes it once the client is connected and feeds it
every gateway event.

Usage:

    from event_distribution import CommandHandler, DiscordEvent, command

    @command(event=DiscordEvent.REACTION_ADD, emoji="🇫")
    class PayRespects(CommandHandler):
        async def handle(self, reaction, user):
            ...
"""

from event_distribution.commands import CommandSync, CommandSyncResult
from event_distribution.distribution import EventDistribution
from event_distribution.exceptions import (
    CommandSyncError,
    ErrorWithParams,
    EventDistributionError,
    InvalidHandlerOptionsError,
    RegistrationError,
)
from event_distribution.hookspecs import hookimpl
from event_distribution.models import (
    CommandHandler,
    DiscordEvent,
    EventLocation,
    HandlerRejectedReason,
    MemberUpdateChange,
    SlashCommandOption,
    SlashCommandOptionType,
    Timer,
    VoiceStateChange,
)
from event_distribution.registration import HandlerCollection, command, handlers

__all__ = [
    # Distribution
    "EventDistribution",
    "CommandSync",
    "CommandSyncResult",
    # Registration
    "command",
    "handlers",
    "HandlerCollection",
    "CommandHandler",
    "hookimpl",
    # Models
    "DiscordEvent",
    "EventLocation",
    "HandlerRejectedReason",
    "MemberUpdateChange",
    "SlashCommandOption",
    "SlashCommandOptionType",
    "Timer",
    "VoiceStateChange",
    # Exceptions
    "EventDistributionError",
    "RegistrationError",
    "InvalidHandlerOptionsError",
    "CommandSyncError",
    "ErrorWithParams",
]
