"""Fixtures for event distribution tests."""

from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from event_distribution.distribution import EventDistribution
from event_distribution.hookspecs import hookimpl
from event_distribution.models import (
    CommandHandler,
    DiscordEvent,
    HandlerDescriptor,
    SingletonHandler,
    parse_handler_options,
)
from event_distribution.telemetry import create_telemetry_plugin_manager


class CapturingTelemetry:
    """Telemetry plugin recording every captured failure."""

    def __init__(self):
        self.captured: List[dict] = []

    @hookimpl
    def capture_handler_exception(self, error, event, handler, args):
        self.captured.append(
            {"error": error, "event": event, "handler": handler, "args": args}
        )


@pytest.fixture
def telemetry_plugin():
    return CapturingTelemetry()


@pytest.fixture
def telemetry(telemetry_plugin):
    """Plugin manager without entry point plugins."""
    pm = create_telemetry_plugin_manager(entrypoint_group="")
    pm.register(telemetry_plugin)
    return pm


@pytest.fixture
def distribution(telemetry):
    return EventDistribution(telemetry=telemetry)


@pytest.fixture
def calls():
    """Shared call log handlers append to."""
    return []


@pytest.fixture
def handler_class(calls):
    """Factory for handler classes appending (label, args) to ``calls``."""

    def _factory(label: str, error: Optional[Exception] = None):
        class RecordingHandler(CommandHandler):
            async def handle(self, *args: Any) -> None:
                calls.append((label, args))
                if error is not None:
                    raise error

        RecordingHandler.__name__ = f"RecordingHandler_{label}"
        return RecordingHandler

    return _factory


@pytest.fixture
def descriptor_factory():
    """Factory for descriptors with a no-op singleton handler."""

    def _factory(event: DiscordEvent = DiscordEvent.MESSAGE, key_path=("",), **options):
        class Noop(CommandHandler):
            async def handle(self, *args):
                pass

        return HandlerDescriptor(
            event=event,
            key_path=tuple(key_path),
            options=parse_handler_options(event=event, **options),
            ioc=SingletonHandler(Noop()),
        )

    return _factory


def make_role(name: str) -> MagicMock:
    role = MagicMock()
    role.name = name
    return role


def make_member(role_names: Optional[List[str]] = None, member_id: int = 42) -> MagicMock:
    member = MagicMock()
    member.id = member_id
    member.bot = False
    member.roles = [make_role(name) for name in role_names or []]
    member.send = AsyncMock()
    return member


def make_channel(name: str) -> MagicMock:
    channel = MagicMock()
    channel.name = name
    channel.id = hash(name)
    return channel


def make_thread(name: str, parent_name: str) -> MagicMock:
    thread = MagicMock(spec=discord.Thread)
    thread.name = name
    thread.parent = make_channel(parent_name)
    return thread


@pytest.fixture
def message_factory():
    """Factory for guild and direct messages."""

    def _factory(
        channel: Any = "general",
        content: str = "hello",
        role_names: Optional[List[str]] = None,
        direct: bool = False,
    ):
        message = MagicMock()
        message.content = content
        message.reply = AsyncMock()
        message.react = AsyncMock()
        message.author = make_member(role_names)
        if direct:
            message.guild = None
            message.channel = MagicMock(spec=discord.DMChannel)
        else:
            message.guild = MagicMock()
            message.channel = make_channel(channel) if isinstance(channel, str) else channel
        return message

    return _factory


@pytest.fixture
def interaction_factory():
    """Factory for interactions with a mocked response surface."""

    def _factory(
        interaction_type=discord.InteractionType.application_command,
        data: Optional[dict] = None,
        guild_id: Optional[int] = 1234,
        role_names: Optional[List[str]] = None,
        response_done: bool = False,
    ):
        interaction = MagicMock()
        interaction.type = interaction_type
        interaction.data = data or {}
        interaction.guild_id = guild_id
        interaction.user = make_member(role_names)
        interaction.response.is_done = MagicMock(return_value=response_done)
        interaction.response.send_message = AsyncMock()
        interaction.response.send_autocomplete_result = AsyncMock()
        interaction.followup.send = AsyncMock()
        return interaction

    return _factory


@pytest.fixture
def member_factory():
    return make_member


@pytest.fixture
def channel_factory():
    return make_channel


@pytest.fixture
def thread_factory():
    return make_thread
