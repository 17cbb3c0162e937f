"""Decorator based handler registration.

Feature modules declare their handlers with the ``command`` decorator at
import time. The declarations are collected here and flushed into an
EventDistribution during startup.

Usage:

    from event_distribution import CommandHandler, DiscordEvent, command

    @command(event=DiscordEvent.MESSAGE, channel_names=["chat"], content_regex=r"^!ping")
    class Ping(CommandHandler):
        async def handle(self, message):
            await message.reply("pong")
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Type

from core.logging import get_module_logger
from event_distribution.models import CommandHandler, HandlerOptions, parse_handler_options

if TYPE_CHECKING:
    from event_distribution.distribution import EventDistribution

logger = get_module_logger()


@dataclass
class PendingRegistration:
    """A declared handler waiting to be added to a distribution."""

    options: HandlerOptions
    handler_class: Type[CommandHandler]


class HandlerCollection:
    """Collects handler declarations until a distribution is initialized."""

    def __init__(self) -> None:
        self._pending: List[PendingRegistration] = []

    def __len__(self) -> int:
        return len(self._pending)

    def command(
        self, **options: Any
    ) -> Callable[[Type[CommandHandler]], Type[CommandHandler]]:
        """Declare the decorated class as a handler.

        Options are validated immediately, so invalid declarations fail the
        import of the declaring module.

        Args:
            **options: Handler options, ``event`` selects the event kind

        Returns:
            Class decorator returning the class unchanged

        Raises:
            InvalidHandlerOptionsError: If the options are invalid
        """
        parsed = parse_handler_options(**options)

        def decorator(handler_class: Type[CommandHandler]) -> Type[CommandHandler]:
            self.add(parsed, handler_class)
            return handler_class

        return decorator

    def add(self, options: HandlerOptions, handler_class: Type[CommandHandler]) -> None:
        self._pending.append(PendingRegistration(options, handler_class))
        logger.debug(
            "handler_declared",
            event_type=options.event.value,
            handler=handler_class.__name__,
        )

    def register_with(self, distribution: "EventDistribution") -> int:
        """Add every declared handler to a distribution.

        Returns:
            Number of handlers added
        """
        for pending in self._pending:
            distribution.add_with_options(pending.options, pending.handler_class)
        return len(self._pending)

    def clear(self) -> None:
        self._pending.clear()


handlers = HandlerCollection()
command = handlers.command
