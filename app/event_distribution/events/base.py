"""Base class for per-event adapters.

An adapter knows three things about one family of Discord events: which key
paths a handler registration occupies, how a raw gateway payload turns into
filterable occurrences, and where a rejection message is sent.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from core.logging import get_module_logger
from event_distribution.models import DiscordEvent, HandlerInfo, HandlerOptions

logger = get_module_logger()


def channel_name(channel: Any) -> str:
    """Get a channel's name, empty for channels without one (DMs)."""
    return getattr(channel, "name", None) or ""


def names_or_wildcard(names: List[str]) -> List[str]:
    """Return the names, or the wildcard segment when there are none."""
    return list(names) if names else [""]


class EventAdapter(ABC):
    """Translates between one family of Discord events and the handler tree.

    Attributes:
        event_types: Event kinds served by this adapter
    """

    event_types: Tuple[DiscordEvent, ...] = ()

    @abstractmethod
    def key_paths(self, options: HandlerOptions) -> List[List[str]]:
        """Get every key path a handler with these options is registered at.

        Args:
            options: Validated handler options

        Returns:
            List of key paths, at least one
        """

    @abstractmethod
    def extract_info(self, *args: Any) -> List[HandlerInfo]:
        """Derive occurrences from the raw event arguments.

        Args:
            *args: Arguments as delivered by the Discord client

        Returns:
            Occurrences to resolve against the handler tree
        """

    async def reject(self, text: str, *args: Any) -> None:
        """Send a rejection message back to where the event came from.

        Events without a reply surface log the rejection instead.

        Args:
            text: Message shown to the user
            *args: Arguments as delivered by the Discord client
        """
        logger.warning(
            "rejection_without_reply_surface",
            event_types=[event.value for event in self.event_types],
            text=text,
        )
