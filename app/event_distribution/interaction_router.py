"""Interaction routing.

Splits raw Discord interactions into button clicks, slash commands, context
menu commands and autocomplete requests. Everything but autocomplete goes
through the regular event dispatch.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import discord

from core.logging import get_module_logger
from event_distribution.events import resolve_command_path
from event_distribution.models import DiscordEvent, SlashCommandOption

if TYPE_CHECKING:
    from event_distribution.distribution import EventDistribution

logger = get_module_logger()

BUTTON_COMPONENT_TYPE = 2

APPLICATION_COMMAND_EVENTS: Dict[int, DiscordEvent] = {
    1: DiscordEvent.SLASH_COMMAND,
    2: DiscordEvent.CONTEXT_MENU_USER,
    3: DiscordEvent.CONTEXT_MENU_MESSAGE,
}


def find_focused_option(options: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Get the option the user is currently typing into."""
    for option in options:
        if option.get("focused"):
            return option
    return None


def to_option_choice(choice: Any) -> discord.OptionChoice:
    """Convert an autocomplete result entry to an OptionChoice.

    Accepts OptionChoice instances, ``{"name": ..., "value": ...}`` mappings
    and plain values, which are used as both name and value.

    Raises:
        KeyError: If a mapping lacks ``name`` or ``value``
    """
    if isinstance(choice, discord.OptionChoice):
        return choice
    if isinstance(choice, dict):
        return discord.OptionChoice(name=str(choice["name"]), value=choice["value"])
    return discord.OptionChoice(name=str(choice), value=choice)


class InteractionRouter:
    """Routes interactions for an EventDistribution."""

    def __init__(self, distribution: "EventDistribution") -> None:
        self.distribution = distribution

    async def handle_interaction(self, interaction: discord.Interaction) -> None:
        """Route an interaction to the matching event kind.

        Component interactions other than buttons and unknown interaction
        types are ignored.
        """
        data = interaction.data or {}

        if interaction.type == discord.InteractionType.component:
            if data.get("component_type") == BUTTON_COMPONENT_TYPE:
                await self.distribution.handle_event(DiscordEvent.BUTTON_CLICKED, interaction)
                return

        elif interaction.type == discord.InteractionType.application_command:
            event = APPLICATION_COMMAND_EVENTS.get(data.get("type", 1))
            if event is not None:
                await self.distribution.handle_event(event, interaction)
                return

        elif interaction.type == discord.InteractionType.auto_complete:
            await self.handle_autocomplete(interaction)
            return

        logger.debug(
            "interaction_ignored",
            interaction_type=str(interaction.type),
            component_type=data.get("component_type"),
        )

    async def handle_autocomplete(self, interaction: discord.Interaction) -> None:
        """Answer an autocomplete request from the focused option's callback.

        Always responds, with an empty list when no handler, option or
        callback is found or the callback fails.
        """
        data = interaction.data or {}
        key_path, leaf_options = resolve_command_path(data)

        handlers = self.distribution.registry.lookup(DiscordEvent.SLASH_COMMAND, key_path)
        if not handlers:
            logger.warning("autocomplete_handler_not_found", key_path=key_path)
            await self._respond(interaction, [])
            return

        handler = handlers[0]
        focused = find_focused_option(leaf_options)
        definition: Optional[SlashCommandOption] = None
        if focused is not None:
            definition = next(
                (o for o in handler.options.options if o.name == focused.get("name")),
                None,
            )

        if definition is None or definition.autocomplete is None:
            logger.warning(
                "autocomplete_option_not_found",
                handler=handler.name,
                option=focused.get("name") if focused else None,
            )
            await self._respond(interaction, [])
            return

        try:
            choices = await definition.autocomplete(focused.get("value", ""), interaction)
        except Exception as e:
            logger.error(
                "autocomplete_failed",
                handler=handler.name,
                option=definition.name,
                error=str(e),
                exc_info=e,
            )
            choices = []

        await self._respond(interaction, choices or [])

    async def _respond(self, interaction: discord.Interaction, choices: Any) -> None:
        try:
            option_choices = [to_option_choice(choice) for choice in choices]
        except Exception as e:
            logger.error("autocomplete_choices_invalid", error=str(e), exc_info=e)
            option_choices = []

        try:
            await interaction.response.send_autocomplete_result(choices=option_choices[:25])
        except Exception as e:
            logger.error("autocomplete_response_failed", error=str(e), exc_info=e)
