"""Button, slash command and context menu adapters.

Handlers receive the raw ``discord.Interaction``. Rejections are sent as
ephemeral replies, through the followup webhook when the interaction has
already been responded to.
"""

from typing import Any, Dict, List, Tuple

import discord

from event_distribution.events.base import EventAdapter
from event_distribution.models import (
    ButtonHandlerOptions,
    ContextMenuHandlerOptions,
    DiscordEvent,
    HandlerInfo,
    SlashCommandHandlerOptions,
    SlashCommandOptionType,
)


def resolve_command_path(data: Dict[str, Any]) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Resolve a slash command interaction into its key path.

    Args:
        data: The interaction's ``data`` payload

    Returns:
        Tuple of ([command id, subcommand group or "", subcommand or ""],
        options of the invoked leaf command)

    Example:
        >>> resolve_command_path({
        ...     "id": "123",
        ...     "options": [{"type": 1, "name": "join", "options": [{"name": "group", "value": "x"}]}],
        ... })
        (['123', '', 'join'], [{'name': 'group', 'value': 'x'}])
    """
    group = ""
    subcommand = ""
    options: List[Dict[str, Any]] = data.get("options") or []

    if options and options[0].get("type") == SlashCommandOptionType.SUB_COMMAND_GROUP:
        group = options[0]["name"]
        options = options[0].get("options") or []

    if options and options[0].get("type") == SlashCommandOptionType.SUB_COMMAND:
        subcommand = options[0]["name"]
        options = options[0].get("options") or []

    return [str(data.get("id", "")), group, subcommand], options


def interaction_info(interaction: discord.Interaction, keys: List[str]) -> HandlerInfo:
    return HandlerInfo(
        handler_keys=keys,
        is_direct_message=interaction.guild_id is None,
        member=interaction.user if interaction.guild_id is not None else None,
        content=None,
    )


async def reply_ephemeral(interaction: discord.Interaction, text: str) -> None:
    """Reply to an interaction visible only to the invoking user."""
    if interaction.response.is_done():
        await interaction.followup.send(text, ephemeral=True)
    else:
        await interaction.response.send_message(text, ephemeral=True)


class InteractionAdapter(EventAdapter):
    async def reject(self, text: str, interaction: discord.Interaction) -> None:
        await reply_ephemeral(interaction, text)


class ButtonAdapter(InteractionAdapter):
    """Routes button clicks by the button's custom id."""

    event_types = (DiscordEvent.BUTTON_CLICKED,)

    def key_paths(self, options: ButtonHandlerOptions) -> List[List[str]]:
        return [[options.custom_id]]

    def extract_info(self, interaction: discord.Interaction) -> List[HandlerInfo]:
        custom_id = (interaction.data or {}).get("custom_id", "")
        return [interaction_info(interaction, [custom_id])]


class SlashCommandAdapter(InteractionAdapter):
    """Routes slash commands by command, subcommand group and subcommand.

    Handlers register by command name. Once commands are synced with Discord
    the tree is rebuilt keyed by the command id Discord assigned.
    """

    event_types = (DiscordEvent.SLASH_COMMAND,)

    def key_paths(self, options: SlashCommandHandlerOptions) -> List[List[str]]:
        return [[options.name, options.subcommand_group, options.subcommand]]

    def extract_info(self, interaction: discord.Interaction) -> List[HandlerInfo]:
        keys, _ = resolve_command_path(interaction.data or {})
        return [interaction_info(interaction, keys)]


class ContextMenuAdapter(InteractionAdapter):
    """Routes message and user context menu commands by command id."""

    event_types = (DiscordEvent.CONTEXT_MENU_MESSAGE, DiscordEvent.CONTEXT_MENU_USER)

    def key_paths(self, options: ContextMenuHandlerOptions) -> List[List[str]]:
        return [[options.name]]

    def extract_info(self, interaction: discord.Interaction) -> List[HandlerInfo]:
        command_id = str((interaction.data or {}).get("id", ""))
        return [interaction_info(interaction, [command_id])]
