"""Unit tests for interaction routing and autocomplete."""

from unittest.mock import AsyncMock

import discord
import pytest

from event_distribution.models import DiscordEvent, SlashCommandOption, SlashCommandOptionType

pytestmark = pytest.mark.unit


@pytest.fixture
def routed(distribution):
    """Replace event dispatch with a recorder."""
    distribution.handle_event = AsyncMock()
    return distribution


def slash_options(name="group", **options):
    return {
        "event": DiscordEvent.SLASH_COMMAND,
        "name": name,
        "description": "Manage groups",
        **options,
    }


def autocomplete_data(command_id="group", value="ga", focused_name="name"):
    return {
        "id": command_id,
        "name": "group",
        "type": 1,
        "options": [
            {
                "type": 1,
                "name": "join",
                "options": [{"name": focused_name, "value": value, "focused": True}],
            }
        ],
    }


class TestInteractionRouting:
    """Test classification of interactions."""

    @pytest.mark.asyncio
    async def test_button_click(self, routed, interaction_factory):
        """Button components are dispatched as button clicks."""
        interaction = interaction_factory(
            discord.InteractionType.component, {"component_type": 2, "custom_id": "vote"}
        )

        await routed.handle_interaction(interaction)

        routed.handle_event.assert_awaited_once_with(DiscordEvent.BUTTON_CLICKED, interaction)

    @pytest.mark.asyncio
    async def test_select_menu_ignored(self, routed, interaction_factory):
        """Non-button components are not dispatched."""
        interaction = interaction_factory(
            discord.InteractionType.component, {"component_type": 3, "custom_id": "menu"}
        )

        await routed.handle_interaction(interaction)

        routed.handle_event.assert_not_awaited()

    @pytest.mark.parametrize(
        "command_type,event",
        [
            (1, DiscordEvent.SLASH_COMMAND),
            (2, DiscordEvent.CONTEXT_MENU_USER),
            (3, DiscordEvent.CONTEXT_MENU_MESSAGE),
        ],
    )
    @pytest.mark.asyncio
    async def test_application_commands(self, routed, interaction_factory, command_type, event):
        """Application commands are dispatched by command type."""
        interaction = interaction_factory(data={"id": "1", "name": "x", "type": command_type})

        await routed.handle_interaction(interaction)

        routed.handle_event.assert_awaited_once_with(event, interaction)

    @pytest.mark.asyncio
    async def test_unknown_interaction_ignored(self, routed, interaction_factory):
        """Interaction types without an event kind are ignored."""
        interaction = interaction_factory(discord.InteractionType.modal_submit, {})

        await routed.handle_interaction(interaction)

        routed.handle_event.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_button_reaches_handler(
        self, distribution, handler_class, calls, interaction_factory
    ):
        """Button handlers are resolved by custom id."""
        distribution.add_with_options(
            {"event": DiscordEvent.BUTTON_CLICKED, "custom_id": "vote"}, handler_class("vote")
        )
        interaction = interaction_factory(
            discord.InteractionType.component, {"component_type": 2, "custom_id": "vote"}
        )

        await distribution.handle_interaction(interaction)

        assert calls == [("vote", (interaction,))]

    @pytest.mark.asyncio
    async def test_interaction_rejection_is_ephemeral(
        self, distribution, handler_class, interaction_factory
    ):
        """Rejected interactions get an ephemeral reply."""
        distribution.add_with_options(
            {
                "event": DiscordEvent.BUTTON_CLICKED,
                "custom_id": "vote",
                "allowed_roles": ["Member"],
                "errors": {"MISSING_ROLE": "Members only."},
            },
            handler_class("vote"),
        )
        interaction = interaction_factory(
            discord.InteractionType.component, {"component_type": 2, "custom_id": "vote"}
        )

        await distribution.handle_interaction(interaction)

        interaction.response.send_message.assert_awaited_once_with("Members only.", ephemeral=True)

    @pytest.mark.asyncio
    async def test_rejection_after_response_uses_followup(
        self, distribution, handler_class, interaction_factory
    ):
        """Interactions already responded to are rejected through the followup."""
        distribution.add_with_options(
            {
                "event": DiscordEvent.BUTTON_CLICKED,
                "custom_id": "vote",
                "location": "DIRECT_MESSAGE",
                "errors": {"WRONG_LOCATION": "DMs only."},
            },
            handler_class("vote"),
        )
        interaction = interaction_factory(
            discord.InteractionType.component,
            {"component_type": 2, "custom_id": "vote"},
            response_done=True,
        )

        await distribution.handle_interaction(interaction)

        interaction.followup.send.assert_awaited_once_with("DMs only.", ephemeral=True)


class TestAutocomplete:
    """Test autocomplete answers."""

    @pytest.mark.asyncio
    async def test_callback_choices_are_sent(self, distribution, handler_class, interaction_factory):
        """Choices from the focused option's callback are sent back."""
        received = []

        async def complete(value, interaction):
            received.append(value)
            return ["gaming", {"name": "Garden", "value": "garden"}]

        distribution.add_with_options(
            slash_options(
                subcommand="join",
                options=[SlashCommandOption(name="name", description="Group", autocomplete=complete)],
            ),
            handler_class("join"),
        )
        interaction = interaction_factory(discord.InteractionType.auto_complete, autocomplete_data())

        await distribution.handle_interaction(interaction)

        assert received == ["ga"]
        choices = interaction.response.send_autocomplete_result.await_args.kwargs["choices"]
        assert [(c.name, c.value) for c in choices] == [("gaming", "gaming"), ("Garden", "garden")]

    @pytest.mark.asyncio
    async def test_unknown_command_answers_empty(self, distribution, interaction_factory):
        """Requests for unknown commands get an empty answer."""
        interaction = interaction_factory(discord.InteractionType.auto_complete, autocomplete_data())

        await distribution.handle_interaction(interaction)

        interaction.response.send_autocomplete_result.assert_awaited_once_with(choices=[])

    @pytest.mark.asyncio
    async def test_option_without_callback_answers_empty(
        self, distribution, handler_class, interaction_factory
    ):
        """Options without autocomplete get an empty answer."""
        distribution.add_with_options(
            slash_options(
                subcommand="join",
                options=[SlashCommandOption(name="name", description="Group")],
            ),
            handler_class("join"),
        )
        interaction = interaction_factory(discord.InteractionType.auto_complete, autocomplete_data())

        await distribution.handle_interaction(interaction)

        interaction.response.send_autocomplete_result.assert_awaited_once_with(choices=[])

    @pytest.mark.asyncio
    async def test_unknown_option_answers_empty(self, distribution, handler_class, interaction_factory):
        """A focused option the handler does not define gets an empty answer."""
        distribution.add_with_options(
            slash_options(subcommand="join"), handler_class("join")
        )
        interaction = interaction_factory(
            discord.InteractionType.auto_complete, autocomplete_data(focused_name="other")
        )

        await distribution.handle_interaction(interaction)

        interaction.response.send_autocomplete_result.assert_awaited_once_with(choices=[])

    @pytest.mark.asyncio
    async def test_callback_failure_answers_empty(
        self, distribution, handler_class, interaction_factory
    ):
        """A failing callback gets an empty answer instead of raising."""

        async def complete(value, interaction):
            raise RuntimeError("database down")

        distribution.add_with_options(
            slash_options(
                subcommand="join",
                options=[
                    SlashCommandOption(
                        name="name",
                        description="Group",
                        type=SlashCommandOptionType.STRING,
                        autocomplete=complete,
                    )
                ],
            ),
            handler_class("join"),
        )
        interaction = interaction_factory(discord.InteractionType.auto_complete, autocomplete_data())

        await distribution.handle_interaction(interaction)

        interaction.response.send_autocomplete_result.assert_awaited_once_with(choices=[])

    @pytest.mark.parametrize("result", [[{"label": "gaming"}], [{"name": "gaming"}], 42])
    @pytest.mark.asyncio
    async def test_malformed_choices_answer_empty(
        self, distribution, handler_class, interaction_factory, result
    ):
        """Callback results that are not valid choices get an empty answer."""

        async def complete(value, interaction):
            return result

        distribution.add_with_options(
            slash_options(
                subcommand="join",
                options=[SlashCommandOption(name="name", description="Group", autocomplete=complete)],
            ),
            handler_class("join"),
        )
        interaction = interaction_factory(discord.InteractionType.auto_complete, autocomplete_data())

        await distribution.handle_interaction(interaction)

        interaction.response.send_autocomplete_result.assert_awaited_once_with(choices=[])

    @pytest.mark.asyncio
    async def test_response_failure_is_contained(self, distribution, interaction_factory):
        """Failing to answer does not raise."""
        interaction = interaction_factory(discord.InteractionType.auto_complete, autocomplete_data())
        interaction.response.send_autocomplete_result.side_effect = RuntimeError("expired")

        await distribution.handle_interaction(interaction)

        interaction.response.send_autocomplete_result.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_autocomplete_does_not_run_handler(
        self, distribution, handler_class, calls, interaction_factory
    ):
        """Autocomplete requests never execute the command handler."""

        async def complete(value, interaction):
            return []

        distribution.add_with_options(
            slash_options(
                subcommand="join",
                options=[SlashCommandOption(name="name", description="Group", autocomplete=complete)],
            ),
            handler_class("join"),
        )
        interaction = interaction_factory(discord.InteractionType.auto_complete, autocomplete_data())

        await distribution.handle_interaction(interaction)

        assert calls == []
