"""The /ping slash command."""

import math

import discord

from event_distribution import CommandHandler, DiscordEvent, ErrorWithParams, command


@command(
    event=DiscordEvent.SLASH_COMMAND,
    name="ping",
    description="Checks whether the bot is responsive",
    errors={"NOT_CONNECTED": "I can't reach Discord right now, try again in {seconds}s."},
)
class Ping(CommandHandler):
    async def handle(self, interaction: discord.Interaction) -> None:
        latency = interaction.client.latency
        if math.isnan(latency):
            raise ErrorWithParams("NOT_CONNECTED", {"seconds": 30})

        await interaction.response.send_message(
            f"Pong! {round(latency * 1000)}ms", ephemeral=True
        )
