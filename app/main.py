from typing import Any, Optional

from dotenv import load_dotenv

import discord

from core.config import settings
from core.logging import get_module_logger
from event_distribution import CommandSync, DiscordEvent, EventDistribution

load_dotenv()

logger = get_module_logger()


def get_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.members = True
    intents.message_content = True
    intents.voice_states = True
    return intents


class YesBotClient(discord.Client):
    """Discord client feeding every gateway event to the distribution.

    Events are dropped until the distribution is initialized. If
    initialization fails the connection is closed and ``run`` exits with
    a non-zero status.
    """

    def __init__(self, distribution: EventDistribution, **options: Any) -> None:
        options.setdefault("intents", get_intents())
        super().__init__(**options)
        self.distribution = distribution
        self.initialized = False
        self.startup_error: Optional[BaseException] = None

    def run(self, *args: Any, **kwargs: Any) -> None:
        super().run(*args, **kwargs)
        if self.startup_error is not None:
            raise SystemExit(1) from self.startup_error

    async def _dispatch_event(self, event: DiscordEvent, *args: Any) -> None:
        if not self.initialized:
            logger.debug("event_dropped_before_ready", event_type=event.value)
            return
        await self.distribution.handle_event(event, *args)

    async def on_ready(self):
        if self.startup_error is not None:
            return

        if not self.initialized:
            try:
                await self.distribution.initialize(command_sync=CommandSync.for_client(self))
            except Exception as e:
                logger.critical("startup_failed", error=str(e), exc_info=e)
                self.startup_error = e
                await self.close()
                return
            self.initialized = True
            logger.info("client_ready", user=str(self.user), git_sha=settings.GIT_SHA)

        await self._dispatch_event(DiscordEvent.READY, self)

    async def on_message(self, message):
        if message.author.bot:
            return
        await self._dispatch_event(DiscordEvent.MESSAGE, message)

    async def on_reaction_add(self, reaction, user):
        if user.bot:
            return
        await self._dispatch_event(DiscordEvent.REACTION_ADD, reaction, user)

    async def on_reaction_remove(self, reaction, user):
        if user.bot:
            return
        await self._dispatch_event(DiscordEvent.REACTION_REMOVE, reaction, user)

    async def on_member_join(self, member):
        await self._dispatch_event(DiscordEvent.MEMBER_JOIN, member)

    async def on_member_remove(self, member):
        await self._dispatch_event(DiscordEvent.MEMBER_LEAVE, member)

    async def on_member_update(self, before, after):
        await self._dispatch_event(DiscordEvent.GUILD_MEMBER_UPDATE, before, after)

    async def on_voice_state_update(self, member, before, after):
        await self._dispatch_event(DiscordEvent.VOICE_STATE_UPDATE, member, before, after)

    async def on_thread_create(self, thread):
        await self._dispatch_event(DiscordEvent.THREAD_CREATE, thread)

    async def on_interaction(self, interaction):
        if not self.initialized:
            logger.debug("interaction_dropped_before_ready")
            return
        await self.distribution.handle_interaction(interaction)


def create_client(distribution: EventDistribution) -> YesBotClient:
    """Create a Discord client feeding every gateway event to the distribution."""
    return YesBotClient(distribution)


def main():
    """Main function to start the bot."""
    logger.info("application_startup", log_level=settings.LOG_LEVEL)

    token = settings.discord.DISCORD_TOKEN
    if not token:
        logger.error("discord_token_missing")
        raise SystemExit(1)

    client = create_client(EventDistribution())
    client.run(token)


if __name__ == "__main__":
    main()
