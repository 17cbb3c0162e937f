"""YesBot configuration settings."""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.stdlib.get_logger().bind(component="config")


class DiscordSettings(BaseSettings):
    """Discord connection settings.

    Environment Variables:
        BOT_TOKEN: Token used to log the bot in
        GUILD_ID: Guild to register application commands in. Commands are
            registered globally when unset.
    """

    DISCORD_TOKEN: str = Field(default="", alias="BOT_TOKEN")
    GUILD_ID: Optional[str] = Field(default=None, alias="GUILD_ID")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("GUILD_ID", mode="before")
    @classmethod
    def empty_guild_is_global(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty GUILD_ID as global command registration."""
        if v is None or str(v).strip() == "":
            return None
        return str(v).strip()


class DistributionSettings(BaseSettings):
    """Event distribution settings.

    Environment Variables:
        HANDLER_PACKAGES: JSON list of packages scanned for feature handlers
        TELEMETRY_ENTRYPOINT_GROUP: setuptools entry point group scanned for
            error telemetry plugins
    """

    HANDLER_PACKAGES: List[str] = ["programs"]
    TELEMETRY_ENTRYPOINT_GROUP: str = "yesbot_event_distribution"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class Settings(BaseSettings):
    """YesBot configuration settings.

    Environment Variables:
        PREFIX: Environment prefix, empty in production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    distribution: DistributionSettings = Field(default_factory=DistributionSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """True if PREFIX is empty (production), False otherwise."""
        return not bool(self.PREFIX)


settings = Settings()

logger.debug(
    "settings_loaded",
    prefix=settings.PREFIX,
    log_level=settings.LOG_LEVEL,
    guild_id=settings.discord.GUILD_ID,
    handler_packages=settings.distribution.HANDLER_PACKAGES,
)
