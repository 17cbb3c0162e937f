"""Event distribution data models.

Provides the closed set of Discord event kinds, the per-event handler option
models validated at registration time, handler identity variants and the
per-dispatch occurrence and filter result records.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from re import Pattern
from typing import (
    Annotated,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    Tuple,
    Union,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from event_distribution.exceptions import InvalidHandlerOptionsError


class DiscordEvent(str, Enum):
    """Discord events handlers can register for."""

    BUTTON_CLICKED = "BUTTON_CLICKED"
    CONTEXT_MENU_MESSAGE = "CONTEXT_MENU_MESSAGE"
    CONTEXT_MENU_USER = "CONTEXT_MENU_USER"
    GUILD_MEMBER_UPDATE = "GUILD_MEMBER_UPDATE"
    MEMBER_JOIN = "MEMBER_JOIN"
    MEMBER_LEAVE = "MEMBER_LEAVE"
    MESSAGE = "MESSAGE"
    REACTION_ADD = "REACTION_ADD"
    REACTION_REMOVE = "REACTION_REMOVE"
    READY = "READY"
    SLASH_COMMAND = "SLASH_COMMAND"
    THREAD_CREATE = "THREAD_CREATE"
    TIMER = "TIMER"
    VOICE_STATE_UPDATE = "VOICE_STATE_UPDATE"


class EventLocation(str, Enum):
    """Where a message-related event may originate from."""

    ANYWHERE = "ANYWHERE"
    DIRECT_MESSAGE = "DIRECT_MESSAGE"
    SERVER = "SERVER"


class HandlerRejectedReason(str, Enum):
    """Why the filter pipeline rejected a handler.

    The values double as keys in a handler's ``errors`` map.
    """

    WRONG_LOCATION = "WRONG_LOCATION"
    MISSING_ROLE = "MISSING_ROLE"
    DOESNT_MATCH_REGEX = "DOESNT_MATCH_REGEX"


class VoiceStateChange(str, Enum):
    """Voice state transitions handlers can register for."""

    JOINED = "JOINED"
    LEFT = "LEFT"
    SWITCHED_CHANNEL = "SWITCHED_CHANNEL"
    MUTED = "MUTED"
    UNMUTED = "UNMUTED"


class MemberUpdateChange(str, Enum):
    """Guild member role changes handlers can register for."""

    ROLE_ADDED = "ROLE_ADDED"
    ROLE_REMOVED = "ROLE_REMOVED"


class SlashCommandOptionType(IntEnum):
    """Discord application command option types."""

    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


AutocompleteCallback = Callable[[Any, Any], Awaitable[List[Any]]]
"""Called with the partial option value and the raw interaction."""


class HandlerOptions(BaseModel):
    """Options shared by every handler registration.

    Attributes:
        event: Event kind the handler is registered for
        stateful: Keep one instance for the process lifetime instead of
            constructing a new one per dispatch
        description: Human-readable description
        errors: Maps a rejection reason or an error message to the text
            replied to the user
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    event: DiscordEvent
    stateful: bool = False
    description: str = ""
    errors: Dict[str, str] = Field(default_factory=dict)


class MessageRelatedOptions(HandlerOptions):
    """Options for events that carry a location, a member and content."""

    location: EventLocation = EventLocation.ANYWHERE
    allowed_roles: List[str] = Field(default_factory=list)
    content_regex: Optional[Pattern[str]] = None


class MessageHandlerOptions(MessageRelatedOptions):
    event: Literal[DiscordEvent.MESSAGE]
    channel_names: List[str] = Field(default_factory=list)


class ReactionHandlerOptions(MessageRelatedOptions):
    event: Literal[DiscordEvent.REACTION_ADD, DiscordEvent.REACTION_REMOVE]
    emoji: str = ""
    channel_names: List[str] = Field(default_factory=list)


class ButtonHandlerOptions(MessageRelatedOptions):
    event: Literal[DiscordEvent.BUTTON_CLICKED]
    custom_id: str


class SlashCommandOption(BaseModel):
    """A slash command option definition.

    ``autocomplete`` is only valid on string, integer and number options.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    name: str
    description: str
    type: SlashCommandOptionType = SlashCommandOptionType.STRING
    required: bool = False
    choices: List[Dict[str, Any]] = Field(default_factory=list)
    autocomplete: Optional[AutocompleteCallback] = None

    @field_validator("autocomplete")
    @classmethod
    def autocomplete_requires_free_input(cls, v, info):
        option_type = info.data.get("type")
        if v is not None and option_type not in (
            SlashCommandOptionType.STRING,
            SlashCommandOptionType.INTEGER,
            SlashCommandOptionType.NUMBER,
        ):
            raise ValueError(f"Option type {option_type} does not support autocomplete")
        return v

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the Discord application command option format."""
        payload: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": int(self.type),
            "required": self.required,
        }
        if self.choices:
            payload["choices"] = self.choices
        if self.autocomplete is not None:
            payload["autocomplete"] = True
        return payload


COMMAND_NAME_PATTERN = r"^[-_\w]{1,32}$"


class SlashCommandHandlerOptions(MessageRelatedOptions):
    event: Literal[DiscordEvent.SLASH_COMMAND]
    name: str = Field(pattern=COMMAND_NAME_PATTERN)
    subcommand_group: str = ""
    subcommand: str = ""
    options: List[SlashCommandOption] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_command_shape(self) -> "SlashCommandHandlerOptions":
        if not self.description:
            raise ValueError("Slash commands require a description")
        if self.subcommand_group and not self.subcommand:
            raise ValueError("subcommand_group requires a subcommand")
        return self


class ContextMenuHandlerOptions(MessageRelatedOptions):
    event: Literal[DiscordEvent.CONTEXT_MENU_MESSAGE, DiscordEvent.CONTEXT_MENU_USER]
    name: str = Field(min_length=1, max_length=32)


class GenericHandlerOptions(HandlerOptions):
    event: Literal[DiscordEvent.MEMBER_JOIN, DiscordEvent.MEMBER_LEAVE, DiscordEvent.READY]


class GuildMemberUpdateHandlerOptions(HandlerOptions):
    event: Literal[DiscordEvent.GUILD_MEMBER_UPDATE]
    role_names_added: List[str] = Field(default_factory=list)
    role_names_removed: List[str] = Field(default_factory=list)


class VoiceStateUpdateHandlerOptions(HandlerOptions):
    event: Literal[DiscordEvent.VOICE_STATE_UPDATE]
    changes: List[VoiceStateChange] = Field(default_factory=list)


class ThreadCreateHandlerOptions(HandlerOptions):
    event: Literal[DiscordEvent.THREAD_CREATE]
    parent_names: List[str] = Field(default_factory=list)


class TimerHandlerOptions(HandlerOptions):
    event: Literal[DiscordEvent.TIMER]
    handler_identifier: str = Field(min_length=1)


EventHandlerOptions = Annotated[
    Union[
        MessageHandlerOptions,
        ReactionHandlerOptions,
        ButtonHandlerOptions,
        SlashCommandHandlerOptions,
        ContextMenuHandlerOptions,
        GenericHandlerOptions,
        GuildMemberUpdateHandlerOptions,
        VoiceStateUpdateHandlerOptions,
        ThreadCreateHandlerOptions,
        TimerHandlerOptions,
    ],
    Field(discriminator="event"),
]

_OPTIONS_ADAPTER: TypeAdapter = TypeAdapter(EventHandlerOptions)


def parse_handler_options(**options: Any) -> HandlerOptions:
    """Validate raw handler options into the model for their event kind.

    Args:
        **options: Option values, ``event`` selects the model

    Returns:
        The validated options model

    Raises:
        InvalidHandlerOptionsError: If the options are invalid, including
            content patterns that do not compile
    """
    try:
        return _OPTIONS_ADAPTER.validate_python(options)
    except ValidationError as e:
        raise InvalidHandlerOptionsError(
            f"Invalid options for {options.get('event')} handler: {e}",
            errors=e.errors(include_context=False),
        ) from e


def is_message_related(options: HandlerOptions) -> bool:
    """Whether location, role and content filters apply to the options."""
    return isinstance(options, MessageRelatedOptions)


class CommandHandler(ABC):
    """Interface for feature handlers.

    Handlers are called with the unmodified arguments Discord delivered for
    their event kind, e.g. ``(message,)`` for MESSAGE or
    ``(member, before, after)`` for VOICE_STATE_UPDATE.
    """

    @abstractmethod
    async def handle(self, *args: Any) -> None:
        """Process the event."""
        raise NotImplementedError


@dataclass(frozen=True, eq=False)
class SingletonHandler:
    """A handler instance shared by every dispatch."""

    instance: CommandHandler

    @property
    def identity(self) -> Any:
        return self.instance

    @property
    def name(self) -> str:
        return type(self.instance).__name__

    def resolve(self) -> CommandHandler:
        return self.instance


@dataclass(frozen=True, eq=False)
class FactoryHandler:
    """A handler class constructed fresh for each dispatch."""

    factory: Callable[[], CommandHandler]

    @property
    def identity(self) -> Any:
        return self.factory

    @property
    def name(self) -> str:
        return getattr(self.factory, "__name__", repr(self.factory))

    def resolve(self) -> CommandHandler:
        return self.factory()


HandlerIoc = Union[SingletonHandler, FactoryHandler]


@dataclass(eq=False)
class HandlerDescriptor:
    """A registered handler.

    Attributes:
        event: Event kind the handler is registered for
        key_path: Path the handler was inserted at
        options: Validated handler options
        ioc: The handler instance or factory
    """

    event: DiscordEvent
    key_path: Tuple[str, ...]
    options: HandlerOptions
    ioc: HandlerIoc

    @property
    def name(self) -> str:
        return self.ioc.name


@dataclass
class HandlerInfo:
    """One filterable occurrence of an event.

    Attributes:
        handler_keys: Key path resolved against the handler tree
        is_direct_message: Whether the event originated in a DM
        member: Guild member that caused the event, for role checks
        content: Text content, for content pattern checks
    """

    handler_keys: List[str]
    is_direct_message: bool = False
    member: Optional[Any] = None
    content: Optional[str] = None

    @property
    def role_names(self) -> List[str]:
        roles = getattr(self.member, "roles", None) or []
        return [role.name for role in roles]


@dataclass(frozen=True)
class FilterResult:
    """Outcome of the filter pipeline for one candidate handler."""

    handler: HandlerDescriptor
    accepted: bool
    reason: Optional[HandlerRejectedReason] = None


@dataclass
class Timer:
    """A timer firing for the handler registered under its identifier."""

    handler_identifier: str
    data: Dict[str, Any] = field(default_factory=dict)
    execute_time: datetime = field(default_factory=datetime.now)
