"""Event distribution to registered feature handlers.

Resolves an incoming Discord event to the handlers registered for it, runs
the eligibility filters, executes every accepted handler once and turns
handler failures and filter rejections into user-facing replies where the
handler configured one.

Usage:

    distribution = EventDistribution()
    await distribution.initialize(command_sync=CommandSync.for_client(client))

    @client.event
    async def on_message(message):
        await distribution.handle_event(DiscordEvent.MESSAGE, message)
"""

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Type, Union

import pluggy

from core.config import settings
from core.logging import dispatch_context, get_module_logger
from event_distribution.discovery import discover_handler_modules
from event_distribution.events import extract_event_info, key_paths_for, reject_with_error
from event_distribution.exceptions import ErrorWithParams, format_error_text
from event_distribution.filters import filter_handlers
from event_distribution.interaction_router import InteractionRouter
from event_distribution.models import (
    CommandHandler,
    DiscordEvent,
    FactoryHandler,
    FilterResult,
    HandlerDescriptor,
    HandlerInfo,
    HandlerOptions,
    SingletonHandler,
    parse_handler_options,
)
from event_distribution.registry import HandlerRegistry
from event_distribution.telemetry import create_telemetry_plugin_manager, serialize_args

if TYPE_CHECKING:
    from event_distribution.commands import CommandSync
    from event_distribution.registration import HandlerCollection

logger = get_module_logger()

HandlerClassOrInstance = Union[Type[CommandHandler], CommandHandler]


class EventDistribution:
    """Routes Discord events to registered feature handlers.

    Owns the handler registry and the application command name to id map.
    Each dispatch is isolated: a failing handler never prevents other
    handlers or later dispatches from running.

    Attributes:
        registry: Handler trees per event kind
        telemetry: Plugin manager receiving unhandled handler failures
        interactions: Router for Discord interactions
    """

    def __init__(
        self,
        registry: Optional[HandlerRegistry] = None,
        telemetry: Optional[pluggy.PluginManager] = None,
    ) -> None:
        self.registry = registry or HandlerRegistry()
        self.telemetry = telemetry or create_telemetry_plugin_manager()
        self.interactions = InteractionRouter(self)
        self._name_id_map: Dict[str, str] = {}
        self._handlers_loaded = False
        self._initialized = False

    def _info_to_filter_results(
        self, info: HandlerInfo, event: DiscordEvent
    ) -> List[FilterResult]:
        handlers = self.registry.lookup(event, info.handler_keys)
        return filter_handlers(
            handlers, info.is_direct_message, info.role_names, info.content
        )

    async def handle_interaction(self, interaction: Any) -> None:
        """Dispatch a Discord interaction. See InteractionRouter."""
        await self.interactions.handle_interaction(interaction)

    async def handle_event(self, event: DiscordEvent, *args: Any) -> None:
        """Dispatch an event to every matching handler.

        Accepted handlers run one at a time in discovery order, each at most
        once even if several occurrences or key paths matched it. Afterwards
        rejected handlers that did not run and configured a message for
        their rejection reason get that message replied.

        Args:
            event: Event kind
            *args: Arguments as delivered by the Discord client, passed to
                handlers unmodified
        """
        with dispatch_context(event_type=event.value):
            await self._dispatch(event, args)

    async def _dispatch(self, event: DiscordEvent, args: Sequence[Any]) -> None:
        try:
            infos = extract_event_info(event, *args)
        except Exception as e:
            logger.error(
                "event_info_extraction_failed",
                error=str(e),
                exc_info=e,
            )
            return

        filter_results = [
            result
            for info in infos
            for result in self._info_to_filter_results(info, event)
        ]

        # Compared with `is`, handler instances need not be hashable
        completed: List[object] = []

        def is_completed(handler: HandlerDescriptor) -> bool:
            return any(identity is handler.ioc.identity for identity in completed)

        for handler in (r.handler for r in filter_results if r.accepted):
            if is_completed(handler):
                continue

            try:
                instance = handler.ioc.resolve()
                await instance.handle(*args)
            except Exception as e:
                await self._handle_failure(e, handler, event, args)

            completed.append(handler.ioc.identity)

        for result in filter_results:
            if result.accepted:
                continue

            handler = result.handler
            if is_completed(handler):
                continue

            text = handler.options.errors.get(result.reason.value)
            if text is None:
                continue

            await self._reject(text, event, args)
            completed.append(handler.ioc.identity)

        logger.debug(
            "event_dispatched",
            occurrences=len(infos),
            candidates=len(filter_results),
            executed=len(completed),
        )

    async def _handle_failure(
        self,
        error: Exception,
        handler: HandlerDescriptor,
        event: DiscordEvent,
        args: Sequence[Any],
    ) -> None:
        reason = error.message if isinstance(error, ErrorWithParams) else str(error)
        text = handler.options.errors.get(reason)

        if text is not None:
            params = error.params if isinstance(error, ErrorWithParams) else None
            await self._reject(format_error_text(text, params), event, args)
            return

        try:
            self.telemetry.hook.capture_handler_exception(
                error=error,
                event=event.value,
                handler=handler.name,
                args=serialize_args(args),
            )
        except Exception as e:
            logger.error("telemetry_capture_failed", error=str(e), exc_info=e)

        logger.error(
            "handler_failed",
            handler=handler.name,
            error=str(error),
            exc_info=error,
        )

    async def _reject(self, text: str, event: DiscordEvent, args: Sequence[Any]) -> None:
        try:
            await reject_with_error(text, event, *args)
        except Exception as e:
            logger.error(
                "rejection_reply_failed",
                text=text,
                error=str(e),
                exc_info=e,
            )

    def add_with_options(
        self,
        options: Union[HandlerOptions, Mapping[str, Any]],
        handler: HandlerClassOrInstance,
    ) -> List[HandlerDescriptor]:
        """Register a handler.

        Stateful handler classes are instantiated once and shared by every
        dispatch, other classes are instantiated per dispatch. Instances are
        always shared. A handler registered several times keeps one identity
        and still runs at most once per event.

        Args:
            options: Handler options, validated if given as a mapping
            handler: Handler class or instance

        Returns:
            The inserted descriptors, one per key path

        Raises:
            InvalidHandlerOptionsError: If the options are invalid
            RegistrationError: If a key path conflicts with the tree
        """
        if not isinstance(options, HandlerOptions):
            options = parse_handler_options(**options)

        if isinstance(handler, type):
            ioc = SingletonHandler(handler()) if options.stateful else FactoryHandler(handler)
        else:
            ioc = SingletonHandler(handler)

        descriptors = []
        for key_path in key_paths_for(options):
            descriptor = HandlerDescriptor(
                event=options.event,
                key_path=tuple(key_path),
                options=options,
                ioc=ioc,
            )
            self.registry.insert(options.event, key_path, descriptor)
            descriptors.append(descriptor)

        return descriptors

    async def initialize(
        self,
        command_sync: Optional["CommandSync"] = None,
        packages: Optional[List[str]] = None,
        collection: Optional["HandlerCollection"] = None,
    ) -> None:
        """Load all feature handlers and sync application commands.

        Must complete before any event is dispatched. Any failure is fatal:
        it is logged and re-raised. Handlers are registered only once, a
        retry after a failed command sync only syncs again. Calls after a
        successful initialization do nothing.

        Args:
            command_sync: Syncs the interaction command trees with Discord,
                skipped when None
            packages: Packages to import handlers from. Defaults to
                settings.distribution.HANDLER_PACKAGES
            collection: Collection the imported handlers declared themselves
                in. Defaults to the module-level collection
        """
        from event_distribution.registration import handlers as default_collection

        if self._initialized:
            logger.warning("already_initialized")
            return

        packages = packages if packages is not None else settings.distribution.HANDLER_PACKAGES
        collection = collection if collection is not None else default_collection

        if not self._handlers_loaded:
            try:
                discover_handler_modules(packages)
                collection.register_with(self)
            except Exception as e:
                logger.error("handler_loading_failed", error=str(e), exc_info=e)
                raise
            self._handlers_loaded = True
            logger.debug("handler_loading_complete")

        if command_sync is not None:
            try:
                result = await command_sync.sync(
                    self.registry.tree(DiscordEvent.SLASH_COMMAND),
                    self.registry.tree(DiscordEvent.CONTEXT_MENU_MESSAGE),
                    self.registry.tree(DiscordEvent.CONTEXT_MENU_USER),
                )
            except Exception as e:
                logger.error("command_sync_failed", error=str(e), exc_info=e)
                raise

            self._name_id_map = dict(result.name_id_map)
            self.registry.replace_tree(DiscordEvent.SLASH_COMMAND, result.slash_tree)
            self.registry.replace_tree(DiscordEvent.CONTEXT_MENU_MESSAGE, result.message_tree)
            self.registry.replace_tree(DiscordEvent.CONTEXT_MENU_USER, result.user_tree)

        self._initialized = True
        self.log_registered_handlers()

    def get_id_for_command_name(self, command_name: str) -> Optional[str]:
        """Get the id Discord assigned to a slash command.

        Args:
            command_name: Name the command was registered with

        Returns:
            The command id, or None if the command was never synced
        """
        return self._name_id_map.get(command_name)

    def log_registered_handlers(self) -> None:
        """Log the number of registered handlers per event kind."""
        counts = {k: v for k, v in self.registry.handler_counts().items() if v}
        if not counts:
            logger.warning("no_handlers_registered")
            return

        for event_type in sorted(counts):
            logger.info(
                "handlers_registered",
                event_type=event_type,
                handler_count=counts[event_type],
            )
