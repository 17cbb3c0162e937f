"""Error telemetry plugin manager.

Handler failures without a configured user message are handed to every
registered ``capture_handler_exception`` hook implementation. Transports
(Sentry, a webhook, ...) ship as plugins registered through a setuptools
entry point group.

Example:
    # yesbot_sentry/__init__.py
    import sentry_sdk
    from event_distribution.hookspecs import hookimpl

    @hookimpl
    def capture_handler_exception(error, event, handler, args):
        sentry_sdk.capture_exception(error, extras={"event": event, "args": args})

    # pyproject.toml of the plugin
    [project.entry-points.yesbot_event_distribution]
    sentry = "yesbot_sentry"
"""

import json
from typing import Any, Optional, Sequence

import pluggy

from core.config import settings
from core.logging import get_module_logger
from event_distribution import hookspecs

logger = get_module_logger()


def create_telemetry_plugin_manager(
    entrypoint_group: Optional[str] = None,
) -> pluggy.PluginManager:
    """Create a plugin manager for error telemetry hooks.

    Args:
        entrypoint_group: Entry point group to load plugins from. Defaults
            to settings.distribution.TELEMETRY_ENTRYPOINT_GROUP, pass an
            empty string to skip entry point loading.

    Returns:
        PluginManager with the telemetry hooks registered
    """
    pm = pluggy.PluginManager(hookspecs.PROJECT_NAME)
    pm.add_hookspecs(hookspecs)

    group = (
        entrypoint_group
        if entrypoint_group is not None
        else settings.distribution.TELEMETRY_ENTRYPOINT_GROUP
    )
    if group:
        loaded = pm.load_setuptools_entrypoints(group)
        logger.debug("telemetry_plugins_loaded", group=group, plugin_count=loaded)

    return pm


def serialize_args(args: Sequence[Any]) -> str:
    """Serialize event arguments for offline inspection.

    Objects without a JSON representation are rendered with repr().
    """
    try:
        return json.dumps(list(args), indent=2, default=repr)
    except (TypeError, ValueError):
        return repr(args)
