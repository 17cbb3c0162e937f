"""Hook specifications for error telemetry."""

import pluggy

PROJECT_NAME = "yesbot"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


@hookspec
def capture_handler_exception(
    error: BaseException, event: str, handler: str, args: str
) -> None:
    """Report a handler failure that has no user-facing message.

    Args:
        error: The exception raised by the handler.
        event: Event kind the handler was dispatched for.
        handler: Name of the failing handler.
        args: The event arguments serialized as JSON.
    """
