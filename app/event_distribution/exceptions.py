"""Custom exceptions for the event distribution system.

Provides exceptions raised while registering handlers and syncing
application commands, plus the error type feature handlers raise to attach
parameters to a user-facing message.
"""

from typing import Any, Dict, Optional


class EventDistributionError(Exception):
    """Base exception for all event distribution errors.

    Example:
        try:
            await distribution.initialize()
        except EventDistributionError as e:
            logger.error("distribution_error", error=str(e))
    """

    pass


class RegistrationError(EventDistributionError):
    """Raised when a handler cannot be inserted into the handler tree.

    Example:
        >>> tree.insert(["chat"], descriptor)
        >>> tree.insert(["chat", "extra"], descriptor)
        Traceback (most recent call last):
        ...
        RegistrationError: Key path ['chat', 'extra'] conflicts with a registered path
    """

    pass


class InvalidHandlerOptionsError(RegistrationError):
    """Raised when handler options fail validation.

    Invalid content patterns are reported here at registration time instead
    of failing on the first dispatch.
    """

    def __init__(self, message: str, errors: Optional[list] = None):
        """Initialize with message and the underlying validation errors.

        Args:
            message: Error message
            errors: Validation error details (pydantic ``errors()`` output)
        """
        super().__init__(message)
        self.errors = errors or []


class CommandSyncError(EventDistributionError):
    """Raised when application commands cannot be synced with Discord."""

    pass


class ErrorWithParams(Exception):
    """Error raised by handlers to carry parameters into the reply text.

    The message is matched against the handler's ``errors`` map. When the
    mapped text contains ``{placeholders}``, they are filled from ``params``.

    Example:
        >>> raise ErrorWithParams("GROUP_NOT_FOUND", {"name": "gaming"})
        # errors={"GROUP_NOT_FOUND": "There is no group called {name}."}
    """

    def __init__(self, message: str, params: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.params = params or {}


class _KeepMissingParams(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def format_error_text(text: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Fill ``{placeholders}`` in a reply text from error parameters.

    Placeholders without a matching parameter are left as they are.

    Args:
        text: Reply text from a handler's ``errors`` map
        params: Parameters attached to the raised error

    Returns:
        The reply text with parameters substituted
    """
    if not params:
        return text
    try:
        return text.format_map(_KeepMissingParams(params))
    except (AttributeError, IndexError, KeyError, ValueError):
        return text
