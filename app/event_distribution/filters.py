"""Eligibility filters for matched handlers.

Each candidate handler passes through the location, role and content checks
in that order. The first failing check decides the rejection reason and
later checks are skipped. Handlers whose event kind has no notion of
location, roles or content pass every check.
"""

from typing import List, Optional, Sequence

from event_distribution.models import (
    EventLocation,
    FilterResult,
    HandlerDescriptor,
    HandlerRejectedReason,
    is_message_related,
)


def is_handler_for_location(
    handler: HandlerDescriptor, is_direct_message: bool
) -> bool:
    """Check the handler's allowed location against the event's origin."""
    if not is_message_related(handler.options):
        return True

    location = handler.options.location
    if location == EventLocation.ANYWHERE:
        return True
    if location == EventLocation.DIRECT_MESSAGE:
        return is_direct_message
    if location == EventLocation.SERVER:
        return not is_direct_message

    return False


def is_handler_for_role(handler: HandlerDescriptor, role_names: Sequence[str]) -> bool:
    """Check that the member holds one of the handler's allowed roles.

    An empty allow-list places no constraint.
    """
    if not is_message_related(handler.options):
        return True

    allowed_roles = handler.options.allowed_roles
    return not allowed_roles or any(role in role_names for role in allowed_roles)


def matches_content_regex(handler: HandlerDescriptor, content: Optional[str]) -> bool:
    """Check the event content against the handler's content pattern.

    A handler without a pattern always matches, a handler with a pattern
    never matches an event without content.
    """
    if not is_message_related(handler.options) or handler.options.content_regex is None:
        return True
    if content is None:
        return False

    return handler.options.content_regex.search(content) is not None


def filter_handler(
    handler: HandlerDescriptor,
    is_direct_message: bool,
    role_names: Sequence[str],
    content: Optional[str],
) -> FilterResult:
    """Run the filter pipeline for a single handler."""
    if not is_handler_for_location(handler, is_direct_message):
        return FilterResult(handler, False, HandlerRejectedReason.WRONG_LOCATION)
    if not is_handler_for_role(handler, role_names):
        return FilterResult(handler, False, HandlerRejectedReason.MISSING_ROLE)
    if not matches_content_regex(handler, content):
        return FilterResult(handler, False, HandlerRejectedReason.DOESNT_MATCH_REGEX)

    return FilterResult(handler, True)


def filter_handlers(
    handlers: Sequence[HandlerDescriptor],
    is_direct_message: bool,
    role_names: Sequence[str],
    content: Optional[str],
) -> List[FilterResult]:
    """Run the filter pipeline for every handler.

    Args:
        handlers: Candidate handlers in discovery order
        is_direct_message: Whether the event originated in a DM
        role_names: Role names of the member that caused the event
        content: Text content of the event, None if it has none

    Returns:
        One FilterResult per handler, in input order
    """
    return [
        filter_handler(handler, is_direct_message, role_names, content)
        for handler in handlers
    ]
