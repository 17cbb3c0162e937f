"""Handler registry for registration and lookup.

Handlers are stored per event kind in a tree keyed by string segments. A
node is either a mapping from segment to child node or a terminal list of
handler descriptors. The empty segment is the wildcard: handlers registered
under it match any value at that position.
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from core.logging import get_module_logger
from event_distribution.exceptions import RegistrationError
from event_distribution.models import DiscordEvent, HandlerDescriptor

logger = get_module_logger()

WILDCARD = ""

HandlerNode = Any  # Dict[str, HandlerNode] | List[HandlerDescriptor]


class HandlerTree:
    """Tree of handlers for a single event kind.

    Example:
        tree = HandlerTree()
        tree.insert(["chat"], chat_handler)
        tree.insert([""], any_channel_handler)

        tree.lookup(["chat"])  # [chat_handler, any_channel_handler]
        tree.lookup(["memes"])  # [any_channel_handler]
    """

    def __init__(self) -> None:
        self._root: Dict[str, HandlerNode] = {}

    def __len__(self) -> int:
        return sum(len(handlers) for _, handlers in self.iter_handlers())

    def insert(self, key_path: Sequence[str], descriptor: HandlerDescriptor) -> None:
        """Append a handler to the terminal at key_path.

        Intermediate nodes are created as needed. Registering several
        handlers at the same path is allowed, they all fire.

        Args:
            key_path: Segments addressing the handler, "" for wildcard
            descriptor: Handler to add

        Raises:
            RegistrationError: If the path is empty or passes through an
                existing terminal, or ends at an existing branch
        """
        if not key_path:
            raise RegistrationError("Cannot register a handler at an empty key path")

        node: Dict[str, HandlerNode] = self._root
        for depth, key in enumerate(key_path[:-1]):
            child = node.setdefault(key, {})
            if isinstance(child, list):
                raise RegistrationError(
                    f"Key path {list(key_path)} conflicts with handlers registered "
                    f"at {list(key_path[: depth + 1])}"
                )
            node = child

        last = key_path[-1]
        terminal = node.setdefault(last, [])
        if not isinstance(terminal, list):
            raise RegistrationError(
                f"Key path {list(key_path)} is a prefix of already registered paths"
            )
        terminal.append(descriptor)

    def lookup(self, key_path: Sequence[str]) -> List[HandlerDescriptor]:
        """Find every handler matching key_path.

        At each level both the subtree for the literal key and the wildcard
        subtree are searched, in that order. Once the key path runs out,
        or when a key is empty, only the wildcard subtree is searched.

        Args:
            key_path: Concrete segments of an event occurrence

        Returns:
            Union of the handlers at every matching terminal
        """
        return self._collect(self._root, list(key_path))

    def _collect(
        self, node: Optional[HandlerNode], key_path: List[str]
    ) -> List[HandlerDescriptor]:
        if node is None:
            return []

        if isinstance(node, list):
            return list(node)

        current_key = key_path[0] if key_path else WILDCARD
        rest = key_path[1:]

        handlers: List[HandlerDescriptor] = []
        if current_key:
            handlers.extend(self._collect(node.get(current_key), rest))
        handlers.extend(self._collect(node.get(WILDCARD), rest))

        return handlers

    def iter_handlers(self) -> Iterator[Tuple[Tuple[str, ...], List[HandlerDescriptor]]]:
        """Yield (key_path, handlers) for every terminal in the tree."""
        stack: List[Tuple[Tuple[str, ...], HandlerNode]] = [((), self._root)]
        while stack:
            path, node = stack.pop()
            if isinstance(node, list):
                yield path, list(node)
                continue
            for key in sorted(node.keys(), reverse=True):
                stack.append((path + (key,), node[key]))


class HandlerRegistry:
    """Handler trees for every event kind.

    Owned by an EventDistribution. Trees are filled during startup and only
    the interaction command trees are replaced afterwards, once application
    commands have been synced.
    """

    def __init__(self) -> None:
        self._trees: Dict[DiscordEvent, HandlerTree] = {
            event: HandlerTree() for event in DiscordEvent
        }

    def insert(
        self,
        event: DiscordEvent,
        key_path: Sequence[str],
        descriptor: HandlerDescriptor,
    ) -> None:
        """Insert a handler into the tree of the given event kind.

        Args:
            event: Event kind
            key_path: Segments addressing the handler
            descriptor: Handler to add
        """
        self._trees[event].insert(key_path, descriptor)
        logger.debug(
            "handler_inserted",
            event_type=event.value,
            key_path=list(key_path),
            handler=descriptor.name,
        )

    def lookup(
        self, event: DiscordEvent, key_path: Sequence[str]
    ) -> List[HandlerDescriptor]:
        """Find handlers of the given event kind matching key_path."""
        return self._trees[event].lookup(key_path)

    def tree(self, event: DiscordEvent) -> HandlerTree:
        """Get the tree for an event kind."""
        return self._trees[event]

    def replace_tree(self, event: DiscordEvent, tree: HandlerTree) -> None:
        """Swap the tree of an event kind wholesale.

        Args:
            event: Event kind
            tree: New tree
        """
        self._trees[event] = tree
        logger.debug("handler_tree_replaced", event_type=event.value, handlers=len(tree))

    def handler_counts(self) -> Dict[str, int]:
        """Get the number of registered handlers per event kind."""
        return {event.value: len(tree) for event, tree in self._trees.items()}
