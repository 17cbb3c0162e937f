"""Application command sync.

Builds Discord application command payloads from the slash command and
context menu handler trees, bulk upserts them and rebuilds the trees keyed
by the command ids Discord assigned, since interactions only carry the id.

Usage:

    sync = CommandSync.for_client(client)
    result = await sync.sync(slash_tree, message_tree, user_tree)
    result.name_id_map  # {"ping": "1093847561234"}
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import discord

from core.config import settings
from core.logging import get_module_logger
from event_distribution.exceptions import CommandSyncError
from event_distribution.models import HandlerDescriptor, SlashCommandOptionType
from event_distribution.registry import HandlerTree

logger = get_module_logger()

SLASH_COMMAND_TYPE = 1
USER_COMMAND_TYPE = 2
MESSAGE_COMMAND_TYPE = 3

CommandUpsert = Callable[[List[Dict[str, Any]]], Awaitable[List[Dict[str, Any]]]]


@dataclass
class CommandSyncResult:
    """Handler trees keyed by command id, plus the name to id map."""

    slash_tree: HandlerTree
    message_tree: HandlerTree
    user_tree: HandlerTree
    name_id_map: Dict[str, str] = field(default_factory=dict)


def _leaf_payload(name: str, descriptor: HandlerDescriptor, option_type: int) -> Dict[str, Any]:
    options = descriptor.options
    return {
        "type": option_type,
        "name": name,
        "description": options.description,
        "options": [o.to_payload() for o in options.options],
    }


def _slash_command_payload(
    name: str, leaves: List[Tuple[Tuple[str, ...], HandlerDescriptor]]
) -> Dict[str, Any]:
    top_level = [d for path, d in leaves if not path[1] and not path[2]]
    nested = [(path, d) for path, d in leaves if path[1] or path[2]]

    if top_level and nested:
        raise CommandSyncError(
            f"Command '{name}' cannot have both its own options and subcommands"
        )

    if top_level:
        return _leaf_payload(name, top_level[0], SLASH_COMMAND_TYPE)

    options: List[Dict[str, Any]] = []
    groups: Dict[str, Dict[str, Any]] = {}
    for (_, group, subcommand), descriptor in nested:
        leaf = _leaf_payload(subcommand, descriptor, int(SlashCommandOptionType.SUB_COMMAND))
        if not group:
            options.append(leaf)
            continue
        if group not in groups:
            groups[group] = {
                "type": int(SlashCommandOptionType.SUB_COMMAND_GROUP),
                "name": group,
                "description": group,
                "options": [],
            }
            options.append(groups[group])
        groups[group]["options"].append(leaf)

    description = next((d.options.description for _, d in nested if d.options.description), name)
    return {
        "type": SLASH_COMMAND_TYPE,
        "name": name,
        "description": description,
        "options": options,
    }


def build_payload(
    slash_tree: HandlerTree, message_tree: HandlerTree, user_tree: HandlerTree
) -> List[Dict[str, Any]]:
    """Build the bulk upsert payload for every registered command.

    Several handlers at one path share a command, the first one's options
    define it.

    Raises:
        CommandSyncError: If a command mixes top-level options with
            subcommands
    """
    by_name: Dict[str, List[Tuple[Tuple[str, ...], HandlerDescriptor]]] = {}
    for path, descriptors in slash_tree.iter_handlers():
        by_name.setdefault(path[0], []).append((path, descriptors[0]))

    payload = [_slash_command_payload(name, leaves) for name, leaves in by_name.items()]

    for command_type, tree in ((MESSAGE_COMMAND_TYPE, message_tree), (USER_COMMAND_TYPE, user_tree)):
        for path, _ in tree.iter_handlers():
            payload.append({"type": command_type, "name": path[0]})

    return payload


class CommandSync:
    """Syncs application commands through a bulk upsert callable.

    Attributes:
        upsert: Coroutine taking the command payload list and returning the
            created commands as Discord returns them
    """

    def __init__(self, upsert: CommandUpsert) -> None:
        self.upsert = upsert

    @classmethod
    def for_client(
        cls, client: discord.Client, guild_id: Optional[str] = None
    ) -> "CommandSync":
        """Create a sync upserting through a logged in client.

        Args:
            client: Connected Discord client
            guild_id: Guild to register commands in. Defaults to
                settings.discord.GUILD_ID, global registration when unset.
        """
        guild_id = guild_id if guild_id is not None else settings.discord.GUILD_ID

        async def upsert(payload: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            if guild_id:
                return await client.http.bulk_upsert_guild_commands(
                    client.application_id, guild_id, payload
                )
            return await client.http.bulk_upsert_global_commands(client.application_id, payload)

        return cls(upsert)

    async def sync(
        self, slash_tree: HandlerTree, message_tree: HandlerTree, user_tree: HandlerTree
    ) -> CommandSyncResult:
        """Register every command and rebuild the trees keyed by command id.

        Raises:
            CommandSyncError: If the payload cannot be built, the upsert
                fails or a command is missing from the response
        """
        payload = build_payload(slash_tree, message_tree, user_tree)

        try:
            created = await self.upsert(payload)
        except Exception as e:
            raise CommandSyncError(f"Failed to register application commands: {e}") from e

        ids: Dict[Tuple[int, str], str] = {
            (int(c.get("type", SLASH_COMMAND_TYPE)), c["name"]): str(c["id"]) for c in created
        }
        logger.info("application_commands_synced", command_count=len(ids))

        result = CommandSyncResult(
            slash_tree=self._rekey(slash_tree, SLASH_COMMAND_TYPE, ids),
            message_tree=self._rekey(message_tree, MESSAGE_COMMAND_TYPE, ids),
            user_tree=self._rekey(user_tree, USER_COMMAND_TYPE, ids),
        )
        result.name_id_map = {
            name: command_id
            for (command_type, name), command_id in ids.items()
            if command_type == SLASH_COMMAND_TYPE
        }
        return result

    @staticmethod
    def _rekey(
        tree: HandlerTree, command_type: int, ids: Dict[Tuple[int, str], str]
    ) -> HandlerTree:
        rekeyed = HandlerTree()
        for path, descriptors in tree.iter_handlers():
            command_id = ids.get((command_type, path[0]))
            if command_id is None:
                raise CommandSyncError(f"Command '{path[0]}' missing from sync response")
            new_path = (command_id,) + path[1:]
            for descriptor in descriptors:
                rekeyed.insert(new_path, dataclasses.replace(descriptor, key_path=new_path))
        return rekeyed
