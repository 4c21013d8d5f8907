from __future__ import annotations

import dataclasses
import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from flowform.workflow.checks.passes.orphan_pass import is_orphaned
from flowform.workflow.models import EMPTY_TARGET, Block, Connection, sort_blocks


LOGGER = logging.getLogger(__name__)

SyncEventKind = Literal["block_added", "block_removed", "blocks_reordered"]


@dataclass(slots=True)
class SyncEvent:
    kind: SyncEventKind
    block_id: str | None = None


@dataclass(slots=True)
class OrphanConflict:
    old_target_id: str
    connection_id: str
    new_target_id: str | None


@dataclass(slots=True)
class RetargetResult:
    applied: bool
    connections: list[Connection] = field(default_factory=list)
    conflict: OrphanConflict | None = None


class GraphSynchronizer:
    """Keeps connections well-formed while an editor adds, removes and reorders blocks.

    Every method returns a fresh connection list. Auto-generated connections
    carry ``is_explicit=False`` and may be replaced; explicit ones are left
    untouched.
    """

    def synchronize(
        self,
        event: SyncEvent,
        blocks: Sequence[Block],
        connections: Sequence[Connection],
    ) -> list[Connection]:
        if event.kind == "block_added":
            if event.block_id is None:
                raise ValueError("block_added events require a block_id.")
            updated = self.on_block_added(event.block_id, blocks, connections)
        elif event.kind == "block_removed":
            if event.block_id is None:
                raise ValueError("block_removed events require a block_id.")
            updated = self.on_block_removed(event.block_id, connections)
        elif event.kind == "blocks_reordered":
            updated = self.on_blocks_reordered(blocks, connections)
        else:
            raise ValueError(f"Unsupported synchronization event '{event.kind}'.")

        return self.validate(blocks, updated)

    def on_block_added(
        self,
        block_id: str,
        blocks: Sequence[Block],
        connections: Sequence[Connection],
    ) -> list[Connection]:
        updated = list(connections)
        ordered = sort_blocks(list(blocks))
        position = next((index for index, block in enumerate(ordered) if block.id == block_id), -1)
        if position == -1:
            LOGGER.warning("Added block '%s' is not in the block list; nothing to connect.", block_id)
            return updated

        created: list[Connection] = []

        if position > 0 and not _has_incoming(block_id, updated):
            predecessor = ordered[position - 1]
            if not _has_outgoing(predecessor.id, updated):
                created.append(_auto_connection(predecessor.id, block_id, len(updated) + len(created)))

        if position < len(ordered) - 1 and not _has_outgoing(block_id, updated):
            successor = ordered[position + 1]
            created.append(_auto_connection(block_id, successor.id, len(updated) + len(created)))

        for connection in created:
            LOGGER.debug(
                "Auto-connected %s -> %s for added block.",
                connection.source_id,
                connection.default_target_id,
            )
        return updated + created

    def on_block_removed(self, block_id: str, connections: Sequence[Connection]) -> list[Connection]:
        updated: list[Connection] = []
        for connection in connections:
            if connection.source_id == block_id or connection.default_target_id == block_id:
                continue
            rules = [rule for rule in connection.rules if rule.target_block_id != block_id]
            if len(rules) != len(connection.rules):
                connection = dataclasses.replace(connection, rules=rules)
            updated.append(connection)

        LOGGER.debug(
            "Removed block '%s': %d connection(s) remain of %d.",
            block_id,
            len(updated),
            len(connections),
        )
        return updated

    def on_blocks_reordered(
        self,
        blocks: Sequence[Block],
        connections: Sequence[Connection],
    ) -> list[Connection]:
        ordered = sort_blocks(list(blocks))
        block_ids = {block.id for block in ordered}

        updated = [
            connection
            for connection in connections
            if not _is_replaceable_auto_connection(connection, block_ids)
        ]

        created: list[Connection] = []
        for predecessor, successor in zip(ordered, ordered[1:]):
            current = updated + created
            already_linked = any(
                connection.source_id == predecessor.id and connection.default_target_id == successor.id
                for connection in current
            )
            if already_linked or _has_outgoing(predecessor.id, current):
                continue
            created.append(_auto_connection(predecessor.id, successor.id, len(current)))

        LOGGER.debug(
            "Reorder sync kept %d connection(s) and created %d sequential connection(s).",
            len(updated),
            len(created),
        )
        return updated + created

    def validate(self, blocks: Sequence[Block], connections: Sequence[Connection]) -> list[Connection]:
        block_ids = {block.id for block in blocks}
        validated: list[Connection] = []
        dropped_rules = 0

        for connection in connections:
            if connection.source_id not in block_ids:
                LOGGER.warning("Dropping connection '%s': source '%s' is gone.", connection.id, connection.source_id)
                continue
            if connection.default_target_id is not None and connection.default_target_id not in block_ids:
                LOGGER.warning(
                    "Dropping connection '%s': default target '%s' is gone.",
                    connection.id,
                    connection.default_target_id,
                )
                continue

            rules = [
                rule
                for rule in connection.rules
                if rule.target_block_id == EMPTY_TARGET or rule.target_block_id in block_ids
            ]
            if len(rules) != len(connection.rules):
                dropped_rules += len(connection.rules) - len(rules)
                connection = dataclasses.replace(connection, rules=rules)
            validated.append(connection)

        if dropped_rules:
            LOGGER.warning("Dropped %d rule(s) with missing targets.", dropped_rules)
        return validated

    def retarget(
        self,
        connection_id: str,
        new_target_id: str | None,
        connections: Sequence[Connection],
        *,
        force: bool = False,
    ) -> RetargetResult:
        existing = next((item for item in connections if item.id == connection_id), None)
        if existing is None:
            raise KeyError(f"Connection '{connection_id}' does not exist.")

        updated = [
            dataclasses.replace(item, default_target_id=new_target_id) if item.id == connection_id else item
            for item in connections
        ]

        old_target_id = existing.default_target_id
        if force or old_target_id is None or old_target_id == new_target_id:
            return RetargetResult(applied=True, connections=updated)

        if is_orphaned(old_target_id, updated):
            conflict = OrphanConflict(
                old_target_id=old_target_id,
                connection_id=connection_id,
                new_target_id=new_target_id,
            )
            LOGGER.info(
                "Rejected retarget of '%s' to '%s': block '%s' would be orphaned.",
                connection_id,
                new_target_id,
                old_target_id,
            )
            return RetargetResult(applied=False, connections=list(connections), conflict=conflict)

        return RetargetResult(applied=True, connections=updated)


def _auto_connection(source_id: str, target_id: str, order_index: int) -> Connection:
    return Connection(
        id=str(uuid.uuid4()),
        source_id=source_id,
        default_target_id=target_id,
        rules=[],
        order_index=order_index,
        is_explicit=False,
    )


def _has_outgoing(block_id: str, connections: Sequence[Connection]) -> bool:
    return any(connection.source_id == block_id for connection in connections)


def _has_incoming(block_id: str, connections: Sequence[Connection]) -> bool:
    for connection in connections:
        if connection.default_target_id == block_id:
            return True
        if any(rule.target_block_id == block_id for rule in connection.rules):
            return True
    return False


def _is_replaceable_auto_connection(connection: Connection, block_ids: set[str]) -> bool:
    if connection.is_explicit or connection.rules:
        return False
    return connection.source_id in block_ids and connection.default_target_id in block_ids
