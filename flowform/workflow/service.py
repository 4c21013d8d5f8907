from __future__ import annotations

import dataclasses
import logging
import uuid
from collections.abc import Sequence
from typing import Any

from flowform.workflow.checks import AnalysisResult, CycleDetectionResult, WorkflowAnalyzer, detect_cycles
from flowform.workflow.conditions import Answer
from flowform.workflow.hooks import WorkflowHookRegistry
from flowform.workflow.layout import (
    DEFAULT_HORIZONTAL_SPACING,
    DEFAULT_ORIGIN,
    DEFAULT_VERTICAL_SPACING,
    Position,
    compute_layout,
)
from flowform.workflow.models import Block, Connection, Rule, sort_blocks
from flowform.workflow.resolver import resolve_next
from flowform.workflow.schema import dump_workflow_definition
from flowform.workflow.session import NavigationSession
from flowform.workflow.synchronizer import GraphSynchronizer, RetargetResult, SyncEvent


LOGGER = logging.getLogger(__name__)


class WorkflowGraphError(RuntimeError):
    """Raised when an editor mutation references a block or connection that does not exist."""


class WorkflowGraphService:
    """Owns one editor's snapshot of blocks and connections.

    Mutations go through the synchronizer and validation pass, then cycle
    detection is re-run eagerly.
    """

    def __init__(
        self,
        blocks: Sequence[Block] | None = None,
        connections: Sequence[Connection] | None = None,
        *,
        synchronizer: GraphSynchronizer | None = None,
        analyzer: WorkflowAnalyzer | None = None,
        hook_registry: WorkflowHookRegistry | None = None,
        horizontal_spacing: float = DEFAULT_HORIZONTAL_SPACING,
        vertical_spacing: float = DEFAULT_VERTICAL_SPACING,
        layout_origin: float = DEFAULT_ORIGIN,
    ) -> None:
        self._synchronizer = synchronizer or GraphSynchronizer()
        self._analyzer = analyzer or WorkflowAnalyzer()
        self._hooks = hook_registry or WorkflowHookRegistry()
        self._horizontal_spacing = horizontal_spacing
        self._vertical_spacing = vertical_spacing
        self._layout_origin = layout_origin

        self.blocks: list[Block] = sort_blocks(list(blocks or []))
        self.connections: list[Connection] = self._synchronizer.validate(self.blocks, list(connections or []))
        self.node_positions: dict[str, Position] = {}
        self.cycles: CycleDetectionResult = detect_cycles(self.blocks, self.connections)

    @property
    def hooks(self) -> WorkflowHookRegistry:
        return self._hooks

    def get_block(self, block_id: str) -> Block:
        for block in self.blocks:
            if block.id == block_id:
                return block
        raise WorkflowGraphError(f"Block '{block_id}' does not exist.")

    def get_connection(self, connection_id: str) -> Connection:
        for connection in self.connections:
            if connection.id == connection_id:
                return connection
        raise WorkflowGraphError(f"Connection '{connection_id}' does not exist.")

    def add_block(self, block: Block, *, position: int | None = None) -> Block:
        if any(existing.id == block.id for existing in self.blocks):
            raise WorkflowGraphError(f"Block '{block.id}' already exists.")

        ordered = list(self.blocks)
        insert_at = len(ordered) if position is None else max(0, min(position, len(ordered)))
        ordered.insert(insert_at, block)
        self.blocks = _renumber(ordered)

        self._apply_event(SyncEvent(kind="block_added", block_id=block.id))
        self._hooks.emit("block_added", {"block_id": block.id, "order_index": insert_at})
        return self.get_block(block.id)

    def remove_block(self, block_id: str) -> None:
        self.get_block(block_id)
        self.blocks = _renumber([block for block in self.blocks if block.id != block_id])
        self.node_positions.pop(block_id, None)

        self._apply_event(SyncEvent(kind="block_removed", block_id=block_id))
        self._hooks.emit("block_removed", {"block_id": block_id})

    def reorder_blocks(self, start_index: int, end_index: int) -> None:
        ordered = list(self.blocks)
        if not 0 <= start_index < len(ordered):
            raise WorkflowGraphError(f"Reorder start index {start_index} is out of range.")
        moved = ordered.pop(start_index)
        ordered.insert(max(0, min(end_index, len(ordered))), moved)
        self.blocks = _renumber(ordered)

        self._apply_event(SyncEvent(kind="blocks_reordered"))
        self._hooks.emit(
            "blocks_reordered",
            {"block_id": moved.id, "start_index": start_index, "end_index": end_index},
        )

    def add_connection(
        self,
        source_id: str,
        default_target_id: str | None,
        *,
        rules: Sequence[Rule] | None = None,
        is_explicit: bool = True,
    ) -> Connection:
        self.get_block(source_id)
        if default_target_id is not None:
            self.get_block(default_target_id)

        connection = Connection(
            id=str(uuid.uuid4()),
            source_id=source_id,
            default_target_id=default_target_id,
            rules=list(rules or []),
            order_index=len(self.connections),
            is_explicit=is_explicit,
        )
        self._set_connections([*self.connections, connection])
        return connection

    def update_connection(self, connection_id: str, **changes: Any) -> Connection:
        """Apply field changes to a connection; an edited connection becomes explicit."""
        current = self.get_connection(connection_id)
        changes.setdefault("is_explicit", True)
        updated = dataclasses.replace(current, **changes)
        self._set_connections(
            [updated if item.id == connection_id else item for item in self.connections]
        )
        return self.get_connection(connection_id)

    def retarget_connection(
        self,
        connection_id: str,
        new_target_id: str | None,
        *,
        force: bool = False,
    ) -> RetargetResult:
        self.get_connection(connection_id)
        if new_target_id is not None:
            self.get_block(new_target_id)

        result = self._synchronizer.retarget(connection_id, new_target_id, self.connections, force=force)
        if not result.applied:
            conflict = result.conflict
            self._hooks.emit(
                "orphan_conflict",
                {
                    "old_target_id": conflict.old_target_id if conflict else None,
                    "connection_id": connection_id,
                    "new_target_id": new_target_id,
                },
            )
            return result

        self._set_connections(
            [
                dataclasses.replace(item, is_explicit=True) if item.id == connection_id else item
                for item in result.connections
            ]
        )
        result.connections = list(self.connections)
        return result

    def resolve_next(self, block: Block, answer: Answer, *, trace: list[str] | None = None) -> int:
        return resolve_next(block, answer, self.blocks, self.connections, trace=trace)

    def detect_cycles(self) -> CycleDetectionResult:
        self.cycles = detect_cycles(self.blocks, self.connections)
        return self.cycles

    def analyze(self) -> AnalysisResult:
        return self._analyzer.analyze(self.blocks, self.connections)

    def compute_layout(self) -> dict[str, Position]:
        self.node_positions = compute_layout(
            self.blocks,
            self.connections,
            horizontal_spacing=self._horizontal_spacing,
            vertical_spacing=self._vertical_spacing,
            origin=self._layout_origin,
        )
        return dict(self.node_positions)

    def start_session(self, *, initial_index: int = 0) -> NavigationSession:
        return NavigationSession(self.blocks, self.connections, initial_index=initial_index)

    def snapshot(self) -> dict[str, Any]:
        payload = dump_workflow_definition(self.blocks, self.connections)
        payload["node_positions"] = {key: dict(value) for key, value in self.node_positions.items()}
        return payload

    def _apply_event(self, event: SyncEvent) -> None:
        self._set_connections(self._synchronizer.synchronize(event, self.blocks, self.connections))

    def _set_connections(self, connections: list[Connection]) -> None:
        self.connections = self._synchronizer.validate(self.blocks, connections)
        self.detect_cycles()
        self._hooks.emit(
            "connections_changed",
            {
                "connection_count": len(self.connections),
                "has_cycles": self.cycles.has_cycles,
            },
        )
        LOGGER.debug(
            "Connections updated: %d connection(s), cycles=%s",
            len(self.connections),
            self.cycles.has_cycles,
        )


def _renumber(blocks: list[Block]) -> list[Block]:
    return [dataclasses.replace(block, order_index=index) for index, block in enumerate(blocks)]
