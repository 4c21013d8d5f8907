from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from flowform.workflow.condition_fields import summarize_condition
from flowform.workflow.conditions import Answer, evaluate_condition_group
from flowform.workflow.models import (
    END_OF_FORM,
    Block,
    Connection,
    Rule,
    find_block_index,
    outgoing_connections,
    sort_blocks,
)


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class Resolution:
    index: int
    target_id: str | None
    reason: str
    connection_id: str | None = None

    @property
    def is_end(self) -> bool:
        return self.index == END_OF_FORM


def resolve(
    current_block: Block,
    answer: Answer,
    blocks: Sequence[Block],
    connections: Sequence[Connection],
) -> Resolution:
    block_list = list(blocks)
    outgoing = outgoing_connections(list(connections), current_block.id)

    if not outgoing:
        successor = _sequential_successor(current_block, block_list)
        if successor is None:
            LOGGER.debug("Block '%s' has no connections and no successor; form ends.", current_block.id)
            return Resolution(index=END_OF_FORM, target_id=None, reason="end")
        return Resolution(
            index=find_block_index(block_list, successor.id),
            target_id=successor.id,
            reason="sequential",
        )

    for connection in outgoing:
        for rule in connection.rules:
            if not evaluate_condition_group(rule.condition_group, answer, current_block.subtype, block_list):
                continue
            target_index = find_block_index(block_list, rule.target_block_id)
            if target_index == END_OF_FORM:
                LOGGER.warning(
                    "Rule '%s' on connection '%s' matched but target '%s' does not exist; continuing.",
                    rule.id,
                    connection.id,
                    rule.target_block_id,
                )
                continue
            return Resolution(
                index=target_index,
                target_id=rule.target_block_id,
                reason=_rule_reason(rule, current_block),
                connection_id=connection.id,
            )

        if connection.default_target_id is not None:
            target_index = find_block_index(block_list, connection.default_target_id)
            if target_index != END_OF_FORM:
                return Resolution(
                    index=target_index,
                    target_id=connection.default_target_id,
                    reason="default",
                    connection_id=connection.id,
                )
            LOGGER.warning(
                "Connection '%s' default target '%s' does not exist; continuing.",
                connection.id,
                connection.default_target_id,
            )

    LOGGER.debug("No connection from '%s' resolved; form ends.", current_block.id)
    return Resolution(index=END_OF_FORM, target_id=None, reason="end")


def resolve_next(
    current_block: Block,
    answer: Answer,
    blocks: Sequence[Block],
    connections: Sequence[Connection],
    *,
    trace: list[str] | None = None,
) -> int:
    """Return the index of the next block to show, or ``END_OF_FORM``."""
    resolution = resolve(current_block, answer, blocks, connections)
    if not resolution.is_end and trace is not None:
        trace.append(f"{current_block.id} -> {resolution.target_id} ({resolution.reason})")
    return resolution.index


class NextBlockResolver:
    """Resolver that keeps the advisory trace of every resolved hop."""

    def __init__(self) -> None:
        self._path: list[str] = []

    @property
    def navigation_path(self) -> list[str]:
        return list(self._path)

    def clear(self) -> None:
        self._path.clear()

    def resolve_next(
        self,
        current_block: Block,
        answer: Answer,
        blocks: Sequence[Block],
        connections: Sequence[Connection],
    ) -> int:
        return resolve_next(current_block, answer, blocks, connections, trace=self._path)


def _sequential_successor(current_block: Block, blocks: list[Block]) -> Block | None:
    ordered = sort_blocks(blocks)
    for position, block in enumerate(ordered):
        if block.id == current_block.id:
            if position + 1 < len(ordered):
                return ordered[position + 1]
            return None
    return None


def _rule_reason(rule: Rule, source_block: Block) -> str:
    group = rule.condition_group
    if not group.conditions:
        return "always"
    return f" {group.logical_operator} ".join(
        summarize_condition(condition, source_block) for condition in group.conditions
    )
