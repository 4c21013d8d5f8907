from __future__ import annotations

from collections.abc import Sequence

from flowform.workflow.checks.models import GraphDiagnostic
from flowform.workflow.models import Block, Connection, sort_blocks


def is_orphaned(block_id: str, connections: Sequence[Connection]) -> bool:
    """A block with no incoming edge, no outgoing edge and no rule pointing at it."""
    for connection in connections:
        if connection.source_id == block_id or connection.default_target_id == block_id:
            return False
        if any(rule.target_block_id == block_id for rule in connection.rules):
            return False
    return True


def find_orphaned_blocks(blocks: Sequence[Block], connections: Sequence[Connection]) -> list[str]:
    if len(blocks) <= 1:
        return []
    return [block.id for block in blocks if is_orphaned(block.id, connections)]


def find_unreachable_blocks(blocks: Sequence[Block], connections: Sequence[Connection]) -> list[str]:
    ordered = sort_blocks(list(blocks))
    if not ordered:
        return []

    adjacency: dict[str, list[str]] = {block.id: [] for block in ordered}
    for connection in connections:
        if connection.source_id in adjacency:
            adjacency[connection.source_id].extend(connection.targets())

    reachable: set[str] = set()
    stack = [ordered[0].id]
    while stack:
        block_id = stack.pop()
        if block_id in reachable:
            continue
        reachable.add(block_id)
        targets = adjacency.get(block_id)
        if targets is None:
            continue
        if not targets:
            successor = _successor(block_id, ordered)
            if successor is not None:
                targets = [successor]
        for target in targets:
            if target not in reachable:
                stack.append(target)

    return [block.id for block in ordered if block.id not in reachable]


def run_orphan_pass(
    blocks: Sequence[Block],
    connections: Sequence[Connection],
) -> tuple[list[str], list[str], list[GraphDiagnostic]]:
    diagnostics: list[GraphDiagnostic] = []

    orphaned = find_orphaned_blocks(blocks, connections)
    for block_id in orphaned:
        diagnostics.append(
            GraphDiagnostic(
                code="BLOCK_ORPHANED",
                severity="warning",
                message="Block has no incoming or outgoing connections",
                block_id=block_id,
                hint="Connect it from another block or delete it.",
            )
        )

    unreachable = find_unreachable_blocks(blocks, connections)
    for block_id in unreachable:
        if block_id in orphaned:
            continue
        diagnostics.append(
            GraphDiagnostic(
                code="BLOCK_UNREACHABLE",
                severity="warning",
                message="Block is not reachable from the first block",
                block_id=block_id,
                hint="Add a connection or rule that leads to it.",
            )
        )

    return orphaned, unreachable, diagnostics


def _successor(block_id: str, ordered: list[Block]) -> str | None:
    for position, block in enumerate(ordered):
        if block.id == block_id and position + 1 < len(ordered):
            return ordered[position + 1].id
    return None
