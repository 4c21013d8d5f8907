from __future__ import annotations

import logging
from collections.abc import Sequence

from flowform.workflow.checks.models import CycleDetectionResult, GraphDiagnostic
from flowform.workflow.models import Block, Connection


LOGGER = logging.getLogger(__name__)

# (target block id, connection id) pairs per source block.
Adjacency = dict[str, list[tuple[str, str]]]


def build_adjacency(blocks: Sequence[Block], connections: Sequence[Connection]) -> Adjacency:
    adjacency: Adjacency = {block.id: [] for block in blocks}
    for connection in connections:
        edges = adjacency.get(connection.source_id)
        if edges is None:
            continue
        if connection.default_target_id:
            edges.append((connection.default_target_id, connection.id))
        for rule in connection.rules:
            if rule.target_block_id:
                edges.append((rule.target_block_id, connection.id))
    return adjacency


def detect_cycles(blocks: Sequence[Block], connections: Sequence[Connection]) -> CycleDetectionResult:
    """Flag every connection that takes part in at least one cycle.

    Edges come from both default targets and rule targets, so a connection
    can be flagged through either path. A cycle is reported, never raised.
    """
    adjacency = build_adjacency(blocks, connections)
    result = CycleDetectionResult()
    explored: set[str] = set()

    def _visit(block_id: str, path: list[str], path_set: set[str], path_edges: list[str]) -> None:
        path.append(block_id)
        path_set.add(block_id)

        for target_id, connection_id in adjacency.get(block_id, []):
            if target_id in path_set:
                result.has_cycles = True
                result.cycle_connections[connection_id] = True
                # path_edges[i] leads from path[i] to path[i + 1].
                for edge_id in path_edges[path.index(target_id):]:
                    result.cycle_connections[edge_id] = True
                LOGGER.debug("Cycle closes at %s -> %s via %s", block_id, target_id, connection_id)
                continue

            if target_id in explored:
                continue

            path_edges.append(connection_id)
            _visit(target_id, path, path_set, path_edges)
            path_edges.pop()

        path.pop()
        path_set.discard(block_id)
        explored.add(block_id)

    for block in blocks:
        if block.id not in explored:
            _visit(block.id, [], set(), [])

    if result.has_cycles:
        LOGGER.info("Cycle detection flagged %d connection(s).", len(result.cycle_connections))
    return result


def run_cycle_pass(
    blocks: Sequence[Block],
    connections: Sequence[Connection],
) -> tuple[CycleDetectionResult, list[GraphDiagnostic]]:
    result = detect_cycles(blocks, connections)
    diagnostics: list[GraphDiagnostic] = []
    sources = {connection.id: connection.source_id for connection in connections}

    for connection_id in sorted(result.cycle_connections):
        diagnostics.append(
            GraphDiagnostic(
                code="WORKFLOW_LOOP_DETECTED",
                severity="warning",
                message="Connection takes part in a cycle",
                block_id=sources.get(connection_id),
                connection_id=connection_id,
                hint="Make sure respondents can leave the loop through a rule or default target.",
            )
        )

    return result, diagnostics
