from __future__ import annotations

from collections.abc import Sequence

from flowform.workflow.checks.models import GraphDiagnostic
from flowform.workflow.models import EMPTY_TARGET, Block, Connection


def run_reference_pass(
    blocks: Sequence[Block],
    connections: Sequence[Connection],
) -> list[GraphDiagnostic]:
    diagnostics: list[GraphDiagnostic] = []

    block_ids: set[str] = set()
    for block in blocks:
        if block.id in block_ids:
            diagnostics.append(
                GraphDiagnostic(
                    code="DUPLICATE_BLOCK_ID",
                    severity="error",
                    message=f"Block id '{block.id}' is used more than once",
                    block_id=block.id,
                )
            )
        block_ids.add(block.id)

    for connection in connections:
        if connection.source_id not in block_ids:
            diagnostics.append(
                GraphDiagnostic(
                    code="CONNECTION_SOURCE_MISSING",
                    severity="error",
                    message=f"Connection source '{connection.source_id}' does not exist",
                    connection_id=connection.id,
                    hint="Run validation to prune connections left behind by removed blocks.",
                )
            )

        if connection.default_target_id is not None and connection.default_target_id not in block_ids:
            diagnostics.append(
                GraphDiagnostic(
                    code="CONNECTION_TARGET_MISSING",
                    severity="error",
                    message=f"Default target '{connection.default_target_id}' does not exist",
                    block_id=connection.source_id,
                    connection_id=connection.id,
                    hint="Run validation to prune connections left behind by removed blocks.",
                )
            )

        for rule in connection.rules:
            if rule.target_block_id == EMPTY_TARGET:
                diagnostics.append(
                    GraphDiagnostic(
                        code="RULE_TARGET_EMPTY",
                        severity="info",
                        message=f"Rule '{rule.id}' has no target yet",
                        block_id=connection.source_id,
                        connection_id=connection.id,
                    )
                )
            elif rule.target_block_id not in block_ids:
                diagnostics.append(
                    GraphDiagnostic(
                        code="RULE_TARGET_MISSING",
                        severity="warning",
                        message=f"Rule '{rule.id}' targets missing block '{rule.target_block_id}'",
                        block_id=connection.source_id,
                        connection_id=connection.id,
                        hint="The rule is skipped during navigation and pruned on validation.",
                    )
                )

    return diagnostics
