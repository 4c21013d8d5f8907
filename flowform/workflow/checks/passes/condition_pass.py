from __future__ import annotations

from collections.abc import Sequence

from flowform.workflow.checks.models import GraphDiagnostic
from flowform.workflow.condition_fields import summarize_condition, validate_condition
from flowform.workflow.models import Block, Connection


def run_condition_pass(
    blocks: Sequence[Block],
    connections: Sequence[Connection],
) -> list[GraphDiagnostic]:
    diagnostics: list[GraphDiagnostic] = []
    block_map = {block.id: block for block in blocks}

    for connection in connections:
        source_block = block_map.get(connection.source_id)
        if source_block is None:
            continue

        for rule in connection.rules:
            for condition in rule.condition_group.conditions:
                if validate_condition(condition, source_block):
                    continue
                diagnostics.append(
                    GraphDiagnostic(
                        code="CONDITION_INVALID",
                        severity="warning",
                        message=(
                            f"Rule '{rule.id}' condition '{summarize_condition(condition, source_block)}' "
                            f"does not fit a {source_block.subtype} block"
                        ),
                        block_id=source_block.id,
                        connection_id=connection.id,
                        hint="Conditions that cannot be evaluated let respondents through.",
                    )
                )

        if connection.rules and connection.default_target_id is None:
            diagnostics.append(
                GraphDiagnostic(
                    code="CONNECTION_DEAD_END",
                    severity="info",
                    message="Connection has rules but no default target; the form ends when no rule matches",
                    block_id=source_block.id,
                    connection_id=connection.id,
                )
            )

    return diagnostics
