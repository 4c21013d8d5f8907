from __future__ import annotations

from collections.abc import Sequence

from flowform.workflow.checks.models import AnalysisResult, GraphDiagnostic
from flowform.workflow.checks.passes import (
    run_condition_pass,
    run_cycle_pass,
    run_orphan_pass,
    run_reference_pass,
)
from flowform.workflow.models import Block, Connection


class WorkflowAnalyzer:
    """Advisory static analysis over a block/connection snapshot."""

    def analyze(
        self,
        blocks: Sequence[Block],
        connections: Sequence[Connection],
    ) -> AnalysisResult:
        diagnostics: list[GraphDiagnostic] = []

        diagnostics.extend(run_reference_pass(blocks, connections))

        cycles, cycle_diags = run_cycle_pass(blocks, connections)
        diagnostics.extend(cycle_diags)

        orphaned, unreachable, orphan_diags = run_orphan_pass(blocks, connections)
        diagnostics.extend(orphan_diags)

        diagnostics.extend(run_condition_pass(blocks, connections))

        return AnalysisResult(
            ok=not any(item.severity == "error" for item in diagnostics),
            diagnostics=diagnostics,
            cycles=cycles,
            orphaned_block_ids=orphaned,
            unreachable_block_ids=unreachable,
        )
