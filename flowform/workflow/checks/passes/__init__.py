from flowform.workflow.checks.passes.condition_pass import run_condition_pass
from flowform.workflow.checks.passes.cycle_pass import build_adjacency, detect_cycles, run_cycle_pass
from flowform.workflow.checks.passes.orphan_pass import (
    find_orphaned_blocks,
    find_unreachable_blocks,
    is_orphaned,
    run_orphan_pass,
)
from flowform.workflow.checks.passes.reference_pass import run_reference_pass

__all__ = [
    "build_adjacency",
    "detect_cycles",
    "find_orphaned_blocks",
    "find_unreachable_blocks",
    "is_orphaned",
    "run_condition_pass",
    "run_cycle_pass",
    "run_orphan_pass",
    "run_reference_pass",
]
