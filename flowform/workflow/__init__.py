from flowform.workflow.checks import (
    AnalysisResult,
    CycleDetectionResult,
    GraphDiagnostic,
    WorkflowAnalyzer,
    detect_cycles,
    find_orphaned_blocks,
    is_orphaned,
    render_diagnostic,
    render_diagnostics,
)
from flowform.workflow.conditions import evaluate_condition, evaluate_condition_group
from flowform.workflow.hooks import DEFAULT_HOOK_EVENTS, HookInvocation, WorkflowHookRegistry
from flowform.workflow.layout import compute_layout
from flowform.workflow.models import (
    END_OF_FORM,
    Block,
    ChoiceOption,
    ConditionGroup,
    ConditionRule,
    Connection,
    Rule,
)
from flowform.workflow.resolver import NextBlockResolver, Resolution, resolve, resolve_next
from flowform.workflow.schema import (
    WorkflowValidationError,
    dump_workflow_definition,
    load_workflow_definition,
    validate_workflow_definition,
    validate_workflow_or_raise,
)
from flowform.workflow.service import WorkflowGraphError, WorkflowGraphService
from flowform.workflow.session import NavigationSession
from flowform.workflow.synchronizer import GraphSynchronizer, OrphanConflict, RetargetResult, SyncEvent

__all__ = [
    "DEFAULT_HOOK_EVENTS",
    "END_OF_FORM",
    "AnalysisResult",
    "Block",
    "ChoiceOption",
    "ConditionGroup",
    "ConditionRule",
    "Connection",
    "CycleDetectionResult",
    "GraphDiagnostic",
    "GraphSynchronizer",
    "HookInvocation",
    "NavigationSession",
    "NextBlockResolver",
    "OrphanConflict",
    "Resolution",
    "RetargetResult",
    "Rule",
    "SyncEvent",
    "WorkflowAnalyzer",
    "WorkflowGraphError",
    "WorkflowGraphService",
    "WorkflowHookRegistry",
    "WorkflowValidationError",
    "compute_layout",
    "detect_cycles",
    "dump_workflow_definition",
    "evaluate_condition",
    "evaluate_condition_group",
    "find_orphaned_blocks",
    "is_orphaned",
    "load_workflow_definition",
    "render_diagnostic",
    "render_diagnostics",
    "resolve",
    "resolve_next",
    "validate_workflow_definition",
    "validate_workflow_or_raise",
]
