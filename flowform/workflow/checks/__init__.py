from flowform.workflow.checks.analyzer import WorkflowAnalyzer
from flowform.workflow.checks.diagnostics import render_diagnostic, render_diagnostics
from flowform.workflow.checks.models import AnalysisResult, CycleDetectionResult, GraphDiagnostic
from flowform.workflow.checks.passes import detect_cycles, find_orphaned_blocks, is_orphaned

__all__ = [
    "AnalysisResult",
    "CycleDetectionResult",
    "GraphDiagnostic",
    "WorkflowAnalyzer",
    "detect_cycles",
    "find_orphaned_blocks",
    "is_orphaned",
    "render_diagnostic",
    "render_diagnostics",
]
