from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


DiagnosticSeverity = Literal["error", "warning", "info"]


@dataclass(slots=True)
class GraphDiagnostic:
    code: str
    severity: DiagnosticSeverity
    message: str
    block_id: str | None = None
    connection_id: str | None = None
    hint: str | None = None


@dataclass(slots=True)
class CycleDetectionResult:
    cycle_connections: dict[str, bool] = field(default_factory=dict)
    has_cycles: bool = False


@dataclass(slots=True)
class AnalysisResult:
    ok: bool
    diagnostics: list[GraphDiagnostic]
    cycles: CycleDetectionResult
    orphaned_block_ids: list[str] = field(default_factory=list)
    unreachable_block_ids: list[str] = field(default_factory=list)

    @property
    def errors(self) -> list[GraphDiagnostic]:
        return [item for item in self.diagnostics if item.severity == "error"]

    @property
    def warnings(self) -> list[GraphDiagnostic]:
        return [item for item in self.diagnostics if item.severity in {"warning", "info"}]
