from __future__ import annotations

from flowform.workflow.checks.models import GraphDiagnostic


def render_diagnostic(diagnostic: GraphDiagnostic) -> str:
    location_bits: list[str] = []
    if diagnostic.block_id:
        location_bits.append(f"block={diagnostic.block_id}")
    if diagnostic.connection_id:
        location_bits.append(f"connection={diagnostic.connection_id}")

    location = f" ({', '.join(location_bits)})" if location_bits else ""
    hint = f" Hint: {diagnostic.hint}" if diagnostic.hint else ""
    return f"[{diagnostic.severity.upper()}] {diagnostic.code}: {diagnostic.message}{location}.{hint}".rstrip()


def render_diagnostics(diagnostics: list[GraphDiagnostic]) -> str:
    if not diagnostics:
        return ""

    order = {"error": 0, "warning": 1, "info": 2}
    sorted_items = sorted(
        diagnostics,
        key=lambda item: (
            order.get(item.severity, 9),
            item.code,
            item.block_id or "",
            item.connection_id or "",
        ),
    )
    return "\n".join(f"- {render_diagnostic(item)}" for item in sorted_items)
