from __future__ import annotations

from collections import deque
from collections.abc import Sequence

from flowform.workflow.models import Block, Connection


DEFAULT_HORIZONTAL_SPACING = 300.0
DEFAULT_VERTICAL_SPACING = 100.0
DEFAULT_ORIGIN = 100.0

Position = dict[str, float]


def connection_map(connections: Sequence[Connection]) -> dict[str, list[str]]:
    mapping: dict[str, list[str]] = {}
    for connection in connections:
        targets = mapping.setdefault(connection.source_id, [])
        seen: set[str] = set()
        for target in connection.targets():
            if target in seen:
                continue
            seen.add(target)
            targets.append(target)
    return mapping


def compute_layout(
    blocks: Sequence[Block],
    connections: Sequence[Connection],
    *,
    horizontal_spacing: float = DEFAULT_HORIZONTAL_SPACING,
    vertical_spacing: float = DEFAULT_VERTICAL_SPACING,
    origin: float = DEFAULT_ORIGIN,
) -> dict[str, Position]:
    """Column-per-BFS-level positions for the editor canvas."""
    if not blocks:
        return {}

    block_ids = [block.id for block in blocks]
    known = set(block_ids)
    targets_by_source = connection_map(connections)

    has_incoming: set[str] = set()
    for targets in targets_by_source.values():
        has_incoming.update(targets)

    roots = [block_id for block_id in block_ids if block_id not in has_incoming]
    if not roots:
        roots = [block_ids[0]]

    positions: dict[str, Position] = {}
    queue: deque[tuple[str, float, float]] = deque(
        (block_id, origin, index * vertical_spacing * 1.5 + origin)
        for index, block_id in enumerate(roots)
    )

    while queue:
        block_id, x, y = queue.popleft()
        if block_id in positions:
            continue
        positions[block_id] = {"x": x, "y": y}

        targets = [target for target in targets_by_source.get(block_id, []) if target in known]
        for index, target in enumerate(targets):
            if target in positions:
                continue
            offset = (index - (len(targets) - 1) / 2) * vertical_spacing
            queue.append((target, x + horizontal_spacing, y + offset))

    if len(positions) < len(block_ids):
        lowest = max(position["y"] for position in positions.values())
        row = 1
        for block_id in block_ids:
            if block_id in positions:
                continue
            positions[block_id] = {"x": origin, "y": lowest + row * vertical_spacing * 1.5}
            row += 1

    return positions
