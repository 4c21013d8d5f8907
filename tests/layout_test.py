from __future__ import annotations

import unittest

from flowform.workflow.layout import compute_layout, connection_map
from flowform.workflow.models import Block, Connection, Rule


def make_blocks(*ids: str) -> list[Block]:
    return [Block(id=block_id, order_index=index) for index, block_id in enumerate(ids)]


def edge(connection_id: str, source: str, target: str) -> Connection:
    return Connection(id=connection_id, source_id=source, default_target_id=target)


class AutoLayoutTests(unittest.TestCase):
    def test_empty_form_has_no_positions(self) -> None:
        self.assertEqual(compute_layout([], []), {})

    def test_linear_chain_lays_out_left_to_right(self) -> None:
        positions = compute_layout(make_blocks("a", "b", "c"), [edge("ab", "a", "b"), edge("bc", "b", "c")])

        self.assertEqual(
            positions,
            {
                "a": {"x": 100.0, "y": 100.0},
                "b": {"x": 400.0, "y": 100.0},
                "c": {"x": 700.0, "y": 100.0},
            },
        )

    def test_children_are_centered_around_their_parent(self) -> None:
        connections = [
            Connection(
                id="branch",
                source_id="a",
                default_target_id="c",
                rules=[Rule(id="r", target_block_id="b")],
            )
        ]

        positions = compute_layout(make_blocks("a", "b", "c"), connections)

        self.assertEqual(positions["b"], {"x": 400.0, "y": 50.0})
        self.assertEqual(positions["c"], {"x": 400.0, "y": 150.0})

    def test_multiple_roots_are_stacked(self) -> None:
        positions = compute_layout(make_blocks("a", "b", "d"), [edge("ab", "a", "b")])

        self.assertEqual(positions["a"], {"x": 100.0, "y": 100.0})
        self.assertEqual(positions["d"], {"x": 100.0, "y": 250.0})

    def test_block_reached_twice_keeps_first_position(self) -> None:
        connections = [edge("ab", "a", "b"), edge("ac", "a", "c"), edge("bc", "b", "c")]

        positions = compute_layout(make_blocks("a", "b", "c"), connections)

        self.assertEqual(positions["c"], {"x": 400.0, "y": 150.0})

    def test_blocks_not_reached_from_a_root_are_appended(self) -> None:
        connections = [edge("ab", "a", "b"), edge("ba", "b", "a"), edge("cd", "c", "d"), edge("dc", "d", "c")]

        positions = compute_layout(make_blocks("a", "b", "c", "d"), connections)

        self.assertEqual(positions["a"], {"x": 100.0, "y": 100.0})
        self.assertEqual(positions["b"], {"x": 400.0, "y": 100.0})
        self.assertEqual(positions["c"], {"x": 100.0, "y": 250.0})
        self.assertEqual(positions["d"], {"x": 100.0, "y": 400.0})

    def test_spacing_is_configurable(self) -> None:
        positions = compute_layout(
            make_blocks("a", "b"),
            [edge("ab", "a", "b")],
            horizontal_spacing=50,
            vertical_spacing=10,
            origin=0,
        )

        self.assertEqual(positions["b"], {"x": 50, "y": 0})

    def test_connection_map_lists_unique_targets_rules_first(self) -> None:
        connections = [
            Connection(
                id="x",
                source_id="a",
                default_target_id="b",
                rules=[Rule(id="r1", target_block_id="c"), Rule(id="r2", target_block_id="b")],
            )
        ]

        self.assertEqual(connection_map(connections), {"a": ["c", "b"]})


if __name__ == "__main__":
    unittest.main()
