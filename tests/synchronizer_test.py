from __future__ import annotations

import unittest

from flowform.workflow.models import Block, Connection, Rule
from flowform.workflow.synchronizer import GraphSynchronizer, SyncEvent


def make_blocks(*ids: str) -> list[Block]:
    return [Block(id=block_id, subtype="short_text", order_index=index) for index, block_id in enumerate(ids)]


def edge(connection_id: str, source: str, target: str | None, *, explicit: bool = False) -> Connection:
    return Connection(id=connection_id, source_id=source, default_target_id=target, is_explicit=explicit)


def pairs(connections: list[Connection]) -> set[tuple[str, str | None]]:
    return {(item.source_id, item.default_target_id) for item in connections}


class GraphSynchronizerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.sync = GraphSynchronizer()

    def test_added_block_is_linked_from_predecessor_without_outgoing(self) -> None:
        blocks = make_blocks("a", "new")

        updated = self.sync.synchronize(SyncEvent(kind="block_added", block_id="new"), blocks, [])

        self.assertEqual(pairs(updated), {("a", "new")})
        self.assertFalse(updated[0].is_explicit)

    def test_added_block_is_linked_to_its_successor(self) -> None:
        blocks = make_blocks("a", "new", "b")
        connections = [edge("ab", "a", "b", explicit=True)]

        updated = self.sync.on_block_added("new", blocks, connections)

        self.assertEqual(pairs(updated), {("a", "b"), ("new", "b")})

    def test_added_block_with_existing_edges_is_left_alone(self) -> None:
        blocks = make_blocks("a", "new", "b")
        connections = [edge("an", "a", "new"), edge("nb", "new", "b")]

        updated = self.sync.on_block_added("new", blocks, connections)

        self.assertEqual(updated, connections)

    def test_removed_block_drops_its_connections_and_rules(self) -> None:
        connections = [
            edge("ab", "a", "b"),
            edge("bc", "b", "c"),
            Connection(
                id="a_rules",
                source_id="a",
                default_target_id="c",
                rules=[Rule(id="to_b", target_block_id="b"), Rule(id="to_c", target_block_id="c")],
            ),
        ]

        updated = self.sync.on_block_removed("b", connections)

        self.assertEqual([item.id for item in updated], ["a_rules"])
        self.assertEqual([rule.id for rule in updated[0].rules], ["to_c"])

    def test_reorder_rebuilds_sequential_auto_connections(self) -> None:
        connections = [edge("ab", "a", "b"), edge("bc", "b", "c")]
        reordered = [
            Block(id="a", order_index=0),
            Block(id="b", order_index=2),
            Block(id="c", order_index=1),
        ]

        updated = self.sync.synchronize(SyncEvent(kind="blocks_reordered"), reordered, connections)

        self.assertEqual(pairs(updated), {("a", "c"), ("c", "b")})

    def test_reorder_preserves_explicit_and_rule_connections(self) -> None:
        explicit = edge("ba", "b", "a", explicit=True)
        with_rules = Connection(
            id="a_rules",
            source_id="a",
            default_target_id="b",
            rules=[Rule(id="r", target_block_id="c")],
        )
        reordered = [
            Block(id="b", order_index=0),
            Block(id="a", order_index=1),
            Block(id="c", order_index=2),
        ]

        updated = self.sync.on_blocks_reordered(reordered, [explicit, with_rules])

        self.assertIn(explicit, updated)
        self.assertIn(with_rules, updated)
        self.assertEqual(len(updated), 2)

    def test_validate_prunes_dangling_references(self) -> None:
        blocks = make_blocks("a", "b")
        connections = [
            edge("ok", "a", "b"),
            edge("no_source", "gone", "b"),
            edge("no_target", "a", "gone"),
            Connection(
                id="rules",
                source_id="b",
                rules=[
                    Rule(id="keep", target_block_id="a"),
                    Rule(id="unset", target_block_id=""),
                    Rule(id="drop", target_block_id="gone"),
                ],
            ),
        ]

        with self.assertLogs("flowform.workflow.synchronizer", level="WARNING"):
            validated = self.sync.validate(blocks, connections)

        self.assertEqual([item.id for item in validated], ["ok", "rules"])
        self.assertEqual([rule.id for rule in validated[1].rules], ["keep", "unset"])

    def test_retarget_that_would_orphan_a_block_is_rejected(self) -> None:
        connections = [edge("ab", "a", "b"), edge("ac", "a", "c")]

        result = self.sync.retarget("ab", "c", connections)

        self.assertFalse(result.applied)
        self.assertIsNotNone(result.conflict)
        self.assertEqual(result.conflict.old_target_id, "b")
        self.assertEqual(result.conflict.new_target_id, "c")
        self.assertEqual(result.connections, connections)

    def test_forced_retarget_is_applied(self) -> None:
        connections = [edge("ab", "a", "b")]

        result = self.sync.retarget("ab", "c", connections, force=True)

        self.assertTrue(result.applied)
        self.assertEqual(pairs(result.connections), {("a", "c")})

    def test_retarget_is_applied_when_old_target_keeps_an_edge(self) -> None:
        connections = [edge("ab", "a", "b"), edge("bc", "b", "c")]

        result = self.sync.retarget("ab", "c", connections)

        self.assertTrue(result.applied)
        self.assertIsNone(result.conflict)
        self.assertEqual(pairs(result.connections), {("a", "c"), ("b", "c")})

    def test_retarget_is_applied_when_old_target_keeps_an_incoming_edge(self) -> None:
        connections = [edge("ab", "a", "b"), edge("xb", "x", "b")]

        result = self.sync.retarget("ab", "c", connections)

        self.assertTrue(result.applied)
        self.assertIsNone(result.conflict)
        self.assertEqual(pairs(result.connections), {("a", "c"), ("x", "b")})

    def test_retarget_of_the_only_edge_into_a_block_is_rejected(self) -> None:
        connections = [edge("ab", "a", "b")]

        result = self.sync.retarget("ab", "c", connections)

        self.assertFalse(result.applied)
        self.assertEqual(result.conflict.old_target_id, "b")
        self.assertEqual(pairs(result.connections), {("a", "b")})

    def test_retarget_unknown_connection_raises(self) -> None:
        with self.assertRaises(KeyError):
            self.sync.retarget("missing", "a", [])

    def test_block_event_without_block_id_raises(self) -> None:
        with self.assertRaises(ValueError):
            self.sync.synchronize(SyncEvent(kind="block_removed"), make_blocks("a"), [])


if __name__ == "__main__":
    unittest.main()
