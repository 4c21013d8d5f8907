from __future__ import annotations

import unittest

from flowform.workflow.hooks import DEFAULT_HOOK_EVENTS, WorkflowHookRegistry


class WorkflowHookRegistryTests(unittest.TestCase):
    def test_register_rejects_unknown_events(self) -> None:
        registry = WorkflowHookRegistry()

        with self.assertRaises(ValueError):
            registry.register("block_renamed", lambda context: None)

    def test_emit_runs_callbacks_in_registration_order(self) -> None:
        registry = WorkflowHookRegistry()
        seen: list[str] = []

        def first(context: dict) -> str:
            seen.append(f"first:{context['block_id']}")
            return "one"

        def second(context: dict) -> str:
            seen.append(f"second:{context['block_id']}")
            return "two"

        registry.register("block_added", first)
        registry.register("block_added", second)

        invocations = registry.emit("block_added", {"block_id": "a"})

        self.assertEqual(seen, ["first:a", "second:a"])
        self.assertEqual([item.callback_name for item in invocations], ["first", "second"])
        self.assertEqual([item.result for item in invocations], ["one", "two"])

    def test_failing_callback_does_not_stop_other_hooks(self) -> None:
        registry = WorkflowHookRegistry()

        def broken(context: dict) -> None:
            raise RuntimeError("boom")

        registry.register("orphan_conflict", broken)
        registry.register("orphan_conflict", lambda context: "ok")

        invocations = registry.emit("orphan_conflict", {})

        self.assertEqual([item.result for item in invocations], ["ok"])

    def test_clear_removes_callbacks(self) -> None:
        registry = WorkflowHookRegistry()
        registry.register("block_removed", lambda context: None)
        registry.register("connections_changed", lambda context: None)

        registry.clear("block_removed")
        self.assertEqual(registry.callbacks_for("block_removed"), [])
        self.assertEqual(len(registry.callbacks_for("connections_changed")), 1)

        registry.clear()
        self.assertEqual(registry.callbacks_for("connections_changed"), [])

    def test_default_events_cover_graph_mutations(self) -> None:
        self.assertEqual(
            DEFAULT_HOOK_EVENTS,
            {"block_added", "block_removed", "blocks_reordered", "connections_changed", "orphan_conflict"},
        )


if __name__ == "__main__":
    unittest.main()
