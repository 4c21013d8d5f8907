from __future__ import annotations

import unittest

from flowform.workflow.condition_fields import (
    available_fields,
    choice_literal,
    field_name,
    operators_for_field,
    summarize_condition,
    summarize_connection,
    validate_condition,
)
from flowform.workflow.models import Block, ConditionGroup, ConditionRule, Connection, Rule


CHECKBOX = Block(
    id="languages",
    subtype="checkbox_group",
    settings={
        "options": [
            {"id": "lang_py", "label": "Python", "value": "python"},
            {"id": "lang_go", "label": "Go", "value": "go"},
        ]
    },
)
NUMBER = Block(id="age", subtype="number")
TEXT = Block(id="name", subtype="short_text")


class ConditionFieldTests(unittest.TestCase):
    def test_choice_literal_strips_index_suffix(self) -> None:
        self.assertEqual(choice_literal("choice:python_0"), "python")
        self.assertEqual(choice_literal("choice:python"), "python")
        self.assertEqual(choice_literal("choice:web_dev_12"), "web_dev")

    def test_checkbox_fields_include_each_option(self) -> None:
        field_ids = [item.id for item in available_fields(CHECKBOX)]

        self.assertEqual(field_ids, ["selected", "choice:python_0", "choice:go_1", "languages"])

    def test_number_answers_support_range_operators(self) -> None:
        self.assertIn("greater_than", operators_for_field("answer", NUMBER))
        self.assertEqual(operators_for_field("answer", TEXT), ["equals", "not_equals", "contains"])
        self.assertEqual(operators_for_field("", TEXT), ["equals"])

    def test_validate_condition_checks_operator_and_value_type(self) -> None:
        self.assertTrue(validate_condition(ConditionRule("choice:python", "equals", True), CHECKBOX))
        self.assertFalse(validate_condition(ConditionRule("choice:python", "equals", "yes"), CHECKBOX))
        self.assertFalse(validate_condition(ConditionRule("choice:rust", "equals", True), CHECKBOX))
        self.assertTrue(validate_condition(ConditionRule("answer", "greater_than", "18"), NUMBER))
        self.assertFalse(validate_condition(ConditionRule("answer", "greater_than", "old"), NUMBER))
        self.assertFalse(validate_condition(ConditionRule("answer", "greater_than", 3), TEXT))
        self.assertFalse(validate_condition(ConditionRule("answer", "equals", "x"), None))
        self.assertFalse(validate_condition(None, TEXT))

    def test_field_name_prefers_option_labels(self) -> None:
        self.assertEqual(field_name("answer"), "Answer")
        self.assertEqual(field_name("choice:python_0", CHECKBOX), '"Python"')
        self.assertEqual(field_name("languages", CHECKBOX), "Selected option")
        self.assertEqual(field_name("custom"), "custom")

    def test_summarize_condition_truncates_long_values(self) -> None:
        summary = summarize_condition(ConditionRule("answer", "contains", "a" * 30), TEXT)

        self.assertEqual(summary, f'Answer contains "{"a" * 20}..."')

    def test_summarize_connection(self) -> None:
        plain = Connection(id="c1", source_id="name", default_target_id="age")
        single = Connection(
            id="c2",
            source_id="name",
            rules=[
                Rule(
                    id="r1",
                    target_block_id="age",
                    condition_group=ConditionGroup(conditions=[ConditionRule("answer", "not_equals", "bob")]),
                )
            ],
        )
        several = Connection(id="c3", source_id="name", rules=[Rule(id="r1"), Rule(id="r2")])

        self.assertEqual(summarize_connection(plain), "Always proceed to default target")
        self.assertEqual(summarize_connection(single, TEXT), 'If Answer does not equal "bob", proceed to rule\'s target')
        self.assertEqual(summarize_connection(several), "Proceed based on multiple rules")


if __name__ == "__main__":
    unittest.main()
