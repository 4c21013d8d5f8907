from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from flowform.workflow.models import Block, ConditionRule, Connection


FieldValueType = Literal["string", "number", "boolean", "date"]

CHOICE_PREFIX = "choice:"
CHOICE_INDEX_SUFFIX_RE = re.compile(r"_\d+$")

OPERATOR_LABELS: dict[str, str] = {
    "equals": "equals",
    "not_equals": "does not equal",
    "contains": "contains",
    "greater_than": "is greater than",
    "less_than": "is less than",
}

FIELD_NAMES: dict[str, str] = {
    "answer": "Answer",
    "selected": "Selected",
    "rating": "Rating",
    "length": "Length",
    "domain": "Domain",
}


@dataclass(slots=True)
class FieldOption:
    id: str
    label: str
    value_type: FieldValueType
    subtypes: set[str]
    operators: list[str] = field(default_factory=list)


STANDARD_FIELDS: list[FieldOption] = [
    FieldOption(
        id="answer",
        label="Answer",
        value_type="string",
        subtypes={"short_text", "long_text", "email", "number", "date", "multiple_choice", "dropdown"},
        operators=["equals", "not_equals", "contains"],
    ),
    FieldOption(
        id="selected",
        label="Selected",
        value_type="boolean",
        subtypes={"checkbox_group", "dropdown"},
        operators=["equals", "not_equals"],
    ),
    FieldOption(
        id="rating",
        label="Rating",
        value_type="number",
        subtypes={"rating"},
        operators=["equals", "not_equals", "greater_than", "less_than"],
    ),
    FieldOption(
        id="length",
        label="Length",
        value_type="number",
        subtypes={"short_text", "long_text"},
        operators=["equals", "greater_than", "less_than"],
    ),
    FieldOption(
        id="domain",
        label="Domain",
        value_type="string",
        subtypes={"email"},
        operators=["equals", "not_equals", "contains"],
    ),
]

# Numeric answers can also be ranged through the plain answer field.
NUMERIC_ANSWER_SUBTYPES = {"number", "rating", "scale"}


def choice_literal(field_id: str) -> str:
    """Return the literal after ``choice:`` without any editor index suffix."""
    raw = field_id.split(":", 1)[1] if ":" in field_id else field_id
    return CHOICE_INDEX_SUFFIX_RE.sub("", raw)


def available_fields(source_block: Block | None) -> list[FieldOption]:
    if source_block is None:
        return []

    subtype = source_block.subtype
    fields: list[FieldOption] = []
    for standard in STANDARD_FIELDS:
        if subtype not in standard.subtypes:
            continue
        operators = list(standard.operators)
        if standard.id == "answer" and subtype in NUMERIC_ANSWER_SUBTYPES:
            operators.extend(["greater_than", "less_than"])
        fields.append(
            FieldOption(
                id=standard.id,
                label=standard.label,
                value_type="number" if standard.id == "answer" and subtype == "number" else standard.value_type,
                subtypes={subtype},
                operators=operators,
            )
        )

    if subtype in {"checkbox_group", "dropdown"}:
        for index, option in enumerate(source_block.options):
            choice_value = option.value or option.label or f"option_{index}"
            fields.append(
                FieldOption(
                    id=f"{CHOICE_PREFIX}{choice_value}_{index}",
                    label=f'Option "{option.label or choice_value}"',
                    value_type="boolean",
                    subtypes={subtype},
                    operators=["equals", "not_equals"],
                )
            )

    if source_block.is_option_bearing:
        fields.append(
            FieldOption(
                id=source_block.id,
                label="Selected option",
                value_type="string",
                subtypes={subtype},
                operators=["equals", "not_equals"]
                if subtype == "checkbox_group"
                else ["equals", "not_equals", "contains"],
            )
        )

    return fields


def _find_field(field_id: str, source_block: Block | None) -> FieldOption | None:
    fields = available_fields(source_block)
    if field_id.startswith(CHOICE_PREFIX):
        wanted = choice_literal(field_id)
        for option in fields:
            if option.id.startswith(CHOICE_PREFIX) and choice_literal(option.id) == wanted:
                return option
        return None
    for option in fields:
        if option.id == field_id:
            return option
    return None


def operators_for_field(field_id: str, source_block: Block | None) -> list[str]:
    if not field_id or source_block is None:
        return ["equals"]
    option = _find_field(field_id, source_block)
    if option is not None:
        return list(option.operators)
    if field_id.startswith(CHOICE_PREFIX):
        return ["equals", "not_equals"]
    return ["equals"]


def validate_condition(condition: ConditionRule | None, source_block: Block | None) -> bool:
    if condition is None or not condition.field or not condition.operator:
        return False

    option = _find_field(condition.field, source_block)
    if option is None:
        return False
    if condition.operator not in option.operators:
        return False

    value = condition.value
    if value is None:
        return False

    if option.value_type == "boolean":
        return isinstance(value, bool)
    if option.value_type == "number":
        if isinstance(value, bool):
            return False
        if isinstance(value, (int, float)):
            return True
        try:
            float(str(value))
        except ValueError:
            return False
        return True
    if option.value_type == "date":
        if not isinstance(value, str):
            return False
        try:
            date.fromisoformat(value[:10])
        except ValueError:
            return False
        return True
    return isinstance(value, str)


def field_name(field_id: str, source_block: Block | None = None) -> str:
    if not field_id:
        return ""
    if field_id in FIELD_NAMES:
        return FIELD_NAMES[field_id]

    if field_id.startswith(CHOICE_PREFIX):
        literal = choice_literal(field_id)
        if source_block is None:
            return literal
        for option in source_block.options:
            if literal in {option.value, option.label}:
                return f'"{option.label}"'
        return literal

    if source_block is not None and field_id == source_block.id:
        return "Selected option"
    return field_id


def summarize_condition(condition: ConditionRule, source_block: Block | None = None) -> str:
    name = field_name(condition.field, source_block)
    operator_text = OPERATOR_LABELS.get(condition.operator, condition.operator)
    if isinstance(condition.value, str) and len(condition.value) > 20:
        value_text = f'"{condition.value[:20]}..."'
    else:
        value_text = f'"{condition.value}"'
    return f"{name} {operator_text} {value_text}"


def summarize_connection(connection: Connection, source_block: Block | None = None) -> str:
    if not connection.rules:
        return "Always proceed to default target"

    if len(connection.rules) == 1:
        group = connection.rules[0].condition_group
        if not group.conditions:
            return "Always proceed to rule's target"
        joined = f" {group.logical_operator} ".join(
            summarize_condition(item, source_block) for item in group.conditions
        )
        return f"If {joined}, proceed to rule's target"

    return "Proceed based on multiple rules"
