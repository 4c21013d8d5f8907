from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

from flowform.workflow.condition_fields import CHOICE_INDEX_SUFFIX_RE, CHOICE_PREFIX, choice_literal
from flowform.workflow.models import (
    Block,
    ConditionGroup,
    ConditionRule,
    OPTION_BEARING_SUBTYPES,
    SINGLE_SELECT_SUBTYPES,
)


LOGGER = logging.getLogger(__name__)

Answer = Any


def evaluate_condition(
    condition: ConditionRule | None,
    answer: Answer,
    block_subtype: str,
    blocks: Sequence[Block] = (),
) -> bool:
    """Evaluate one atomic condition against the respondent's answer.

    ``blocks`` is only consulted when ``condition.field`` names an
    option-bearing source block whose option labels must be looked up.
    Conditions that match none of the known shapes pass.
    """
    if condition is None or not condition.field:
        return True

    if answer is None:
        return False

    field = condition.field
    operator = condition.operator
    value = condition.value

    if field.startswith(CHOICE_PREFIX):
        result = _evaluate_choice_field(field, operator, answer, blocks)
        if result is not None:
            return result

    elif field == "selected":
        if block_subtype == "checkbox_group":
            has_selection = isinstance(answer, list) and len(answer) > 0
            if operator == "equals":
                return has_selection if value is True else not has_selection
            if operator == "not_equals":
                return not has_selection if value is True else has_selection

    elif field == "answer":
        result = _evaluate_answer_field(operator, answer, value, block_subtype)
        if result is not None:
            return result

    elif block_subtype in OPTION_BEARING_SUBTYPES:
        result = _evaluate_option_field(condition, answer, block_subtype, blocks)
        if result is not None:
            return result

    LOGGER.warning(
        "Condition could not be evaluated, allowing navigation: field=%s operator=%s value=%r answer=%r subtype=%s",
        field,
        operator,
        value,
        answer,
        block_subtype,
    )
    return True


def evaluate_condition_group(
    group: ConditionGroup | None,
    answer: Answer,
    block_subtype: str,
    blocks: Sequence[Block] = (),
) -> bool:
    if group is None or not group.conditions:
        return True

    results = [
        evaluate_condition(condition, answer, block_subtype, blocks)
        for condition in group.conditions
    ]
    if group.logical_operator == "OR":
        return any(results)
    return all(results)


def _evaluate_choice_field(
    field: str,
    operator: str,
    answer: Answer,
    blocks: Sequence[Block],
) -> bool | None:
    raw_literal = field.split(":", 1)[1]

    if isinstance(answer, list):
        selected = {str(item) for item in answer}
    elif isinstance(answer, (str, int, float)) and not isinstance(answer, bool):
        selected = {str(answer)}
    else:
        return None

    is_selected = raw_literal in selected
    if not is_selected and _is_editor_index_suffix(raw_literal, blocks):
        is_selected = choice_literal(field) in selected

    LOGGER.debug("Choice %s is %s in %r", raw_literal, "selected" if is_selected else "not selected", answer)
    return is_selected if operator == "equals" else not is_selected


def _is_editor_index_suffix(raw_literal: str, blocks: Sequence[Block]) -> bool:
    """Return True when ``_<n>`` on ``raw_literal`` is the option's position.

    Without any blocks to check against, a trailing ``_<n>`` is assumed to
    be the editor's index suffix.
    """
    match = CHOICE_INDEX_SUFFIX_RE.search(raw_literal)
    if match is None:
        return False
    if not blocks:
        return True

    literal = raw_literal[: match.start()]
    index = int(match.group()[1:])
    for block in blocks:
        if block.subtype not in OPTION_BEARING_SUBTYPES:
            continue
        options = block.options
        if index < len(options):
            option = options[index]
            if (option.value or option.label or f"option_{index}") == literal:
                return True
    return False


def _evaluate_answer_field(
    operator: str,
    answer: Answer,
    value: object,
    block_subtype: str,
) -> bool | None:
    if block_subtype in SINGLE_SELECT_SUBTYPES:
        if operator == "equals":
            return str(answer) == str(value)
        if operator == "not_equals":
            return str(answer) != str(value)

    if operator == "equals":
        return _loose_equals(answer, value)
    if operator == "not_equals":
        return not _loose_equals(answer, value)
    if operator == "contains" and isinstance(answer, str):
        return str(value) in answer
    if operator in {"greater_than", "less_than"}:
        left = _as_number(answer)
        right = _as_number(value)
        if left is None or right is None:
            return False
        return left > right if operator == "greater_than" else left < right
    return None


def _evaluate_option_field(
    condition: ConditionRule,
    answer: Answer,
    block_subtype: str,
    blocks: Sequence[Block],
) -> bool | None:
    operator = condition.operator
    expected = str(condition.value)

    source_block = next((block for block in blocks if block.id == condition.field), None)
    if source_block is None:
        LOGGER.warning(
            "Condition references unknown source block '%s'; condition fails.",
            condition.field,
        )
        return False

    if block_subtype == "checkbox_group":
        selected = answer if isinstance(answer, list) else [answer]
        if not selected:
            return operator == "not_equals"
        labels: list[str] = []
        for identifier in selected:
            option = source_block.find_option(identifier)
            if option is None:
                LOGGER.warning(
                    "Option '%s' not found on block '%s'; skipping it.",
                    identifier,
                    source_block.id,
                )
                continue
            labels.append(option.label)
        if not labels:
            return False
        if operator == "equals":
            return expected in labels
        if operator == "not_equals":
            return expected not in labels
        return None

    option = source_block.find_option(answer)
    if option is None:
        LOGGER.warning(
            "Option '%s' not found on block '%s'; condition fails.",
            answer,
            source_block.id,
        )
        return False
    if operator == "equals":
        return option.label == expected
    if operator == "not_equals":
        return option.label != expected
    if operator == "contains":
        return expected in option.label
    return None


def _loose_equals(answer: object, value: object) -> bool:
    if _is_number(answer) and isinstance(value, str):
        return answer == _as_number(value)
    if isinstance(answer, str) and _is_number(value):
        return _as_number(answer) == value
    return answer == value


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_number(value: object) -> float | None:
    if _is_number(value):
        return float(value)  # type: ignore[arg-type]
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if math.isnan(number):
            return None
        return number
    return None
