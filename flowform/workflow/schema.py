from __future__ import annotations

from typing import Any

from flowform.workflow.models import (
    ALLOWED_CONDITION_OPERATORS,
    ALLOWED_LOGICAL_OPERATORS,
    Block,
    Connection,
)


FIELD_ALIASES: dict[str, str] = {
    "sourceId": "source_id",
    "defaultTargetId": "default_target_id",
    "targetId": "default_target_id",
    "orderIndex": "order_index",
    "order": "order_index",
    "blockTypeId": "subtype",
    "targetBlockId": "target_block_id",
    "conditionGroup": "condition_group",
    "logicalOperator": "logical_operator",
    "isExplicit": "is_explicit",
}


class WorkflowValidationError(ValueError):
    """Raised when a workflow definition fails validation."""


def canonicalize_record(record: dict[str, Any]) -> dict[str, Any]:
    normalized = dict(record)
    for alias, canonical in FIELD_ALIASES.items():
        if alias in normalized and canonical not in normalized:
            normalized[canonical] = normalized.pop(alias)
    return normalized


def validate_workflow_definition(definition: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    if not isinstance(definition, dict):
        return ["Workflow definition must be an object."]

    blocks = definition.get("blocks")
    if not isinstance(blocks, list):
        errors.append("Top-level field 'blocks' must be a list.")
        return errors

    block_ids: set[str] = set()
    for index, raw_block in enumerate(blocks):
        if not isinstance(raw_block, dict):
            errors.append(f"blocks[{index}] must be an object.")
            continue
        block = canonicalize_record(raw_block)

        block_id = block.get("id")
        if not isinstance(block_id, str) or not block_id.strip():
            errors.append(f"blocks[{index}].id must be a non-empty string.")
            continue
        if block_id in block_ids:
            errors.append(f"Duplicate block id '{block_id}'.")
            continue
        block_ids.add(block_id)

        order_index = block.get("order_index", 0)
        if isinstance(order_index, bool) or not isinstance(order_index, int):
            errors.append(f"Block '{block_id}' has non-integer order_index.")

        settings = block.get("settings", {})
        if settings is not None and not isinstance(settings, dict):
            errors.append(f"Block '{block_id}' settings must be an object.")
            continue
        options = (settings or {}).get("options") or (settings or {}).get("choices")
        if options is not None and not isinstance(options, list):
            errors.append(f"Block '{block_id}' options must be a list.")

    connections = definition.get("connections", [])
    if not isinstance(connections, list):
        errors.append("Top-level field 'connections' must be a list.")
        return errors

    connection_ids: set[str] = set()
    for index, raw_connection in enumerate(connections):
        if not isinstance(raw_connection, dict):
            errors.append(f"connections[{index}] must be an object.")
            continue
        connection = canonicalize_record(raw_connection)

        connection_id = connection.get("id")
        if not isinstance(connection_id, str) or not connection_id.strip():
            errors.append(f"connections[{index}].id must be a non-empty string.")
            continue
        if connection_id in connection_ids:
            errors.append(f"Duplicate connection id '{connection_id}'.")
            continue
        connection_ids.add(connection_id)

        source_id = connection.get("source_id")
        if not isinstance(source_id, str) or not source_id:
            errors.append(f"Connection '{connection_id}' requires non-empty string 'source_id'.")

        default_target = connection.get("default_target_id")
        if default_target is not None and not isinstance(default_target, str):
            errors.append(f"Connection '{connection_id}' default_target_id must be a string or null.")

        rules = connection.get("rules", [])
        if not isinstance(rules, list):
            errors.append(f"Connection '{connection_id}' rules must be a list.")
            continue
        for rule_index, raw_rule in enumerate(rules):
            _validate_rule(raw_rule, f"Connection '{connection_id}' rules[{rule_index}]", errors)

    return errors


def validate_workflow_or_raise(definition: dict[str, Any]) -> None:
    errors = validate_workflow_definition(definition)
    if errors:
        rendered = "\n".join(f"- {error}" for error in errors)
        raise WorkflowValidationError(f"Workflow validation failed:\n{rendered}")


def load_workflow_definition(definition: dict[str, Any]) -> tuple[list[Block], list[Connection]]:
    """Validate plain records and turn them into model objects.

    Dangling references are not errors here; they are pruned by the
    synchronizer's validation pass.
    """
    validate_workflow_or_raise(definition)
    blocks = [Block.from_dict(canonicalize_record(item)) for item in definition["blocks"]]
    connections = [
        Connection.from_dict(canonicalize_record(item))
        for item in definition.get("connections", [])
    ]
    return blocks, connections


def dump_workflow_definition(blocks: list[Block], connections: list[Connection]) -> dict[str, Any]:
    return {
        "blocks": [block.to_dict() for block in blocks],
        "connections": [connection.to_dict() for connection in connections],
    }


def _validate_rule(raw_rule: object, location: str, errors: list[str]) -> None:
    if not isinstance(raw_rule, dict):
        errors.append(f"{location} must be an object.")
        return
    rule = canonicalize_record(raw_rule)

    target = rule.get("target_block_id", "")
    if target is not None and not isinstance(target, str):
        errors.append(f"{location}.target_block_id must be a string.")

    group = rule.get("condition_group")
    if group is None:
        return
    if not isinstance(group, dict):
        errors.append(f"{location}.condition_group must be an object.")
        return
    group = canonicalize_record(group)

    operator = group.get("logical_operator", "AND")
    if str(operator).upper() not in ALLOWED_LOGICAL_OPERATORS:
        errors.append(f"{location}.condition_group.logical_operator must be AND or OR.")

    conditions = group.get("conditions", [])
    if not isinstance(conditions, list):
        errors.append(f"{location}.condition_group.conditions must be a list.")
        return
    for condition_index, condition in enumerate(conditions):
        path = f"{location}.condition_group.conditions[{condition_index}]"
        if not isinstance(condition, dict):
            errors.append(f"{path} must be an object.")
            continue
        if not isinstance(condition.get("field"), str):
            errors.append(f"{path}.field must be a string.")
        if condition.get("operator") not in ALLOWED_CONDITION_OPERATORS:
            errors.append(
                f"{path}.operator must be one of: equals, not_equals, contains, greater_than, less_than."
            )
        value = condition.get("value")
        if value is not None and not isinstance(value, (str, int, float, bool)):
            errors.append(f"{path}.value must be a string, number or boolean.")
