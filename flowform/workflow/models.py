from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


BlockSubtype = Literal[
    "short_text",
    "long_text",
    "email",
    "number",
    "date",
    "multiple_choice",
    "checkbox_group",
    "dropdown",
    "rating",
    "scale",
    "yes_no",
    "ai_conversation",
    "unknown",
]
LogicalOperator = Literal["AND", "OR"]
ConditionOperator = Literal["equals", "not_equals", "contains", "greater_than", "less_than"]
ConditionValue = str | int | float | bool

ALLOWED_BLOCK_SUBTYPES: set[str] = {
    "short_text",
    "long_text",
    "email",
    "number",
    "date",
    "multiple_choice",
    "checkbox_group",
    "dropdown",
    "rating",
    "scale",
    "yes_no",
    "ai_conversation",
    "unknown",
}
OPTION_BEARING_SUBTYPES: set[str] = {"multiple_choice", "dropdown", "checkbox_group"}
SINGLE_SELECT_SUBTYPES: set[str] = {"multiple_choice", "dropdown"}
ALLOWED_LOGICAL_OPERATORS: set[str] = {"AND", "OR"}
ALLOWED_CONDITION_OPERATORS: set[str] = {
    "equals",
    "not_equals",
    "contains",
    "greater_than",
    "less_than",
}

EMPTY_TARGET = ""
END_OF_FORM = -1


def canonical_subtype(raw: object) -> BlockSubtype:
    text = str(raw or "").strip()
    if text in ALLOWED_BLOCK_SUBTYPES:
        return text  # type: ignore[return-value]
    return "unknown"


def _pick(payload: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return default


@dataclass(slots=True)
class ChoiceOption:
    id: str
    label: str
    value: str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ChoiceOption:
        label = str(payload.get("label") or "")
        value = str(payload.get("value") or label)
        option_id = str(payload.get("id") or value or label)
        return cls(id=option_id, label=label or value, value=value)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "value": self.value}


@dataclass(slots=True)
class Block:
    id: str
    subtype: BlockSubtype = "unknown"
    order_index: int = 0
    settings: dict[str, Any] = field(default_factory=dict)
    title: str = ""

    @property
    def is_option_bearing(self) -> bool:
        return self.subtype in OPTION_BEARING_SUBTYPES

    @property
    def options(self) -> list[ChoiceOption]:
        raw = self.settings.get("options") or self.settings.get("choices") or []
        if not isinstance(raw, list):
            return []
        return [ChoiceOption.from_dict(item) for item in raw if isinstance(item, dict)]

    def find_option(self, identifier: object) -> ChoiceOption | None:
        key = str(identifier)
        options = self.options
        for option in options:
            if option.id == key:
                return option
        for option in options:
            if option.value == key:
                return option
        return None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Block:
        settings = payload.get("settings")
        return cls(
            id=str(payload["id"]),
            subtype=canonical_subtype(_pick(payload, "subtype", "blockTypeId", "block_type_id")),
            order_index=int(_pick(payload, "order_index", "orderIndex", "order", default=0) or 0),
            settings=dict(settings) if isinstance(settings, dict) else {},
            title=str(payload.get("title") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subtype": self.subtype,
            "order_index": self.order_index,
            "settings": dict(self.settings),
            "title": self.title,
        }


@dataclass(slots=True)
class ConditionRule:
    field: str
    operator: ConditionOperator = "equals"
    value: ConditionValue = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ConditionRule:
        return cls(
            field=str(payload.get("field") or ""),
            operator=str(payload.get("operator") or "equals"),  # type: ignore[arg-type]
            value=payload.get("value", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "operator": self.operator, "value": self.value}


@dataclass(slots=True)
class ConditionGroup:
    logical_operator: LogicalOperator = "AND"
    conditions: list[ConditionRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> ConditionGroup:
        if not isinstance(payload, dict):
            return cls()
        operator = str(_pick(payload, "logical_operator", "logicalOperator", default="AND")).upper()
        conditions = payload.get("conditions")
        return cls(
            logical_operator="OR" if operator == "OR" else "AND",
            conditions=[
                ConditionRule.from_dict(item)
                for item in (conditions if isinstance(conditions, list) else [])
                if isinstance(item, dict)
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "logical_operator": self.logical_operator,
            "conditions": [item.to_dict() for item in self.conditions],
        }


@dataclass(slots=True)
class Rule:
    id: str
    target_block_id: str = EMPTY_TARGET
    condition_group: ConditionGroup = field(default_factory=ConditionGroup)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Rule:
        return cls(
            id=str(payload.get("id") or ""),
            target_block_id=str(_pick(payload, "target_block_id", "targetBlockId", default="") or ""),
            condition_group=ConditionGroup.from_dict(
                _pick(payload, "condition_group", "conditionGroup")
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "target_block_id": self.target_block_id,
            "condition_group": self.condition_group.to_dict(),
        }


@dataclass(slots=True)
class Connection:
    id: str
    source_id: str
    default_target_id: str | None = None
    rules: list[Rule] = field(default_factory=list)
    order_index: int = 0
    is_explicit: bool = False

    def targets(self) -> list[str]:
        """Every block id this connection can lead to, rules first."""
        targets = [rule.target_block_id for rule in self.rules if rule.target_block_id]
        if self.default_target_id:
            targets.append(self.default_target_id)
        return targets

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Connection:
        default_target = _pick(payload, "default_target_id", "defaultTargetId", "targetId")
        rules = payload.get("rules")
        return cls(
            id=str(payload["id"]),
            source_id=str(_pick(payload, "source_id", "sourceId")),
            default_target_id=str(default_target) if default_target else None,
            rules=[
                Rule.from_dict(item)
                for item in (rules if isinstance(rules, list) else [])
                if isinstance(item, dict)
            ],
            order_index=int(_pick(payload, "order_index", "orderIndex", "order", default=0) or 0),
            is_explicit=bool(_pick(payload, "is_explicit", "isExplicit", default=False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_id": self.source_id,
            "default_target_id": self.default_target_id,
            "rules": [rule.to_dict() for rule in self.rules],
            "order_index": self.order_index,
            "is_explicit": self.is_explicit,
        }


def sort_blocks(blocks: list[Block]) -> list[Block]:
    return sorted(blocks, key=lambda block: block.order_index)


def find_block_index(blocks: list[Block], block_id: str) -> int:
    for index, block in enumerate(blocks):
        if block.id == block_id:
            return index
    return END_OF_FORM


def outgoing_connections(connections: list[Connection], block_id: str) -> list[Connection]:
    return [connection for connection in connections if connection.source_id == block_id]
