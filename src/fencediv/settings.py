"""Style settings applied to rendered fenced divs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from .core.ports import IdGenerator

logger = logging.getLogger(__name__)

RuleType = Literal["class", "id"]
RULE_TYPES = ("class", "id")


@dataclass
class StylingRule:
    """Style text applied to divs carrying a given class or id."""
    type: RuleType
    name: str
    style: str

    def __post_init__(self) -> None:
        if self.type not in RULE_TYPES:
            raise ValueError(f"Unknown rule type: {self.type!r} (expected 'class' or 'id')")

    def equals(self, other: StylingRule) -> bool:
        return self.type == other.type and self.name == other.name and self.style == other.style

    def is_empty(self) -> bool:
        return self.name == "" or self.style == ""

    def __str__(self) -> str:
        return f"{'.' if self.type == 'class' else '#'}{self.name}"

    def matches(self, class_list: list[str], div_id: str | None) -> bool:
        # An id equal to the rule name matches whatever the rule type
        return (self.type == "class" and self.name in class_list) or (
            div_id is not None and div_id == self.name
        )

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "name": self.name, "style": self.style}

    @classmethod
    def empty(cls) -> StylingRule:
        return cls("class", "", "")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StylingRule:
        try:
            return cls(data["type"], str(data["name"]), str(data["style"]))
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed styling rule: {data!r}") from e


@dataclass
class FencedDivSettings:
    """Global style text plus rules keyed by a stable rule id."""
    global_styling: str = ""
    special_styling: dict[str, StylingRule] = field(default_factory=dict)

    def to_serializable(self) -> dict[str, Any]:
        return {
            "globalStyling": self.global_styling,
            "specialStyling": [
                [rule_id, rule.to_dict()] for rule_id, rule in self.special_styling.items()
            ],
        }

    @classmethod
    def from_serialized(cls, data: dict[str, Any] | None) -> FencedDivSettings:
        """
        Build settings from their serializable form.

        ``None`` or an empty mapping gives default settings.
        """
        settings = cls()
        if not data:
            return settings
        settings.global_styling = data.get("globalStyling") or ""
        for entry in data.get("specialStyling") or []:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise ValueError(f"Malformed styling entry: {entry!r}")
            rule_id, rule = entry
            settings.special_styling[str(rule_id)] = StylingRule.from_dict(rule)
        return settings

    def add_rule(self, rule: StylingRule, idgen: IdGenerator) -> str:
        rule_id = idgen.new_id()
        while rule_id in self.special_styling:
            rule_id = idgen.new_id()
        self.special_styling[rule_id] = rule
        logger.debug("added styling rule %s for %s", rule_id, rule)
        return rule_id

    def set_rule(self, rule_id: str, rule: StylingRule) -> None:
        self.special_styling[rule_id] = rule

    def delete_rule(self, rule_id: str) -> bool:
        return self.special_styling.pop(rule_id, None) is not None

    def is_unmodified_rule(self, rule_id: str, rule: StylingRule) -> bool:
        """True when saving ``rule`` under ``rule_id`` would change nothing useful."""
        existing = self.special_styling.get(rule_id)
        return rule.is_empty() or (existing is not None and existing.equals(rule))

    def style_for(self, class_list: list[str], div_id: str | None) -> str:
        """Global style text followed by the style of every matching rule."""
        styles = [self.global_styling]
        for rule in self.special_styling.values():
            if rule.matches(class_list, div_id):
                styles.append(rule.style)
        return "\n".join(styles)
