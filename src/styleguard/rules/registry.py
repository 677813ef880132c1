"""Registry of available rules."""

from __future__ import annotations

from collections.abc import Iterator

from styleguard.rules.base import Rule
from styleguard.rules.blocks import BlockDelimiterRule, BlockLengthRule
from styleguard.rules.comments import ExplanatoryCommentRule
from styleguard.rules.layout import (
    BlankLinePlacementRule,
    LineLengthRule,
    MethodSeparationRule,
)
from styleguard.rules.literals import MagicLiteralRule
from styleguard.rules.naming import NamingConventionRule, VerbNamedMethodRule
from styleguard.rules.ordering import DeclarationOrderRule

BUILTIN_RULES: tuple[type[Rule], ...] = (
    LineLengthRule,
    NamingConventionRule,
    MagicLiteralRule,
    BlockDelimiterRule,
    BlockLengthRule,
    BlankLinePlacementRule,
    MethodSeparationRule,
    DeclarationOrderRule,
    VerbNamedMethodRule,
    ExplanatoryCommentRule,
)


class RuleRegistry:
    """Rules by id, iterated in registration order."""

    def __init__(self, rules: list[Rule] | None = None) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules or []:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        if rule.id in self._rules:
            raise ValueError(f"Rule already registered: {rule.id}")
        self._rules[rule.id] = rule

    def get(self, rule_id: str) -> Rule:
        return self._rules[rule_id]

    def ids(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)


def default_registry() -> RuleRegistry:
    """A fresh registry holding every built-in rule."""
    return RuleRegistry([rule_cls() for rule_cls in BUILTIN_RULES])
