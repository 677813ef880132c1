"""Declaration order inside class-like blocks."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from styleguard.rules.base import Rule
from styleguard.rules.models import Violation
from styleguard.ruleset.models import RuleSettings
from styleguard.source.models import (
    BlockKind,
    Declaration,
    DeclarationKind,
    SourceModel,
    Visibility,
)

_VISIBILITIES = ("public", "protected", "private")

_KIND_STATE = {
    DeclarationKind.CONSTANT: 0,
    DeclarationKind.FIELD: 1,
    DeclarationKind.VARIABLE: 1,
    DeclarationKind.CONSTRUCTOR: 2,
}

_STATE_LABELS = ("constants", "fields", "the constructor")

_NOUNS = {
    DeclarationKind.CONSTANT: "Constant",
    DeclarationKind.FIELD: "Field",
    DeclarationKind.VARIABLE: "Field",
    DeclarationKind.CONSTRUCTOR: "Constructor",
}


class DeclarationOrderRule(Rule):
    """Constants, then fields, then the constructor, then methods by visibility.

    Each class body runs a forward-only state machine. A member belonging to
    a state the machine has already left is reported and the state stays
    where it is, so later misplaced members are reported too.
    """

    id = "declaration-order"
    description = "Class members must be declared in a fixed order."
    default_params = {
        "visibility_order": list(_VISIBILITIES),
        "default_visibility": "public",
    }

    @classmethod
    def validate_params(cls, params: Mapping[str, Any]) -> None:
        order = params["visibility_order"]
        if sorted(order) != sorted(_VISIBILITIES):
            raise ValueError(
                "visibility_order must list public, protected and private exactly once"
            )
        if params["default_visibility"] not in _VISIBILITIES:
            raise ValueError(f"invalid default_visibility {params['default_visibility']!r}")

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        order = list(settings.params["visibility_order"])
        default = settings.params["default_visibility"]
        labels = [*_STATE_LABELS, *(f"{v} methods" for v in order)]

        violations: list[Violation] = []
        for block in model.blocks:
            if block.kind is not BlockKind.CLASS:
                continue
            state = 0
            for decl in model.members(block.index):
                target = _state_of(decl, order, default)
                if target is None:
                    continue
                if target < state:
                    violations.append(
                        self.violation(
                            model,
                            decl.line,
                            decl.column,
                            settings.severity,
                            f"{_describe(decl)} '{decl.name}' is declared "
                            f"after {labels[state]}",
                        )
                    )
                    continue
                state = target
        return violations


def _state_of(decl: Declaration, order: list[str], default: str) -> int | None:
    if decl.kind in _KIND_STATE:
        return _KIND_STATE[decl.kind]
    if decl.kind is not DeclarationKind.METHOD:
        return None
    visibility = (
        default if decl.visibility is Visibility.UNSPECIFIED else decl.visibility.value
    )
    return len(_STATE_LABELS) + order.index(visibility)


def _describe(decl: Declaration) -> str:
    if decl.kind is not DeclarationKind.METHOD:
        return _NOUNS[decl.kind]
    if decl.visibility is Visibility.UNSPECIFIED:
        return "Method"
    return f"{decl.visibility.value.capitalize()} method"
