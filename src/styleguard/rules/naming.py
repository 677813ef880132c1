"""Naming rules: casing patterns per declaration kind and verb-led method names."""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from styleguard.rules.base import Rule
from styleguard.rules.models import Severity, Violation
from styleguard.ruleset.models import RuleSettings
from styleguard.source.models import DeclarationKind, SourceModel

_CAMEL = r"^[a-z][A-Za-z0-9]*$"

_INTERFACE_PREFIX = re.compile(r"I[A-Z]")

_WORD = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")

_CHECKED_KINDS = {
    DeclarationKind.CLASS: "class",
    DeclarationKind.METHOD: "method",
    DeclarationKind.FIELD: "field",
    DeclarationKind.VARIABLE: "variable",
    DeclarationKind.CONSTANT: "constant",
}


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


class NamingConventionRule(Rule):
    """Each declaration kind has a casing pattern; class names carry no ``I`` marker."""

    id = "naming-convention"
    description = "Names must match the casing pattern for their kind and language."
    default_params = {
        "patterns": {
            "class": r"^[A-Z][A-Za-z0-9]*$",
            "method": _CAMEL,
            "field": _CAMEL,
            "variable": _CAMEL,
            "constant": r"^[A-Z][A-Z0-9]*(_[A-Z0-9]+)*$",
        },
        "forbid_interface_prefix": True,
    }

    @classmethod
    def validate_params(cls, params: Mapping[str, Any]) -> None:
        patterns = params["patterns"]
        unknown = sorted(set(patterns) - set(_CHECKED_KINDS.values()))
        if unknown:
            raise ValueError(f"unknown declaration kind(s) in patterns: {', '.join(unknown)}")
        for kind, pattern in patterns.items():
            if not isinstance(pattern, str):
                raise ValueError(f"pattern for '{kind}' must be a string")
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid pattern for '{kind}': {e}") from None

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        patterns = settings.params["patterns"]
        violations: list[Violation] = []
        for decl in model.declarations:
            kind = _CHECKED_KINDS.get(decl.kind)
            if kind is None:
                continue

            if (
                decl.kind is DeclarationKind.CLASS
                and settings.params["forbid_interface_prefix"]
                and _INTERFACE_PREFIX.match(decl.name)
            ):
                violations.append(
                    self.violation(
                        model,
                        decl.line,
                        decl.column,
                        settings.severity,
                        f"Type name '{decl.name}' must not use an 'I' prefix",
                    )
                )

            pattern = patterns.get(kind)
            if pattern and not _compiled(pattern).search(decl.name):
                violations.append(
                    self.violation(
                        model,
                        decl.line,
                        decl.column,
                        settings.severity,
                        f"{kind.capitalize()} name '{decl.name}' does not match {pattern}",
                    )
                )
        return violations


class VerbNamedMethodRule(Rule):
    """Method names should lead with a verb from the configured lexicon.

    The lexicon comes from ``verbs`` plus the words of ``lexicon_file``;
    with an empty lexicon the rule reports nothing.
    """

    id = "verb-named-method"
    description = "Method names should start with a verb (advisory)."
    default_severity = Severity.ADVISORY
    default_params = {"verbs": [], "lexicon_file": "", "ignore": []}
    advisory = True

    @classmethod
    def validate_params(cls, params: Mapping[str, Any]) -> None:
        for pattern in params["ignore"]:
            try:
                re.compile(str(pattern))
            except re.error as e:
                raise ValueError(f"invalid ignore pattern {pattern!r}: {e}") from None

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        verbs = {str(v).lower() for v in settings.params["verbs"]}
        if not verbs:
            return []
        ignore = [_compiled(str(p)) for p in settings.params["ignore"]]

        violations: list[Violation] = []
        for decl in model.declarations:
            if decl.kind is not DeclarationKind.METHOD:
                continue
            if any(p.search(decl.name) for p in ignore):
                continue
            word = leading_word(decl.name)
            if not word or word in verbs:
                continue
            violations.append(
                self.violation(
                    model,
                    decl.line,
                    decl.column,
                    settings.severity,
                    f"Method name '{decl.name}' does not start with a verb ('{word}')",
                )
            )
        return violations


def leading_word(name: str) -> str:
    """First word of a camelCase, PascalCase or snake_case name, lowercased."""
    match = _WORD.search(name.lstrip("_#$"))
    return match.group(0).lower() if match else ""
