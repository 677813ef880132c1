"""Configuration models: raw configuration and the resolved rule set."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from styleguard.rules.models import Severity


@dataclass(frozen=True)
class RuleSettings:
    """Fully resolved settings of one rule for one language."""

    rule_id: str
    enabled: bool = True
    severity: Severity = Severity.WARNING
    params: Mapping[str, Any] = field(default_factory=dict)

    def param(self, name: str) -> Any:
        return self.params[name]


@dataclass(frozen=True)
class Configuration:
    """A loaded configuration document, with ``extends`` already merged.

    ``rules`` maps rule id to a ``{enabled, severity, params}`` entry and
    ``languages`` maps language id to the same shape. Entries are kept raw
    here; the resolver validates them against the rule registry.
    """

    name: str = "default"
    fail_on: Severity | None = None
    exclude: tuple[str, ...] = ()
    rules: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    languages: Mapping[str, Mapping[str, Mapping[str, Any]]] = field(
        default_factory=dict
    )
    extends: tuple[str, ...] = ()
    source: Path | None = None


@dataclass(frozen=True)
class ActiveRuleSet:
    """Per-language rule settings produced by ``resolve``."""

    languages: Mapping[str, tuple[RuleSettings, ...]]
    fail_on: Severity = Severity.WARNING
    exclude: tuple[str, ...] = ()
    name: str = "default"

    def for_language(self, language: str) -> tuple[RuleSettings, ...]:
        """Enabled rule settings for *language*, in registry order."""
        return tuple(s for s in self.languages.get(language, ()) if s.enabled)

    def settings(self, language: str, rule_id: str) -> RuleSettings:
        for settings in self.languages[language]:
            if settings.rule_id == rule_id:
                return settings
        raise KeyError(rule_id)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* into a copy of *base*.

    Nested mappings merge key by key; any other value, lists included,
    replaces the base value outright.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
