"""Merge built-in profiles and user overrides into an ActiveRuleSet."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from styleguard.errors import ConfigError
from styleguard.rules.base import Rule
from styleguard.rules.models import Severity
from styleguard.rules.registry import RuleRegistry, default_registry
from styleguard.ruleset.loader import load_defaults, parse_severity
from styleguard.ruleset.models import (
    ActiveRuleSet,
    Configuration,
    RuleSettings,
    deep_merge,
)
from styleguard.source.syntax import SYNTAXES

logger = logging.getLogger(__name__)

_ENTRY_KEYS = {"enabled", "severity", "params"}


def resolve(
    defaults: Configuration,
    overrides: Configuration | None = None,
    registry: RuleRegistry | None = None,
) -> ActiveRuleSet:
    """Resolve rule settings for every supported language.

    Layers are applied in order: rule code defaults, built-in ``rules``,
    built-in ``languages[lang]``, user ``rules``, user ``languages[lang]``.
    Raises ``ConfigError`` on the first invalid entry.
    """
    registry = registry if registry is not None else default_registry()
    overrides = overrides if overrides is not None else Configuration(name="default")

    for config in (defaults, overrides):
        _check_ids(config, registry)

    lexicons: dict[str, list[str]] = {}
    languages: dict[str, tuple[RuleSettings, ...]] = {}
    for language in sorted(SYNTAXES):
        layers = [
            (defaults.rules, f"{defaults.name}: rules"),
            (defaults.languages.get(language, {}), f"{defaults.name}: languages.{language}"),
            (overrides.rules, f"{overrides.name}: rules"),
            (overrides.languages.get(language, {}), f"{overrides.name}: languages.{language}"),
        ]
        languages[language] = tuple(
            _resolve_rule(rule, language, layers, lexicons) for rule in registry
        )

    fail_on = overrides.fail_on or defaults.fail_on or Severity.WARNING
    logger.debug(
        "Resolved configuration %s (fail on %s) for %d languages",
        overrides.name,
        fail_on.value,
        len(languages),
    )
    return ActiveRuleSet(
        languages=languages,
        fail_on=fail_on,
        exclude=defaults.exclude + overrides.exclude,
        name=overrides.name,
    )


def resolve_config(
    config: Configuration | None = None, registry: RuleRegistry | None = None
) -> ActiveRuleSet:
    """Resolve *config* on top of the packaged defaults."""
    return resolve(load_defaults(), config, registry)


def _check_ids(config: Configuration, registry: RuleRegistry) -> None:
    unknown = sorted(rule_id for rule_id in config.rules if rule_id not in registry)
    for language, table in config.languages.items():
        if language not in SYNTAXES:
            supported = ", ".join(sorted(SYNTAXES))
            raise ConfigError(
                f"{config.name}: unknown language '{language}' (supported: {supported})"
            )
        unknown.extend(sorted(r for r in table if r not in registry))
    if unknown:
        raise ConfigError(f"{config.name}: unknown rule id(s): {', '.join(unknown)}")


def _resolve_rule(
    rule: Rule,
    language: str,
    layers: list[tuple[Mapping[str, Any], str]],
    lexicons: dict[str, list[str]],
) -> RuleSettings:
    merged: dict[str, Any] = {
        "enabled": True,
        "severity": rule.default_severity.value,
        "params": deep_merge({}, rule.default_params),
    }
    for table, where in layers:
        entry = table.get(rule.id)
        if entry is None:
            continue
        _check_entry(rule, entry, f"{where}.{rule.id}")
        merged = deep_merge(merged, entry)

    where = f"{rule.id} ({language})"
    severity = parse_severity(merged["severity"], where)
    if rule.advisory:
        severity = severity.at_most(Severity.WARNING)

    params = merged["params"]
    lexicon = params.get("lexicon_file")
    if lexicon:
        words = _read_lexicon(lexicon, lexicons)
        params["verbs"] = list(dict.fromkeys([*params.get("verbs", []), *words]))

    try:
        rule.validate_params(params)
    except ValueError as e:
        raise ConfigError(f"{where}: {e}") from None

    return RuleSettings(
        rule_id=rule.id,
        enabled=merged["enabled"],
        severity=severity,
        params=params,
    )


def _check_entry(rule: Rule, entry: Mapping[str, Any], where: str) -> None:
    unknown = sorted(set(entry) - _ENTRY_KEYS)
    if unknown:
        raise ConfigError(f"{where}: unknown key(s): {', '.join(unknown)}")

    if "enabled" in entry and not isinstance(entry["enabled"], bool):
        raise ConfigError(f"{where}: 'enabled' must be true or false")
    if "severity" in entry:
        parse_severity(entry["severity"], where)

    params = entry.get("params", {})
    if not isinstance(params, Mapping):
        raise ConfigError(f"{where}: 'params' must be a mapping")
    for name, value in params.items():
        if name not in rule.default_params:
            known = ", ".join(sorted(rule.default_params)) or "none"
            raise ConfigError(f"{where}: unknown param '{name}' (known: {known})")
        expected = rule.default_params[name]
        if not _same_type(expected, value):
            raise ConfigError(
                f"{where}: param '{name}' must be {type(expected).__name__}, "
                f"got {type(value).__name__}"
            )


def _same_type(expected: Any, value: Any) -> bool:
    if isinstance(expected, bool) or isinstance(value, bool):
        return isinstance(expected, bool) and isinstance(value, bool)
    if isinstance(expected, float):
        return isinstance(value, (int, float))
    if isinstance(expected, Mapping):
        return isinstance(value, Mapping)
    return isinstance(value, type(expected))


def _read_lexicon(path: str, cache: dict[str, list[str]]) -> list[str]:
    if path not in cache:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read lexicon file {path}: {e}") from e
        cache[path] = [
            word.strip().lower()
            for word in text.splitlines()
            if word.strip() and not word.strip().startswith("#")
        ]
    return cache[path]
