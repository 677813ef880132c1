"""Evaluator: applies the active rules of a language to one source model."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from styleguard.errors import RuleError
from styleguard.rules.models import Diagnostic, Violation
from styleguard.rules.registry import RuleRegistry
from styleguard.ruleset.models import ActiveRuleSet
from styleguard.source.models import SourceModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Evaluation:
    """Violations and rule diagnostics for one file, both sorted."""

    violations: tuple[Violation, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()


class Evaluator:
    """Runs every enabled rule against a model, isolating rule failures."""

    def __init__(self, registry: RuleRegistry, rules: ActiveRuleSet) -> None:
        self.registry = registry
        self.rules = rules

    def evaluate(self, model: SourceModel) -> Evaluation:
        violations: list[Violation] = []
        diagnostics: list[Diagnostic] = []

        for settings in self.rules.for_language(model.language):
            rule = self.registry.get(settings.rule_id)
            try:
                violations.extend(rule.evaluate(model, settings))
            except Exception as e:  # noqa: BLE001
                error = RuleError(rule.id, model.path, e)
                logger.warning("%s", error, exc_info=logger.isEnabledFor(logging.DEBUG))
                diagnostics.append(Diagnostic(rule.id, model.path, str(error)))

        violations.sort(key=lambda v: v.sort_key)
        diagnostics.sort(key=lambda d: d.rule_id)
        return Evaluation(tuple(violations), tuple(diagnostics))
