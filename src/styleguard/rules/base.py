"""Rule base class."""

from __future__ import annotations

import abc
from collections.abc import Mapping
from typing import Any, ClassVar

from styleguard.rules.models import Severity, Violation
from styleguard.ruleset.models import RuleSettings
from styleguard.source.models import SourceModel


class Rule(abc.ABC):
    """One checkable convention.

    Rules read only the ``SourceModel`` and their resolved settings; they
    never look at raw file text. Subclasses declare their identity and
    defaults as class attributes and implement ``evaluate``.
    """

    id: ClassVar[str]
    description: ClassVar[str]
    default_severity: ClassVar[Severity] = Severity.WARNING
    default_params: ClassVar[Mapping[str, Any]] = {}
    advisory: ClassVar[bool] = False

    @classmethod
    def validate_params(cls, params: Mapping[str, Any]) -> None:
        """Reject parameter values the type check cannot catch.

        Raise ``ValueError`` with a readable message; the resolver turns it
        into a ``ConfigError``.
        """

    @abc.abstractmethod
    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        """Return the violations found in *model*."""

    def violation(
        self,
        model: SourceModel,
        line: int,
        column: int,
        severity: Severity,
        message: str,
    ) -> Violation:
        # Positions always fall inside the file, even for an empty one.
        last = max(len(model.lines), 1)
        return Violation(
            rule_id=self.id,
            path=model.path,
            line=min(max(line, 1), last),
            column=max(column, 1),
            severity=severity,
            message=message,
            advisory=self.advisory,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


class TwoTierRule(Rule):
    """A rule with a soft and a hard numeric limit.

    Exceeding ``hard_limit`` reports at the configured severity; exceeding
    only ``soft_limit`` reports at ``params.soft_severity``.
    """

    @classmethod
    def validate_params(cls, params: Mapping[str, Any]) -> None:
        if params["soft_limit"] > params["hard_limit"]:
            raise ValueError("soft_limit must not exceed hard_limit")
        if params["soft_limit"] < 0:
            raise ValueError("limits must not be negative")
        try:
            Severity(params["soft_severity"])
        except ValueError:
            raise ValueError(
                f"invalid soft_severity {params['soft_severity']!r}"
            ) from None

    def tier(self, value: int, settings: RuleSettings) -> tuple[Severity, int] | None:
        """Severity and breached limit for *value*, or None when within limits."""
        hard = settings.params["hard_limit"]
        soft = settings.params["soft_limit"]
        if value > hard:
            return settings.severity, hard
        if value > soft:
            return Severity(settings.params["soft_severity"]), soft
        return None
