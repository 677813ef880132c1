"""Block structure rules: explicit delimiters and method length."""

from __future__ import annotations

from styleguard.rules.base import Rule, TwoTierRule
from styleguard.rules.models import Severity, Violation
from styleguard.ruleset.models import RuleSettings
from styleguard.source.models import BlockKind, SourceModel

_DELIMITED_KINDS = (BlockKind.CONDITIONAL, BlockKind.LOOP)


class BlockDelimiterRule(Rule):
    """Single-statement bodies need braces unless the whole construct fits on one line."""

    id = "block-delimiter"
    description = "Conditional and loop bodies spanning lines must use explicit delimiters."
    default_severity = Severity.ERROR

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        return [
            self.violation(
                model,
                block.start_line,
                block.start_column,
                settings.severity,
                f"'{block.keyword}' body spans {block.line_count} lines without braces",
            )
            for block in model.blocks
            if block.kind in _DELIMITED_KINDS
            and not block.delimited
            and block.start_line != block.end_line
        ]


class BlockLengthRule(TwoTierRule):
    id = "block-length"
    description = (
        "Methods longer than the soft limit are advisory; "
        "longer than the hard limit warn."
    )
    default_severity = Severity.WARNING
    default_params = {"soft_limit": 15, "hard_limit": 25, "soft_severity": "advisory"}

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        violations: list[Violation] = []
        for block in model.blocks:
            if block.kind is not BlockKind.METHOD:
                continue
            breach = self.tier(block.line_count, settings)
            if breach is None:
                continue
            severity, limit = breach
            name = f"Method '{block.name}'" if block.name else "Method"
            violations.append(
                self.violation(
                    model,
                    block.start_line,
                    block.start_column,
                    severity,
                    f"{name} is {block.line_count} lines long (limit {limit})",
                )
            )
        return violations
