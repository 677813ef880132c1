"""Layout rules: line length, blank lines around blocks, method spacing."""

from __future__ import annotations

from styleguard.rules.base import Rule, TwoTierRule
from styleguard.rules.models import Severity, Violation
from styleguard.ruleset.models import RuleSettings
from styleguard.source.models import (
    BlockKind,
    DeclarationKind,
    SourceModel,
    StatementKind,
)

_METHOD_KINDS = (DeclarationKind.METHOD, DeclarationKind.CONSTRUCTOR)


class LineLengthRule(TwoTierRule):
    id = "line-length"
    description = "Lines longer than the soft limit warn; longer than the hard limit fail."
    default_severity = Severity.ERROR
    default_params = {"soft_limit": 80, "hard_limit": 120, "soft_severity": "warning"}

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        violations: list[Violation] = []
        for line in model.lines:
            breach = self.tier(line.length, settings)
            if breach is None:
                continue
            severity, limit = breach
            violations.append(
                self.violation(
                    model,
                    line.number,
                    limit + 1,
                    severity,
                    f"Line is {line.length} characters long (limit {limit})",
                )
            )
        return violations


class BlankLinePlacementRule(Rule):
    """Blocks are set apart by blank lines; so is a ``return``.

    The first statement of a body needs no blank line before it and the last
    none after it. Chained clauses (``else``, ``catch``, ``except`` ...) are
    part of the construct they continue.
    """

    id = "blank-line-placement"
    description = "Blocks and return statements must be surrounded by blank lines."
    default_params = {"check_returns": True}

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        violations: list[Violation] = []
        for stmt in model.statements:
            before, after = model.siblings(stmt)

            if stmt.kind is StatementKind.RETURN:
                if not settings.params["check_returns"] or before is None:
                    continue
                if not model.blank_lines_between(before.end_line, stmt.start_line):
                    violations.append(
                        self._missing(model, settings, stmt, "Return statement", "preceded")
                    )
                continue

            block = model.block_of(stmt)
            if block is None:
                continue
            label = (
                f"'{block.keyword}' block"
                if block.keyword
                else f"{block.kind.value.capitalize()} block"
            )
            if before is not None and not block.continues:
                if not model.blank_lines_between(before.end_line, stmt.start_line):
                    violations.append(
                        self._missing(model, settings, stmt, label, "preceded")
                    )
            if after is not None and not _continues(model, after):
                if not model.blank_lines_between(stmt.end_line, after.start_line):
                    violations.append(
                        self._missing(model, settings, stmt, label, "followed")
                    )
        return violations

    def _missing(
        self, model: SourceModel, settings: RuleSettings, stmt, what: str, where: str
    ) -> Violation:
        if where == "preceded":
            line, column = stmt.start_line, model.tokens[stmt.first].column
        else:
            line, column = stmt.end_line, model.tokens[stmt.last].column
        return self.violation(
            model, line, column, settings.severity, f"{what} should be {where} by a blank line"
        )


class MethodSeparationRule(Rule):
    id = "method-separation"
    description = "Consecutive methods of a class are separated by a fixed number of blank lines."
    default_params = {"blank_lines": 2}

    @classmethod
    def validate_params(cls, params) -> None:
        if params["blank_lines"] < 0:
            raise ValueError("blank_lines must not be negative")

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        expected = settings.params["blank_lines"]
        violations: list[Violation] = []
        for block in model.blocks:
            if block.kind is not BlockKind.CLASS:
                continue
            methods = {
                d.statement for d in model.members(block.index) if d.kind in _METHOD_KINDS
            }
            body = block.body
            for previous, current in zip(body, body[1:]):
                if previous not in methods or current not in methods:
                    continue
                first, second = model.statements[previous], model.statements[current]
                found = model.blank_lines_between(first.end_line, second.start_line)
                if found != expected:
                    violations.append(
                        self.violation(
                            model,
                            second.start_line,
                            model.tokens[second.first].column,
                            settings.severity,
                            f"Expected {expected} blank line(s) between methods, found {found}",
                        )
                    )
        return violations


def _continues(model: SourceModel, stmt) -> bool:
    block = model.block_of(stmt)
    return block is not None and block.continues