"""Comments that explain a condition instead of naming it."""

from __future__ import annotations

from styleguard.rules.base import Rule
from styleguard.rules.models import Severity, Violation
from styleguard.ruleset.models import RuleSettings
from styleguard.source.models import BlockKind, SourceModel, TokenKind


class ExplanatoryCommentRule(Rule):
    id = "explanatory-comment"
    description = (
        "A comment right before a compound condition suggests extracting a "
        "named boolean (advisory)."
    )
    default_severity = Severity.ADVISORY
    default_params = {"operators": ["&&", "||", "and", "or"]}
    advisory = True

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        operators = set(settings.params["operators"])
        violations: list[Violation] = []
        for block in model.blocks:
            if block.kind is not BlockKind.CONDITIONAL or block.first == 0:
                continue
            comment = model.tokens[block.first - 1]
            if comment.kind is not TokenKind.COMMENT:
                continue
            if comment.end_line < block.start_line - 1:
                continue
            if _trails_code(model, block.first - 1):
                continue
            if not any(t.text in operators for t in model.condition_tokens(block)):
                continue
            violations.append(
                self.violation(
                    model,
                    comment.line,
                    comment.column,
                    settings.severity,
                    "Comment explains a compound condition; "
                    "consider extracting a named boolean",
                )
            )
        return violations


def _trails_code(model: SourceModel, index: int) -> bool:
    """Whether code precedes the comment at *index* on the same line."""
    comment = model.tokens[index]
    for i in range(index - 1, -1, -1):
        tok = model.tokens[i]
        if tok.end_line < comment.line:
            return False
        if tok.kind is not TokenKind.COMMENT:
            return True
    return False
