"""Magic literal detection."""

from __future__ import annotations

from typing import Any

from styleguard.rules.base import Rule
from styleguard.rules.models import Violation
from styleguard.ruleset.models import RuleSettings
from styleguard.source.models import (
    BlockKind,
    DeclarationKind,
    SourceModel,
    StatementKind,
    Token,
    TokenKind,
)

_COMPARISONS = frozenset({"==", "!=", "===", "!==", "<", ">", "<=", ">="})

# Tokens that may precede a call's opening parenthesis.
_CALLEE_KEYWORDS = frozenset({"super", "this", "base"})

_UNARY_CONTEXT = frozenset({"(", "[", ",", "=", "return"}) | _COMPARISONS


class MagicLiteralRule(Rule):
    """Literals compared against or passed to calls should be named constants.

    Literals inside a constant declaration are the binding itself and are
    never reported; nor are default values in method headers.
    """

    id = "magic-literal"
    description = "Literals used in comparisons or calls should be named constants."
    default_params = {
        "allow": [0, 1, -1, "", True, False],
        "check_strings": True,
    }

    def evaluate(self, model: SourceModel, settings: RuleSettings) -> list[Violation]:
        allowed = _allow_set(settings.params["allow"])
        check_strings = settings.params["check_strings"]
        exempt = _exempt_tokens(model)
        code = [i for i, t in enumerate(model.tokens) if t.kind is not TokenKind.COMMENT]
        callers = _call_parens(model.tokens, code)

        violations: list[Violation] = []
        for pos, index in enumerate(code):
            tok = model.tokens[index]
            if not tok.is_literal or index in exempt:
                continue
            if tok.kind is TokenKind.STRING and not check_strings:
                continue

            start = pos
            negative = False
            if tok.kind is TokenKind.NUMBER and _is_unary_minus(model.tokens, code, pos):
                start = pos - 1
                negative = True

            previous = model.tokens[code[start - 1]] if start > 0 else None
            following = model.tokens[code[pos + 1]] if pos + 1 < len(code) else None
            if _is_comparison(previous) or _is_comparison(following):
                context = "comparison"
            elif callers.get(index):
                context = "call"
            else:
                continue

            value = _literal_value(tok, negative)
            if value in allowed:
                continue
            shown = f"-{tok.text}" if negative else tok.text
            first = model.tokens[code[start]]
            violations.append(
                self.violation(
                    model,
                    first.line,
                    first.column,
                    settings.severity,
                    f"Magic literal {shown} in {context}; bind it to a named constant",
                )
            )
        return violations


def _allow_set(allow: list[Any]) -> set[tuple[str, Any]]:
    result: set[tuple[str, Any]] = set()
    for item in allow:
        if isinstance(item, bool):
            result.add(("bool", item))
        elif isinstance(item, (int, float)):
            result.add(("number", float(item)))
        else:
            result.add(("string", str(item)))
    return result


def _literal_value(tok: Token, negative: bool) -> tuple[str, Any]:
    if tok.kind is TokenKind.STRING:
        return ("string", _string_body(tok.text))
    number = _number_value(tok.text)
    if number is None:
        return ("number", tok.text)
    return ("number", -number if negative else number)


def _number_value(text: str) -> float | None:
    cleaned = text.replace("_", "")
    for candidate in (cleaned, cleaned.rstrip("lLfFdDmMuUnj")):
        try:
            return float(int(candidate, 0))
        except ValueError:
            pass
        try:
            return float(candidate)
        except ValueError:
            pass
    return None


def _string_body(text: str) -> str:
    body = text.lstrip("rRbBfFuU@$")
    for quote in ('"""', "'''", '"', "'", "`"):
        if body.startswith(quote) and body.endswith(quote) and len(body) >= 2 * len(quote):
            return body[len(quote) : -len(quote)]
    return body


def _is_comparison(tok: Token | None) -> bool:
    return tok is not None and tok.kind is TokenKind.OPERATOR and tok.text in _COMPARISONS


def _is_unary_minus(tokens: tuple[Token, ...], code: list[int], pos: int) -> bool:
    if pos == 0 or tokens[code[pos - 1]].text != "-":
        return False
    if pos == 1:
        return True
    before = tokens[code[pos - 2]]
    return before.text in _UNARY_CONTEXT or (
        before.kind is TokenKind.OPERATOR and before.text not in (")", "]")
    )


def _call_parens(tokens: tuple[Token, ...], code: list[int]) -> dict[int, bool]:
    """Map each token index to whether its innermost bracket is a call's ``(``."""
    inside: dict[int, bool] = {}
    stack: list[bool] = []
    for pos, index in enumerate(code):
        tok = tokens[index]
        if tok.kind is TokenKind.DELIMITER and tok.text in "([{":
            is_call = False
            if tok.text == "(" and pos > 0:
                callee = tokens[code[pos - 1]]
                is_call = (
                    callee.kind is TokenKind.IDENTIFIER
                    or callee.text in (")", "]")
                    or (callee.kind is TokenKind.KEYWORD and callee.text in _CALLEE_KEYWORDS)
                )
            stack.append(is_call)
            continue
        if tok.kind is TokenKind.DELIMITER and tok.text in ")]}":
            if stack:
                stack.pop()
            continue
        inside[index] = bool(stack) and stack[-1]
    return inside


def _exempt_tokens(model: SourceModel) -> set[int]:
    """Token indices inside constant declarations and method headers."""
    exempt: set[int] = set()
    constants = {d.statement for d in model.declarations if d.kind is DeclarationKind.CONSTANT}
    for index in constants:
        stmt = model.statements[index]
        if stmt.kind is not StatementKind.BLOCK:
            exempt.update(range(stmt.first, stmt.last + 1))
    for block in model.blocks:
        if block.kind is BlockKind.METHOD:
            exempt.update(range(block.first, block.header_end + 1))
    return exempt

