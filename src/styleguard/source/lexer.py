"""Profile-driven tokenizer shared by every language adapter."""

from __future__ import annotations

import bisect
import re

from styleguard.errors import ParseError
from styleguard.source.models import Line, Token, TokenKind
from styleguard.source.syntax import LanguageSyntax

_SPACE = re.compile(r"(?:[ \t\r\f\v\n]|\\\r?\n)+")

_NUMBER = re.compile(
    r"(?:0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO][0-7_]+"
    r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?)"
    r"[a-zA-Z]*"
)

DELIMITERS = frozenset("{}()[];,")

_REGEX = re.compile(r"/(?![/*])(?:\\.|\[(?:\\.|[^\]\\\n])*\]|[^/\\\[\n])+/[A-Za-z]*")

# A slash after one of these starts a regex literal rather than a division.
_REGEX_KEYWORDS = frozenset(
    {"return", "typeof", "case", "delete", "void", "throw", "in", "of",
     "yield", "await", "else", "new", "instanceof"}
)

# Longest first so that greedy matching picks ">>>=" over ">>".
OPERATORS = (
    ">>>=", "===", "!==", "**=", "<<=", ">>=", "...", "//=", ">>>",
    "=>", "->", "==", "!=", "<=", ">=", "&&", "||", "++", "--", "+=", "-=",
    "*=", "/=", "%=", "&=", "|=", "^=", "::", "??", "?.", ":=", "**", "//",
    "<<", ">>",
)


def split_lines(text: str) -> tuple[Line, ...]:
    """Split text on ``\\n`` into numbered lines, dropping ``\\r``."""
    if not text:
        return ()
    raw = text.split("\n")
    if text.endswith("\n"):
        raw.pop()
    return tuple(
        Line(number=i, text=part.rstrip("\r")) for i, part in enumerate(raw, start=1)
    )


class Tokenizer:
    """Turns raw text into tokens according to a ``LanguageSyntax``."""

    def __init__(self, syntax: LanguageSyntax) -> None:
        self._syntax = syntax
        quotes = sorted(syntax.string_quotes, key=len, reverse=True)
        prefix = f"[{re.escape(syntax.string_prefixes)}]{{0,2}}" if syntax.string_prefixes else ""
        self._string_start = re.compile(
            f"(?P<prefix>{prefix})(?P<quote>{'|'.join(re.escape(q) for q in quotes)})"
        )
        self._identifier = re.compile(syntax.identifier_pattern)

    def tokenize(self, text: str) -> list[Token]:
        starts = [0] + [m.end() for m in re.finditer("\n", text)]
        tokens: list[Token] = []
        previous: Token | None = None
        pos = 0
        while pos < len(text):
            space = _SPACE.match(text, pos)
            if space:
                pos = space.end()
                continue
            end, kind = self._scan(text, pos, starts, previous)
            token = _make_token(kind, text, pos, end, starts)
            tokens.append(token)
            if kind is not TokenKind.COMMENT:
                previous = token
            pos = end
        return tokens

    def _scan(
        self, text: str, pos: int, starts: list[int], previous: Token | None
    ) -> tuple[int, TokenKind]:
        for opener in self._syntax.line_comments:
            if text.startswith(opener, pos):
                end = text.find("\n", pos)
                return (len(text) if end == -1 else end), TokenKind.COMMENT

        for opener, closer in self._syntax.block_comments:
            if text.startswith(opener, pos):
                end = text.find(closer, pos + len(opener))
                if end == -1:
                    raise ParseError(
                        "unterminated block comment", _position(starts, pos)[0]
                    )
                return end + len(closer), TokenKind.COMMENT

        if self._syntax.regex_literals and _regex_allowed(previous):
            match = _REGEX.match(text, pos)
            if match:
                return match.end(), TokenKind.REGEX

        match = self._string_start.match(text, pos)
        if match:
            return self._scan_string(text, match, starts), TokenKind.STRING

        match = _NUMBER.match(text, pos)
        if match:
            return match.end(), TokenKind.NUMBER

        match = self._identifier.match(text, pos)
        if match:
            word = match.group(0)
            if word in self._syntax.keywords:
                return match.end(), TokenKind.KEYWORD
            return match.end(), TokenKind.IDENTIFIER

        if text[pos] in DELIMITERS:
            return pos + 1, TokenKind.DELIMITER

        for op in OPERATORS:
            if text.startswith(op, pos):
                return pos + len(op), TokenKind.OPERATOR
        return pos + 1, TokenKind.OPERATOR

    def _scan_string(self, text: str, match: re.Match[str], starts: list[int]) -> int:
        quote = match.group("quote")
        raw = quote in self._syntax.raw_quotes or any(
            c in self._syntax.raw_prefixes for c in match.group("prefix")
        )
        multiline = raw or quote in self._syntax.multiline_quotes
        i = match.end()
        while i < len(text):
            if text[i] == "\\" and not raw:
                i += 2
                continue
            if text.startswith(quote, i):
                return i + len(quote)
            if text[i] == "\n" and not multiline:
                break
            i += 1
        raise ParseError(
            "unterminated string literal", _position(starts, match.start())[0]
        )


def _regex_allowed(previous: Token | None) -> bool:
    if previous is None:
        return True
    if previous.kind is TokenKind.OPERATOR:
        return previous.text not in ("++", "--")
    if previous.kind is TokenKind.DELIMITER:
        return previous.text not in (")", "]", "}")
    if previous.kind is TokenKind.KEYWORD:
        return previous.text in _REGEX_KEYWORDS
    return False


def _position(starts: list[int], offset: int) -> tuple[int, int]:
    index = bisect.bisect_right(starts, offset) - 1
    return index + 1, offset - starts[index] + 1


def _make_token(
    kind: TokenKind, text: str, start: int, end: int, starts: list[int]
) -> Token:
    line, column = _position(starts, start)
    end_line, end_column = _position(starts, end - 1)
    value = text[start:end]
    if kind is TokenKind.COMMENT:
        value = value.rstrip("\r")
    return Token(
        kind=kind,
        text=value,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
    )
