"""Adapter for indentation-delimited languages (Python)."""

from __future__ import annotations

from dataclasses import dataclass

from styleguard.errors import ParseError
from styleguard.source.languages.base import (
    BlockDraft,
    LexicalAdapter,
    ModelBuilder,
    code_indices,
    declaration,
)
from styleguard.source.models import (
    BlockKind,
    Declaration,
    DeclarationKind,
    Line,
    StatementKind,
    Token,
    TokenKind,
)
from styleguard.source.syntax import LanguageSyntax

_DEFINITIONS = {"def": BlockKind.METHOD, "class": BlockKind.CLASS}


@dataclass(frozen=True)
class _LogicalLine:
    """A logical line: physical lines joined by brackets or backslashes."""

    first: int
    last: int
    indent: int


class IndentAdapter(LexicalAdapter):
    """Delimits blocks by indentation suites introduced by a trailing colon."""

    def delimit_blocks(
        self, tokens: list[Token], lines: tuple[Line, ...]
    ) -> ModelBuilder:
        return _IndentParser(self.syntax, tokens, lines).parse()

    def classify_declarations(self, builder: ModelBuilder) -> list[Declaration]:
        found: list[Declaration] = []
        tokens = builder.tokens
        seen: dict[int | None, set[str]] = {}

        for index, stmt in enumerate(builder.statements):
            parent = builder.blocks[stmt.parent] if stmt.parent is not None else None

            if stmt.kind is StatementKind.BLOCK:
                block = builder.blocks[stmt.block]
                if block.keyword not in _DEFINITIONS or not block.name:
                    continue
                name_token = self._name_token(tokens, block)
                if block.kind is BlockKind.CLASS:
                    kind = DeclarationKind.CLASS
                else:
                    kind = self.method_kind(block.name, parent)
                visibility = self.name_visibility(block.name)
                found.append(declaration(name_token, kind, visibility, stmt, index))
                continue

            code = code_indices(tokens, stmt.first, stmt.last)
            if len(code) < 2:
                continue
            target, follower = tokens[code[0]], tokens[code[1]]
            if target.kind is not TokenKind.IDENTIFIER or follower.text not in ("=", ":"):
                continue
            scope = seen.setdefault(stmt.parent, set())
            if target.text in scope:
                continue
            scope.add(target.text)
            found.append(
                declaration(
                    target,
                    self.binding_kind(target.text, parent),
                    self.name_visibility(target.text),
                    stmt,
                    index,
                )
            )

        return found

    def _name_token(self, tokens: list[Token], block: BlockDraft) -> Token:
        for i in code_indices(tokens, block.first, block.header_end):
            tok = tokens[i]
            if tok.kind is TokenKind.KEYWORD and tok.text == block.keyword:
                return tokens[i + 1]
        return tokens[block.first]


class _IndentParser:
    """Builds the block tree from logical lines and their indentation."""

    def __init__(
        self, syntax: LanguageSyntax, tokens: list[Token], lines: tuple[Line, ...]
    ) -> None:
        self._syntax = syntax
        self._tokens = tokens
        self._lines = lines
        self._logical = self._logical_lines()
        self._builder = ModelBuilder(tokens, syntax)

    def parse(self) -> ModelBuilder:
        if not self._logical:
            return self._builder
        first = self._logical[0]
        if first.indent != 0:
            raise ParseError("unexpected indent", self._tokens[first.first].line)
        self._parse_suite(0, None)
        return self._builder

    def _logical_lines(self) -> list[_LogicalLine]:
        result: list[_LogicalLine] = []
        first: int | None = None
        previous = -1
        depth = 0

        for i, tok in enumerate(self._tokens):
            if tok.kind is TokenKind.COMMENT:
                continue
            if first is not None and depth == 0 and tok.line > self._tokens[previous].end_line:
                if not self._continued(previous):
                    result.append(self._logical(first, previous))
                    first = None
            if first is None:
                first = i
            if tok.kind is TokenKind.DELIMITER:
                if tok.text in "([{":
                    depth += 1
                elif tok.text in ")]}":
                    depth = max(depth - 1, 0)
            previous = i

        if first is not None:
            result.append(self._logical(first, previous))
        return result

    def _continued(self, index: int) -> bool:
        # Only a backslash right after the last code token joins lines.
        tok = self._tokens[index]
        rest = self._lines[tok.end_line - 1].text[tok.end_column:]
        return rest.strip() == "\\"

    def _logical(self, first: int, last: int) -> _LogicalLine:
        text = self._lines[self._tokens[first].line - 1].text.expandtabs(8)
        return _LogicalLine(first, last, len(text) - len(text.lstrip()))

    def _parse_suite(self, i: int, parent: int | None) -> int:
        indent = self._logical[i].indent
        while i < len(self._logical):
            line = self._logical[i]
            if line.indent < indent:
                return i
            if line.indent > indent:
                raise ParseError(
                    "inconsistent indentation", self._tokens[line.first].line
                )
            i = self._parse_line(i, parent)
        return i

    def _parse_line(self, i: int, parent: int | None) -> int:
        start = self._logical[i]
        j = i
        while self._tokens[self._logical[j].first].text == "@":
            j += 1
            if j >= len(self._logical) or self._logical[j].indent != start.indent:
                raise ParseError(
                    "decorator without a definition", self._tokens[start.first].line
                )

        header = self._logical[j]
        keyword_index = header.first
        keyword = self._tokens[keyword_index]
        if keyword.text == "async" and keyword_index < header.last:
            keyword_index = code_indices(self._tokens, keyword_index + 1, header.last)[0]
            keyword = self._tokens[keyword_index]

        colon = self._header_colon(header, keyword_index)
        if colon is None:
            if j != i:
                raise ParseError(
                    "decorator without a definition", self._tokens[start.first].line
                )
            self._add_simple(header.first, header.last, parent)
            return i + 1

        kind = _DEFINITIONS.get(keyword.text) or self._syntax.control_keywords[keyword.text]
        name = ""
        if keyword.text in _DEFINITIONS and keyword_index + 1 <= header.last:
            name = self._tokens[keyword_index + 1].text
        index = self._builder.open_block(
            kind,
            keyword.text,
            name,
            start.first,
            colon,
            parent,
            continues=keyword.text in self._syntax.continuation_keywords,
        )

        if colon < header.last:
            self._add_simple(colon + 1, header.last, index)
            self._builder.close_block(index, header.last)
            return j + 1

        following = j + 1
        if following >= len(self._logical) or self._logical[following].indent <= header.indent:
            raise ParseError("expected an indented block", keyword.line)
        end = self._parse_suite(following, index)
        self._builder.close_block(index, self._logical[end - 1].last)
        return end

    def _header_colon(self, header: _LogicalLine, keyword_index: int) -> int | None:
        """Index of the colon that ends a compound statement header."""
        keyword = self._tokens[keyword_index]
        if keyword.text not in _DEFINITIONS and keyword.text not in self._syntax.control_keywords:
            return None

        depth = 0
        for i in code_indices(self._tokens, keyword_index, header.last):
            tok = self._tokens[i]
            if tok.kind is TokenKind.DELIMITER and tok.text in "([{":
                depth += 1
            elif tok.kind is TokenKind.DELIMITER and tok.text in ")]}":
                depth -= 1
            elif depth == 0 and tok.kind is TokenKind.OPERATOR and tok.text == ":":
                # Soft keywords ("match", "case") only count when the colon ends the line.
                if keyword.kind is TokenKind.IDENTIFIER and i != header.last:
                    return None
                return i
        return None

    def _add_simple(self, first: int, last: int, parent: int | None) -> None:
        """Add statements for ``[first, last]``, split on top-level semicolons."""
        start = first
        depth = 0
        for i in code_indices(self._tokens, first, last):
            tok = self._tokens[i]
            if tok.kind is not TokenKind.DELIMITER:
                continue
            if tok.text in "([{":
                depth += 1
            elif tok.text in ")]}":
                depth -= 1
            elif tok.text == ";" and depth == 0:
                if i > start:
                    self._builder.add_statement(start, i, parent)
                start = i + 1
        code = code_indices(self._tokens, start, last)
        if code:
            self._builder.add_statement(code[0], code[-1], parent)
