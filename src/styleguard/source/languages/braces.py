"""Adapter for brace-delimited languages (Java, JavaScript, C#, Go, C, ...)."""

from __future__ import annotations

from styleguard.errors import ParseError
from styleguard.source.languages.base import (
    BlockDraft,
    LexicalAdapter,
    ModelBuilder,
    StatementDraft,
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
    Visibility,
)
from styleguard.source.syntax import LanguageSyntax

_ASSIGNMENTS = frozenset(
    {"=", ":=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>=",
     ">>>=", "**=", "//=", "??="}
)

# Operators after which a "{" still opens a block (generics, pointers).
_TYPE_OPERATORS = frozenset({">", "*", "?"})

# Keywords after which a "{" starts an expression, not a block.
_EXPRESSION_KEYWORDS = frozenset(
    {"return", "throw", "yield", "case", "in", "of", "new", "await", "typeof"}
)

# Tokens that leave a statement open across a line break.
_CONTINUING = frozenset({",", "(", "["})


class BraceAdapter(LexicalAdapter):
    """Delimits blocks by braces; braceless control bodies are single statements."""

    def delimit_blocks(
        self, tokens: list[Token], lines: tuple[Line, ...]
    ) -> ModelBuilder:
        return _BraceParser(self.syntax, tokens).parse()

    def classify_declarations(self, builder: ModelBuilder) -> list[Declaration]:
        found: list[Declaration] = []
        tokens = builder.tokens

        for index, stmt in enumerate(builder.statements):
            parent = builder.blocks[stmt.parent] if stmt.parent is not None else None
            if stmt.kind is StatementKind.BLOCK:
                block = builder.blocks[stmt.block]
                decl = self._block_declaration(tokens, block, parent, stmt, index)
            else:
                decl = self._statement_declaration(tokens, parent, stmt, index)
            if decl is not None:
                found.append(decl)

        return found

    def _block_declaration(
        self,
        tokens: list[Token],
        block: BlockDraft,
        parent: BlockDraft | None,
        stmt: StatementDraft,
        index: int,
    ) -> Declaration | None:
        if not block.name or block.kind not in (BlockKind.CLASS, BlockKind.METHOD):
            return None

        header = code_indices(tokens, block.first, block.header_end - 1)
        name_index = next(
            (i for i in header if tokens[i].text == block.name), header[-1]
        )
        visibility = self._modifier_visibility(tokens, header, name_index)
        if visibility is Visibility.UNSPECIFIED:
            visibility = self.name_visibility(block.name)

        if block.kind is BlockKind.CLASS:
            kind = DeclarationKind.CLASS
        else:
            kind = self.method_kind(block.name, parent)
        return declaration(tokens[name_index], kind, visibility, stmt, index)

    def _statement_declaration(
        self,
        tokens: list[Token],
        parent: BlockDraft | None,
        stmt: StatementDraft,
        index: int,
    ) -> Declaration | None:
        head, terminator = self._declaration_head(tokens, stmt)
        visibility = Visibility.UNSPECIFIED
        bound = False
        pos = 0

        while pos < len(head):
            tok = head[pos]
            if tok.text == "@" and pos + 1 < len(head):
                pos = _skip_annotation(head, pos)
                continue
            if tok.kind is not TokenKind.KEYWORD:
                break
            if tok.text in self.syntax.visibility_keywords:
                visibility = self.syntax.visibility_keywords[tok.text]
            elif tok.text in self.syntax.binding_keywords:
                bound = True
            elif tok.text not in self.syntax.modifier_keywords:
                break
            pos += 1

        rest = head[pos:]
        name = self._declared_name(rest, terminator, bound, parent)
        if name is None:
            return None

        if visibility is Visibility.UNSPECIFIED:
            visibility = self.name_visibility(name.text)

        if name is not rest[-1] and _is_signature(rest):
            kind = self.method_kind(name.text, parent)
        else:
            kind = self.binding_kind(name.text, parent)
        return declaration(name, kind, visibility, stmt, index)

    def _declaration_head(
        self, tokens: list[Token], stmt: StatementDraft
    ) -> tuple[list[Token], str]:
        """Tokens before the first top-level assignment, ``;`` or ``,``."""
        head: list[Token] = []
        depth = 0
        for i in code_indices(tokens, stmt.first, stmt.last):
            tok = tokens[i]
            if tok.kind is TokenKind.DELIMITER and tok.text in "([{":
                depth += 1
            elif tok.kind is TokenKind.DELIMITER and tok.text in ")]}":
                depth -= 1
            elif depth == 0 and (tok.text in (";", ",") or tok.text in _ASSIGNMENTS):
                return head, tok.text
            head.append(tok)
        return head, ""

    def _declared_name(
        self,
        rest: list[Token],
        terminator: str,
        bound: bool,
        parent: BlockDraft | None,
    ) -> Token | None:
        if not rest:
            return None
        first = rest[0]
        in_class = parent is not None and parent.kind is BlockKind.CLASS

        if bound:
            return first if first.kind is TokenKind.IDENTIFIER else None

        if first.kind is TokenKind.IDENTIFIER and len(rest) == 1:
            if terminator == ":=" or (in_class and terminator in ("=", ";", "")):
                return first
            return None

        if len(rest) < 2:
            return None

        if first.kind is TokenKind.IDENTIFIER and rest[1].text == ":":
            return first

        if in_class and _is_signature(rest):
            return _signature_name(rest)

        if any(t.text in ("(", ".") and t is not rest[0] for t in rest[:-1]):
            return None

        if self.syntax.name_before_type:
            if in_class and first.kind is TokenKind.IDENTIFIER:
                return first
            return None

        last = rest[-1]
        before = rest[-2]
        if first.kind is TokenKind.KEYWORD and first.text not in self.syntax.type_keywords:
            return None
        if last.kind is not TokenKind.IDENTIFIER:
            return None
        if before.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD) or before.text in (
            ">", "]", "*", "&", "?",
        ):
            return last
        return None

    def _modifier_visibility(
        self, tokens: list[Token], header: list[int], stop: int
    ) -> Visibility:
        for i in header:
            if i >= stop:
                break
            text = tokens[i].text
            if tokens[i].kind is TokenKind.KEYWORD and text in self.syntax.visibility_keywords:
                return self.syntax.visibility_keywords[text]
        return Visibility.UNSPECIFIED


class _BraceParser:
    """Recursive-descent statement splitter over non-comment tokens."""

    def __init__(self, syntax: LanguageSyntax, tokens: list[Token]) -> None:
        self._syntax = syntax
        self._tokens = tokens
        self._code = [i for i, t in enumerate(tokens) if t.kind is not TokenKind.COMMENT]
        self._pos = 0
        self._builder = ModelBuilder(tokens, syntax)

    def parse(self) -> ModelBuilder:
        self._parse_body(None)
        return self._builder

    # Cursor helpers

    def _at_end(self) -> bool:
        return self._pos >= len(self._code)

    def _peek(self, offset: int = 0) -> Token | None:
        pos = self._pos + offset
        if pos < len(self._code):
            return self._tokens[self._code[pos]]
        return None

    def _index(self, pos: int | None = None) -> int:
        return self._code[self._pos if pos is None else pos]

    def _is(self, text: str, offset: int = 0) -> bool:
        tok = self._peek(offset)
        return tok is not None and tok.text == text and tok.kind is not TokenKind.STRING

    # Grammar

    def _parse_body(self, parent: int | None) -> None:
        while not self._at_end():
            if self._is("}"):
                if parent is None:
                    raise ParseError("unmatched '}'", self._peek().line)
                return
            if self._is(";"):
                self._pos += 1
                continue
            self._parse_statement(parent)

        if parent is not None:
            opener = self._tokens[self._builder.blocks[parent].first]
            raise ParseError("block opened here is never closed", opener.line)

    def _parse_statement(self, parent: int | None) -> int:
        tok = self._peek()
        if tok.kind is TokenKind.KEYWORD and tok.text in self._syntax.control_keywords:
            return self._parse_control(parent)
        if self._is("{"):
            return self._parse_braced(parent, self._pos, BlockKind.OTHER, "", "")

        start = self._pos
        depth = 0
        while not self._at_end():
            tok = self._peek()
            if tok.kind is TokenKind.DELIMITER:
                if tok.text in "([":
                    depth += 1
                elif tok.text in ")]":
                    depth = max(depth - 1, 0)
                elif tok.text == "{":
                    if depth == 0 and self._opens_block(start):
                        kind, keyword, name = self._classify_header(start)
                        return self._parse_braced(parent, start, kind, keyword, name)
                    depth += 1
                elif tok.text == "}":
                    if depth == 0:
                        return self._simple(start, self._pos - 1, parent)
                    depth -= 1
                elif tok.text == ";" and depth == 0:
                    self._pos += 1
                    return self._simple(start, self._pos - 1, parent)
            self._pos += 1
            if depth == 0 and self._syntax.newline_terminates and self._line_ends(start):
                return self._simple(start, self._pos - 1, parent)

        return self._simple(start, self._pos - 1, parent)

    def _parse_control(self, parent: int | None) -> int:
        start = self._pos
        keyword_token = self._peek()
        keyword = keyword_token.text
        continues = keyword in self._syntax.continuation_keywords
        self._pos += 1

        if keyword == "else" and self._is("if"):
            keyword = "else if"
            self._pos += 1
        elif keyword == "for" and self._is("await"):
            self._pos += 1
        kind = self._syntax.control_keywords[keyword.split()[-1]]

        if not self._syntax.paren_conditions:
            if keyword != "else":
                self._skip_to_brace()
        elif self._is("("):
            self._skip_group()

        if self._at_end() or self._is("}"):
            raise ParseError(f"'{keyword}' has no body", keyword_token.line)

        if self._is("{"):
            index = self._builder.open_block(
                kind, keyword, "", self._index(start), self._index(), parent,
                continues=continues,
            )
            self._pos += 1
            self._parse_body(index)
            self._builder.close_block(index, self._index())
            self._pos += 1
        else:
            index = self._builder.open_block(
                kind, keyword, "", self._index(start), self._index(), parent,
                delimited=False, continues=continues,
            )
            if self._is(";"):
                body = self._builder.add_statement(self._index(), self._index(), index)
                self._pos += 1
            else:
                body = self._parse_statement(index)
            self._builder.close_block(index, self._builder.statements[body].last)

        if keyword == "do" and self._is("while"):
            self._pos += 1
            if self._is("("):
                self._skip_group()
            if self._is(";"):
                self._pos += 1
            self._builder.close_block(index, self._index(self._pos - 1))

        return self._builder.blocks[index].statement

    def _parse_braced(
        self,
        parent: int | None,
        start: int,
        kind: BlockKind,
        keyword: str,
        name: str,
    ) -> int:
        index = self._builder.open_block(
            kind, keyword, name, self._index(start), self._index(), parent
        )
        self._pos += 1
        self._parse_body(index)
        self._builder.close_block(index, self._index())
        self._pos += 1
        return self._builder.blocks[index].statement

    def _simple(self, start: int, end: int, parent: int | None) -> int:
        return self._builder.add_statement(self._index(start), self._index(end), parent)

    def _skip_group(self) -> None:
        """Consume a balanced ``(...)`` group starting at the cursor."""
        opener = self._peek()
        depth = 0
        while not self._at_end():
            tok = self._peek()
            if tok.kind is TokenKind.DELIMITER and tok.text in "([{":
                depth += 1
            elif tok.kind is TokenKind.DELIMITER and tok.text in ")]}":
                depth -= 1
                if depth == 0:
                    self._pos += 1
                    return
            self._pos += 1
        raise ParseError("unbalanced parenthesis", opener.line)

    def _skip_to_brace(self) -> None:
        depth = 0
        while not self._at_end():
            tok = self._peek()
            if tok.kind is TokenKind.DELIMITER:
                if tok.text == "{" and depth == 0:
                    return
                if tok.text in "([{":
                    depth += 1
                elif tok.text in ")]}":
                    depth -= 1
            self._pos += 1

    def _opens_block(self, start: int) -> bool:
        """Whether the ``{`` at the cursor opens a block rather than an expression."""
        prev = self._tokens[self._index(self._pos - 1)]
        if prev.kind is TokenKind.OPERATOR and prev.text not in _TYPE_OPERATORS:
            return False
        if prev.kind is TokenKind.DELIMITER and prev.text in (",", "(", "["):
            return False
        if prev.kind is TokenKind.KEYWORD and prev.text in _EXPRESSION_KEYWORDS:
            return False

        depth = 0
        for pos in range(start, self._pos):
            tok = self._tokens[self._index(pos)]
            if tok.kind is TokenKind.DELIMITER and tok.text in "([{":
                depth += 1
            elif tok.kind is TokenKind.DELIMITER and tok.text in ")]}":
                depth -= 1
            elif depth == 0 and tok.kind is TokenKind.OPERATOR and tok.text in _ASSIGNMENTS:
                return False
            elif depth == 0 and tok.kind is TokenKind.KEYWORD and tok.text in _EXPRESSION_KEYWORDS:
                return False
        return True

    def _classify_header(self, start: int) -> tuple[BlockKind, str, str]:
        header = [self._tokens[self._index(p)] for p in range(start, self._pos)]

        depth = 0
        for i, tok in enumerate(header):
            if tok.kind is TokenKind.DELIMITER and tok.text in "([":
                depth += 1
            elif tok.kind is TokenKind.DELIMITER and tok.text in ")]":
                depth -= 1
            elif (
                depth == 0
                and tok.kind is TokenKind.KEYWORD
                and tok.text in self._syntax.class_keywords
            ):
                after = header[i + 1] if i + 1 < len(header) else None
                before = header[i - 1] if i > 0 else None
                if after is not None and after.kind is TokenKind.IDENTIFIER:
                    return BlockKind.CLASS, tok.text, after.text
                if before is not None and before.kind is TokenKind.IDENTIFIER:
                    return BlockKind.CLASS, tok.text, before.text
                return BlockKind.CLASS, tok.text, ""

        if _is_signature(header):
            return BlockKind.METHOD, "", _signature_name(header).text

        keyword = header[0].text if header[0].kind is TokenKind.KEYWORD else ""
        return BlockKind.OTHER, keyword, ""

    def _line_ends(self, start: int) -> bool:
        """Whether a line break after the token just consumed ends the statement."""
        if self._at_end() or self._tokens[self._index(start)].text == "@":
            return False
        current = self._tokens[self._index(self._pos - 1)]
        following = self._peek()
        if following.line == current.end_line:
            return False
        if current.kind is TokenKind.OPERATOR and current.text not in ("++", "--"):
            return False
        if current.kind is TokenKind.DELIMITER and current.text in _CONTINUING:
            return False
        if following.kind is TokenKind.OPERATOR and following.text not in ("++", "--", "!"):
            return False
        return following.text != "{"


def _skip_annotation(tokens: list[Token], pos: int) -> int:
    """Return the position just past an ``@Name(...)`` annotation."""
    pos += 2
    while pos + 1 < len(tokens) and tokens[pos].text == ".":
        pos += 2
    if pos < len(tokens) and tokens[pos].text == "(":
        depth = 0
        while pos < len(tokens):
            if tokens[pos].text == "(":
                depth += 1
            elif tokens[pos].text == ")":
                depth -= 1
                if depth == 0:
                    return pos + 1
            pos += 1
    return pos


def _signature_candidates(tokens: list[Token]):
    depth = 0
    pos = 0
    while pos < len(tokens):
        tok = tokens[pos]
        if tok.text == "@" and depth == 0:
            pos = _skip_annotation(tokens, pos)
            continue
        if tok.kind is TokenKind.DELIMITER and tok.text == "(":
            if depth == 0 and pos > 0 and tokens[pos - 1].kind is TokenKind.IDENTIFIER:
                yield tokens[pos - 1]
            depth += 1
        elif tok.kind is TokenKind.DELIMITER and tok.text == ")":
            depth -= 1
        pos += 1


def _is_signature(tokens: list[Token]) -> bool:
    """``name(`` at the top level of a header, ignoring annotations."""
    return next(_signature_candidates(tokens), None) is not None


def _signature_name(tokens: list[Token]) -> Token:
    return next(_signature_candidates(tokens))
