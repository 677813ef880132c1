"""Lexical adapter protocol and the mutable builder adapters fill in."""

from __future__ import annotations

import abc
import re
from dataclasses import dataclass, field

from styleguard.source.lexer import Tokenizer, split_lines
from styleguard.source.models import (
    Block,
    BlockKind,
    Declaration,
    DeclarationKind,
    Line,
    SourceFile,
    SourceModel,
    Statement,
    StatementKind,
    Token,
    TokenKind,
    Visibility,
)
from styleguard.source.syntax import LanguageSyntax

_UPPER_NAME = re.compile(r"_*[A-Z][A-Z0-9_]*")


@dataclass
class StatementDraft:
    kind: StatementKind
    first: int
    last: int
    parent: int | None
    block: int | None = None


@dataclass
class BlockDraft:
    kind: BlockKind
    keyword: str
    name: str
    statement: int
    parent: int | None
    first: int
    header_end: int
    last: int = -1
    delimited: bool = True
    continues: bool = False
    body: list[int] = field(default_factory=list)


class ModelBuilder:
    """Collects statements and blocks while an adapter walks the tokens."""

    def __init__(self, tokens: list[Token], syntax: LanguageSyntax) -> None:
        self.tokens = tokens
        self.statements: list[StatementDraft] = []
        self.blocks: list[BlockDraft] = []
        self._syntax = syntax

    def add_statement(self, first: int, last: int, parent: int | None) -> int:
        kind = (
            StatementKind.RETURN
            if self.tokens[first].text in self._syntax.return_keywords
            else StatementKind.SIMPLE
        )
        self.statements.append(StatementDraft(kind, first, last, parent))
        self._attach(parent, len(self.statements) - 1)
        return len(self.statements) - 1

    def open_block(
        self,
        kind: BlockKind,
        keyword: str,
        name: str,
        first: int,
        header_end: int,
        parent: int | None,
        *,
        delimited: bool = True,
        continues: bool = False,
    ) -> int:
        index = len(self.blocks)
        statement = len(self.statements)
        self.statements.append(
            StatementDraft(StatementKind.BLOCK, first, header_end, parent, block=index)
        )
        self._attach(parent, statement)
        self.blocks.append(
            BlockDraft(
                kind=kind,
                keyword=keyword,
                name=name,
                statement=statement,
                parent=parent,
                first=first,
                header_end=header_end,
                delimited=delimited,
                continues=continues,
            )
        )
        return index

    def close_block(self, index: int, last: int) -> None:
        block = self.blocks[index]
        block.last = last
        self.statements[block.statement].last = last

    def freeze(
        self,
    ) -> tuple[tuple[Statement, ...], tuple[Block, ...], tuple[int, ...]]:
        tokens = self.tokens
        statements = tuple(
            Statement(
                index=i,
                kind=s.kind,
                first=s.first,
                last=s.last,
                start_line=tokens[s.first].line,
                end_line=tokens[s.last].end_line,
                parent=s.parent,
                block=s.block,
            )
            for i, s in enumerate(self.statements)
        )
        blocks = tuple(
            Block(
                index=i,
                kind=b.kind,
                keyword=b.keyword,
                name=b.name,
                statement=b.statement,
                parent=b.parent,
                first=b.first,
                header_end=b.header_end,
                last=b.last,
                start_line=tokens[b.first].line,
                start_column=tokens[b.first].column,
                end_line=tokens[b.last].end_line,
                end_column=tokens[b.last].end_column,
                delimited=b.delimited,
                continues=b.continues,
                body=tuple(b.body),
            )
            for i, b in enumerate(self.blocks)
        )
        top_level = tuple(
            i for i, s in enumerate(self.statements) if s.parent is None
        )
        return statements, blocks, top_level

    def _attach(self, parent: int | None, statement: int) -> None:
        if parent is not None:
            self.blocks[parent].body.append(statement)


class LexicalAdapter(abc.ABC):
    """Builds a ``SourceModel`` for one language.

    Subclasses provide block delimitation and declaration classification;
    tokenization is shared and driven entirely by the syntax table.
    """

    def __init__(self, syntax: LanguageSyntax) -> None:
        self.syntax = syntax
        self._tokenizer = Tokenizer(syntax)

    def tokenize(self, text: str) -> list[Token]:
        return self._tokenizer.tokenize(text)

    @abc.abstractmethod
    def delimit_blocks(
        self, tokens: list[Token], lines: tuple[Line, ...]
    ) -> ModelBuilder:
        """Group tokens into statements and a block tree."""

    @abc.abstractmethod
    def classify_declarations(self, builder: ModelBuilder) -> list[Declaration]:
        """Derive named declarations from the statement and block drafts."""

    def build(self, source: SourceFile) -> SourceModel:
        """Run the full pipeline. Raises ``ParseError`` on malformed input."""
        lines = split_lines(source.text)
        tokens = self.tokenize(source.text)
        builder = self.delimit_blocks(tokens, lines)
        declarations = self.classify_declarations(builder)
        declarations.sort(key=lambda d: (d.line, d.column))
        statements, blocks, top_level = builder.freeze()
        return SourceModel(
            source=source,
            lines=lines,
            tokens=tuple(tokens),
            statements=statements,
            blocks=blocks,
            declarations=tuple(declarations),
            top_level=top_level,
        )

    # Shared helpers

    def name_visibility(self, name: str) -> Visibility:
        """Visibility implied by naming conventions alone."""
        if name.startswith("#"):
            return Visibility.PRIVATE
        if self.syntax.underscore_visibility:
            if name.startswith("__") and not name.endswith("__"):
                return Visibility.PRIVATE
            if name.startswith("_") and not name.startswith("__"):
                return Visibility.PROTECTED
            return Visibility.PUBLIC
        if self.syntax.capitalized_visibility and name[:1].isalpha():
            return Visibility.PUBLIC if name[0].isupper() else Visibility.PRIVATE
        return Visibility.UNSPECIFIED

    def binding_kind(self, name: str, parent: BlockDraft | None) -> DeclarationKind:
        """Constants are recognised by all-uppercase names, not by keywords."""
        if _UPPER_NAME.fullmatch(name) and any(c.isalpha() for c in name):
            return DeclarationKind.CONSTANT
        if parent is not None and parent.kind is BlockKind.CLASS:
            return DeclarationKind.FIELD
        return DeclarationKind.VARIABLE

    def method_kind(
        self, name: str, parent: BlockDraft | None
    ) -> DeclarationKind:
        if name in self.syntax.constructor_names:
            return DeclarationKind.CONSTRUCTOR
        if parent is not None and parent.kind is BlockKind.CLASS and name == parent.name:
            return DeclarationKind.CONSTRUCTOR
        return DeclarationKind.METHOD


def declaration(
    name_token: Token,
    kind: DeclarationKind,
    visibility: Visibility,
    statement: StatementDraft,
    statement_index: int,
) -> Declaration:
    return Declaration(
        name=name_token.text,
        kind=kind,
        visibility=visibility,
        block=statement.parent,
        statement=statement_index,
        line=name_token.line,
        column=name_token.column,
    )


def code_indices(tokens: list[Token], first: int, last: int) -> list[int]:
    """Non-comment token indices in ``[first, last]``."""
    return [
        i for i in range(first, last + 1) if tokens[i].kind is not TokenKind.COMMENT
    ]
