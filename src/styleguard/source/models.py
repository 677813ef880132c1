"""Neutral source model: an immutable, language-independent view of one file."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class TokenKind(enum.Enum):
    """Lexical category of a token."""

    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    NUMBER = "number"
    STRING = "string"
    COMMENT = "comment"
    OPERATOR = "operator"
    DELIMITER = "delimiter"
    REGEX = "regex"


class StatementKind(enum.Enum):
    SIMPLE = "simple"
    RETURN = "return"
    BLOCK = "block"


class BlockKind(enum.Enum):
    """Structural role of a block."""

    METHOD = "method"
    CONDITIONAL = "conditional"
    LOOP = "loop"
    TRY = "try"
    CLASS = "class"
    SWITCH_CASE = "switch-case"
    OTHER = "other"


class DeclarationKind(enum.Enum):
    CLASS = "class"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    FIELD = "field"
    VARIABLE = "variable"
    CONSTANT = "constant"


class Visibility(enum.Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class SourceFile:
    """A loaded file and the language profile it is checked under."""

    path: str
    text: str
    language: str


@dataclass(frozen=True)
class Line:
    """A physical line (1-based), without its line terminator."""

    number: int
    text: str

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class Token:
    """A lexical token. Columns are 1-based; the end position is inclusive."""

    kind: TokenKind
    text: str
    line: int
    column: int
    end_line: int
    end_column: int

    @property
    def is_literal(self) -> bool:
        return self.kind in (TokenKind.NUMBER, TokenKind.STRING)


@dataclass(frozen=True)
class Statement:
    """A logical statement; ``first``/``last`` are inclusive token indices."""

    index: int
    kind: StatementKind
    first: int
    last: int
    start_line: int
    end_line: int
    parent: int | None
    block: int | None = None


@dataclass(frozen=True)
class Block:
    """A delimited region of code.

    ``first`` is the first header token (annotations and decorators
    included), ``header_end`` is the token that opens the body (``{`` or the
    suite colon) and ``last`` is the final token of the body. ``body`` lists
    the indices of the statements directly inside the block.
    """

    index: int
    kind: BlockKind
    keyword: str
    name: str
    statement: int
    parent: int | None
    first: int
    header_end: int
    last: int
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    delimited: bool = True
    continues: bool = False
    body: tuple[int, ...] = ()

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class Declaration:
    """A named binding. ``block`` is the declaring block, ``None`` at file scope."""

    name: str
    kind: DeclarationKind
    visibility: Visibility
    block: int | None
    statement: int
    line: int
    column: int


@dataclass(frozen=True)
class SourceModel:
    """Everything rules are allowed to look at for one file."""

    source: SourceFile
    lines: tuple[Line, ...]
    tokens: tuple[Token, ...]
    statements: tuple[Statement, ...] = ()
    blocks: tuple[Block, ...] = ()
    declarations: tuple[Declaration, ...] = ()
    top_level: tuple[int, ...] = ()
    _positions: dict[int, int] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        for body in [self.top_level, *(b.body for b in self.blocks)]:
            for position, index in enumerate(body):
                self._positions[index] = position

    @property
    def path(self) -> str:
        return self.source.path

    @property
    def language(self) -> str:
        return self.source.language

    def line(self, number: int) -> Line:
        return self.lines[number - 1]

    def body(self, block: int | None) -> tuple[int, ...]:
        """Statement indices directly inside ``block`` (file scope for None)."""
        if block is None:
            return self.top_level
        return self.blocks[block].body

    def siblings(
        self, statement: Statement
    ) -> tuple[Statement | None, Statement | None]:
        """Return the statements immediately before and after ``statement``."""
        body = self.body(statement.parent)
        position = self._positions[statement.index]
        before = self.statements[body[position - 1]] if position > 0 else None
        after = (
            self.statements[body[position + 1]]
            if position + 1 < len(body)
            else None
        )
        return before, after

    def blank_lines_between(self, after_line: int, before_line: int) -> int:
        """Count blank lines strictly between two line numbers."""
        return sum(
            1
            for number in range(after_line + 1, before_line)
            if self.lines[number - 1].is_blank
        )

    def block_of(self, statement: Statement) -> Block | None:
        if statement.block is None:
            return None
        return self.blocks[statement.block]

    def condition_tokens(self, block: Block) -> tuple[Token, ...]:
        """Header tokens between the opening keyword and the body opener."""
        return tuple(
            t
            for t in self.tokens[block.first + 1 : block.header_end]
            if t.kind is not TokenKind.COMMENT
        )

    def members(self, block: int) -> tuple[Declaration, ...]:
        """Declarations made directly inside ``block``, in source order."""
        return tuple(d for d in self.declarations if d.block == block)
