"""Tests for the indentation adapter."""

from __future__ import annotations

import pytest

from styleguard.errors import ParseError
from styleguard.source.languages import build_model
from styleguard.source.models import (
    BlockKind,
    DeclarationKind,
    SourceFile,
    StatementKind,
    Visibility,
)

MODULE = '''
    """Module docstring."""

    import os

    MAX_RETRIES = 3


    class Client(Base):
        timeout = 10

        def __init__(self, url):
            self.url = url

        @property
        def host(self):
            return self.url

        def _retry(self, attempt):
            if attempt > MAX_RETRIES and not os.environ.get("FORCE"):
                raise RuntimeError("too many")
            elif attempt == 0:
                pass
            else:
                attempt += 1

            return attempt

        def __fetch(self): return None
'''


class TestStructure:
    def test_blocks(self, make_model):
        model = make_model(MODULE, "python")
        kinds = [(b.kind, b.keyword, b.name) for b in model.blocks]
        assert kinds == [
            (BlockKind.CLASS, "class", "Client"),
            (BlockKind.METHOD, "def", "__init__"),
            (BlockKind.METHOD, "def", "host"),
            (BlockKind.METHOD, "def", "_retry"),
            (BlockKind.CONDITIONAL, "if", ""),
            (BlockKind.CONDITIONAL, "elif", ""),
            (BlockKind.CONDITIONAL, "else", ""),
            (BlockKind.METHOD, "def", "__fetch"),
        ]

    def test_block_extents(self, make_model):
        model = make_model(MODULE, "python")
        cls = model.blocks[0]
        assert (cls.start_line, cls.end_line) == (8, 28)
        host = model.blocks[2]
        # The decorator starts the block.
        assert (host.start_line, host.end_line) == (14, 16)
        fetch = model.blocks[-1]
        assert fetch.start_line == fetch.end_line == 28

    def test_continuation_clauses(self, make_model):
        model = make_model(MODULE, "python")
        if_block, elif_block, else_block = model.blocks[4:7]
        assert not if_block.continues
        assert elif_block.continues and else_block.continues
        assert if_block.parent == elif_block.parent == model.blocks[3].index

    def test_statement_kinds(self, make_model):
        model = make_model(MODULE, "python")
        retry = model.blocks[3]
        kinds = [model.statements[i].kind for i in retry.body]
        assert kinds == [
            StatementKind.BLOCK,
            StatementKind.BLOCK,
            StatementKind.BLOCK,
            StatementKind.RETURN,
        ]

    def test_condition_tokens(self, make_model):
        model = make_model(MODULE, "python")
        texts = [t.text for t in model.condition_tokens(model.blocks[4])]
        assert texts[:4] == ["attempt", ">", "MAX_RETRIES", "and"]
        assert texts[-1] == ")"

    def test_declarations(self, make_model):
        model = make_model(MODULE, "python")
        found = [(d.name, d.kind, d.visibility) for d in model.declarations]
        assert found == [
            ("MAX_RETRIES", DeclarationKind.CONSTANT, Visibility.PUBLIC),
            ("Client", DeclarationKind.CLASS, Visibility.PUBLIC),
            ("timeout", DeclarationKind.FIELD, Visibility.PUBLIC),
            ("__init__", DeclarationKind.CONSTRUCTOR, Visibility.PUBLIC),
            ("host", DeclarationKind.METHOD, Visibility.PUBLIC),
            ("_retry", DeclarationKind.METHOD, Visibility.PROTECTED),
            ("__fetch", DeclarationKind.METHOD, Visibility.PRIVATE),
        ]


class TestLogicalLines:
    def test_bracketed_continuation(self, make_model):
        model = make_model(
            """
            SETTINGS = {
                "a": 1,
                "b": 2,
            }
            value = compute(
                1,
                2,
            )
            """,
            "python",
        )
        spans = [(s.start_line, s.end_line) for s in model.statements]
        assert spans == [(1, 4), (5, 8)]

    def test_backslash_continuation(self, make_model):
        model = make_model("total = 1 + \\\n    2\nother = 3\n", "python")
        spans = [(s.start_line, s.end_line) for s in model.statements]
        assert spans == [(1, 2), (3, 3)]

    def test_backslash_in_trailing_comment_does_not_continue(self, make_model):
        model = make_model("x = 1  # C:\\\ny = 2\n", "python")
        spans = [(s.start_line, s.end_line) for s in model.statements]
        assert spans == [(1, 1), (2, 2)]
        assert [d.name for d in model.declarations] == ["x", "y"]

    def test_semicolons_split_statements(self, make_model):
        model = make_model("a = 1; b = 2\n", "python")
        assert len(model.statements) == 2

    def test_comments_do_not_affect_indentation(self, make_model):
        model = make_model(
            """
            def f():
            # flush-left comment
                return 1
            """,
            "python",
        )
        assert len(model.blocks[0].body) == 1

    def test_match_statement(self, make_model):
        model = make_model(
            """
            match command:
                case "go":
                    run()
                case _:
                    pass
            match = 3
            """,
            "python",
        )
        kinds = [b.kind for b in model.blocks]
        assert kinds == [BlockKind.SWITCH_CASE, BlockKind.OTHER, BlockKind.OTHER]
        assert model.statements[model.top_level[-1]].kind is StatementKind.SIMPLE


class TestIndentationErrors:
    def test_expected_indented_block(self, make_model):
        with pytest.raises(ParseError) as exc:
            make_model("def f():\nreturn 1\n", "python")
        assert exc.value.line == 1
        assert "indented block" in exc.value.message

    def test_inconsistent_dedent(self, make_model):
        with pytest.raises(ParseError) as exc:
            make_model("if x:\n        a = 1\n    b = 2\n", "python")
        assert exc.value.line == 3

    def test_unexpected_indent_at_top(self):
        source = SourceFile(path="a.py", text="\n    x = 1\n", language="python")
        with pytest.raises(ParseError) as exc:
            build_model(source)
        assert exc.value.line == 2
        assert exc.value.message == "unexpected indent"
