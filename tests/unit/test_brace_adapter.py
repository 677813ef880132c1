"""Tests for block delimitation and declarations in brace languages."""

from __future__ import annotations

import pytest

from styleguard.errors import ParseError
from styleguard.source.models import (
    BlockKind,
    DeclarationKind,
    StatementKind,
    Visibility,
)

JAVA_CLASS = """
    public class Account {
        private static final int LIMIT = 10;
        private int balance = 0;

        public Account(int start) {
            balance = start;
        }

        public int deposit(int amount) {
            if (amount > LIMIT) {
                return 0;
            } else if (amount < 0) {
                throw new IllegalArgumentException();
            } else {
                balance += amount;
            }

            return balance;
        }
    }
"""


class TestJavaStructure:
    def test_block_tree(self, make_model):
        model = make_model(JAVA_CLASS)
        kinds = [(b.kind, b.keyword, b.name) for b in model.blocks]
        assert kinds == [
            (BlockKind.CLASS, "class", "Account"),
            (BlockKind.METHOD, "", "Account"),
            (BlockKind.METHOD, "", "deposit"),
            (BlockKind.CONDITIONAL, "if", ""),
            (BlockKind.CONDITIONAL, "else if", ""),
            (BlockKind.CONDITIONAL, "else", ""),
        ]
        cls, ctor, deposit, if_block, elif_block, else_block = model.blocks
        assert cls.parent is None
        assert ctor.parent == deposit.parent == cls.index
        assert if_block.parent == deposit.index
        assert not if_block.continues
        assert elif_block.continues and else_block.continues

    def test_block_positions(self, make_model):
        model = make_model(JAVA_CLASS)
        cls = model.blocks[0]
        assert (cls.start_line, cls.end_line) == (1, 20)
        deposit = model.blocks[2]
        assert (deposit.start_line, deposit.end_line) == (9, 19)
        assert deposit.line_count == 11

    def test_statements_in_method_body(self, make_model):
        model = make_model(JAVA_CLASS)
        deposit = model.blocks[2]
        kinds = [model.statements[i].kind for i in deposit.body]
        assert kinds == [
            StatementKind.BLOCK,
            StatementKind.BLOCK,
            StatementKind.BLOCK,
            StatementKind.RETURN,
        ]

    def test_declarations(self, make_model):
        model = make_model(JAVA_CLASS)
        found = [(d.name, d.kind, d.visibility) for d in model.declarations]
        assert found == [
            ("Account", DeclarationKind.CLASS, Visibility.PUBLIC),
            ("LIMIT", DeclarationKind.CONSTANT, Visibility.PRIVATE),
            ("balance", DeclarationKind.FIELD, Visibility.PRIVATE),
            ("Account", DeclarationKind.CONSTRUCTOR, Visibility.PUBLIC),
            ("deposit", DeclarationKind.METHOD, Visibility.PUBLIC),
        ]

    def test_members_of_class(self, make_model):
        model = make_model(JAVA_CLASS)
        names = [d.name for d in model.members(0)]
        assert names == ["LIMIT", "balance", "Account", "deposit"]

    def test_condition_tokens(self, make_model):
        model = make_model(JAVA_CLASS)
        condition = [t.text for t in model.condition_tokens(model.blocks[3])]
        assert condition == ["(", "amount", ">", "LIMIT", ")"]

    def test_local_variables(self, make_model):
        model = make_model(
            """
            class A {
                void run() {
                    int total = 0;
                    List<String> names = new ArrayList<>();
                    total = 5;
                    helper(total);
                }
            }
            """
        )
        locals_ = [(d.name, d.kind) for d in model.declarations if d.block == 1]
        assert locals_ == [
            ("total", DeclarationKind.VARIABLE),
            ("names", DeclarationKind.VARIABLE),
        ]

    def test_annotations_belong_to_the_method(self, make_model):
        model = make_model(
            """
            class A {
                @Override
                public String toString() {
                    return "A";
                }
            }
            """
        )
        method = model.blocks[1]
        assert method.kind is BlockKind.METHOD
        assert method.start_line == 2
        assert model.tokens[method.first].text == "@"

    def test_array_initializer_is_not_a_block(self, make_model):
        model = make_model(
            """
            class A {
                int[] values = {1, 2, 3};
            }
            """
        )
        assert [b.kind for b in model.blocks] == [BlockKind.CLASS]
        assert model.declarations[-1].name == "values"


class TestBracelessBodies:
    def test_single_statement_body_is_not_delimited(self, make_model):
        model = make_model(
            """
            class A {
                void f(int x) {
                    if (x > 0)
                        x = 0;
                    for (int i = 0; i < x; i++) x--;
                }
            }
            """
        )
        if_block, for_block = model.blocks[2], model.blocks[3]
        assert if_block.kind is BlockKind.CONDITIONAL and not if_block.delimited
        assert (if_block.start_line, if_block.end_line) == (3, 4)
        assert for_block.kind is BlockKind.LOOP and not for_block.delimited
        assert for_block.start_line == for_block.end_line == 5

    def test_do_while(self, make_model):
        model = make_model(
            """
            void f() {
                do {
                    step();
                } while (busy());
                done();
            }
            """,
            "c",
        )
        loop = model.blocks[1]
        assert loop.kind is BlockKind.LOOP
        assert loop.end_line == 4
        assert len(model.blocks[0].body) == 2


class TestOtherLanguages:
    def test_javascript_without_semicolons(self, make_model):
        model = make_model(
            """
            const MAX = 50
            let count = 0

            class Counter {
              #value = 0

              constructor() {
                this.#value = MAX
              }

              increment() {
                this.#value++
              }
            }
            """,
            "javascript",
        )
        found = [(d.name, d.kind, d.visibility) for d in model.declarations]
        assert found == [
            ("MAX", DeclarationKind.CONSTANT, Visibility.UNSPECIFIED),
            ("count", DeclarationKind.VARIABLE, Visibility.UNSPECIFIED),
            ("Counter", DeclarationKind.CLASS, Visibility.UNSPECIFIED),
            ("#value", DeclarationKind.FIELD, Visibility.PRIVATE),
            ("constructor", DeclarationKind.CONSTRUCTOR, Visibility.UNSPECIFIED),
            ("increment", DeclarationKind.METHOD, Visibility.UNSPECIFIED),
        ]

    def test_javascript_object_literal_is_an_expression(self, make_model):
        model = make_model(
            """
            const options = {
              depth: 2,
            }
            run(options)
            """,
            "javascript",
        )
        assert model.blocks == ()
        assert len(model.top_level) == 2

    def test_go_structs_and_functions(self, make_model):
        model = make_model(
            """
            package main

            type Server struct {
                Addr string
                port int
            }

            func (s *Server) Start() error {
                if s.port == 0 {
                    return nil
                }

                return nil
            }
            """,
            "go",
        )
        kinds = [(b.kind, b.name) for b in model.blocks]
        assert kinds == [
            (BlockKind.CLASS, "Server"),
            (BlockKind.METHOD, "Start"),
            (BlockKind.CONDITIONAL, ""),
        ]
        fields = [(d.name, d.visibility) for d in model.declarations if d.kind is DeclarationKind.FIELD]
        assert fields == [("Addr", Visibility.PUBLIC), ("port", Visibility.PRIVATE)]

    def test_csharp_properties_and_namespaces(self, make_model):
        model = make_model(
            """
            namespace App
            {
                internal class Store
                {
                    public void Save()
                    {
                    }
                }
            }
            """,
            "csharp",
        )
        kinds = [b.kind for b in model.blocks]
        assert kinds == [BlockKind.OTHER, BlockKind.CLASS, BlockKind.METHOD]
        store = next(d for d in model.declarations if d.name == "Store")
        assert store.visibility is Visibility.PROTECTED


class TestParseErrors:
    def test_unclosed_block(self, make_model):
        with pytest.raises(ParseError) as exc:
            make_model("class A {\n  void f() {\n  }\n")
        assert exc.value.line == 1

    def test_unmatched_closing_brace(self, make_model):
        with pytest.raises(ParseError) as exc:
            make_model("int x;\n}\n", "c")
        assert exc.value.line == 2

    def test_control_without_body(self, make_model):
        with pytest.raises(ParseError):
            make_model("void f() {\n  if (x)\n}\n", "c")

    def test_unbalanced_parenthesis(self, make_model):
        with pytest.raises(ParseError):
            make_model("void f() {\n  if (x {\n}\n", "c")
