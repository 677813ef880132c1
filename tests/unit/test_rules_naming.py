"""Tests for naming-convention and verb-named-method."""

from __future__ import annotations

import pytest

from styleguard.rules.models import Severity
from styleguard.rules.naming import leading_word


class TestNamingConvention:
    def test_java_names(self, run_rule):
        text = """
            class user_account {
                private static final int MAX__SIZE = 10;
                private int Count;
                void DoThing() {
                    int Total = 0;
                }
            }
            interface IRepository {
            }
        """
        found = run_rule("naming-convention", text)
        assert [v.line for v in found] == [1, 2, 3, 4, 5, 8]
        assert found[0].message == (
            "Class name 'user_account' does not match ^[A-Z][A-Za-z0-9]*$"
        )
        assert found[1].message.startswith("Constant name 'MAX__SIZE'")
        assert found[3].message.startswith("Method name 'DoThing'")
        assert found[4].message.startswith("Variable name 'Total'")
        assert found[5].message == "Type name 'IRepository' must not use an 'I' prefix"

    def test_conforming_names(self, run_rule):
        text = """
            class Account {
                static final int MAX_SIZE = 10;
                private int count;

                Account() {
                }

                void deposit(int amount) {
                    int newTotal = count + amount;
                }
            }
        """
        assert run_rule("naming-convention", text) == []

    def test_interface_prefix_can_be_allowed(self, run_rule):
        text = "interface IRepository {\n}\n"
        assert run_rule("naming-convention", text, forbid_interface_prefix=False) == []

    def test_python_profile(self, run_rule):
        text = """
            class my_class:
                def DoIt(self):
                    badName = 1

                def __repr__(self):
                    return ""
        """
        found = run_rule("naming-convention", text, language="python")
        assert [v.line for v in found] == [1, 2, 3]

    def test_csharp_methods_are_pascal_case(self, run_rule):
        text = """
            class Store
            {
                public void Save()
                {
                }

                public void load()
                {
                }
            }
        """
        found = run_rule("naming-convention", text, language="csharp")
        assert len(found) == 1
        assert "'load'" in found[0].message

    def test_go_exported_names(self, run_rule):
        text = """
            type server struct {
                Addr string
            }

            func (s *server) Start() {
            }
        """
        assert run_rule("naming-convention", text, language="go") == []


VERBS = """
    class A {
        void fetchData() {
        }

        int total() {
            return 0;
        }

        public static void main(String[] args) {
        }

        boolean equals(Object other) {
            return true;
        }
    }
"""


class TestVerbNamedMethod:
    def test_flags_noun_names(self, run_rule):
        found = run_rule("verb-named-method", VERBS)
        assert len(found) == 1
        assert found[0].line == 5
        assert found[0].message == "Method name 'total' does not start with a verb ('total')"
        assert found[0].severity is Severity.ADVISORY
        assert found[0].advisory

    def test_empty_lexicon_reports_nothing(self, run_rule):
        assert run_rule("verb-named-method", VERBS, verbs=[]) == []

    def test_ignore_patterns(self, run_rule):
        found = run_rule("verb-named-method", VERBS, ignore=["^total$", "^main$", "^equals$"])
        assert found == []

    def test_custom_verbs(self, run_rule):
        text = """
            class A {
                void frobnicateAll() {
                }
            }
        """
        assert len(run_rule("verb-named-method", text)) == 1
        assert run_rule("verb-named-method", text, verbs=["Frobnicate"]) == []

    def test_constructors_are_not_checked(self, run_rule):
        text = """
            class Widget {
                Widget() {
                }
            }
        """
        assert run_rule("verb-named-method", text) == []

    def test_python_snake_case(self, run_rule):
        text = """
            def load_config():
                pass


            def config_path():
                pass
        """
        found = run_rule("verb-named-method", text, language="python")
        assert [v.line for v in found] == [5]


@pytest.mark.parametrize(
    "name, word",
    [
        ("getName", "get"),
        ("Save", "save"),
        ("HTTPServer", "http"),
        ("parse_value", "parse"),
        ("_private", "private"),
        ("#count", "count"),
        ("__init__", "init"),
        ("x", "x"),
        ("", ""),
    ],
)
def test_leading_word(name, word):
    assert leading_word(name) == word
