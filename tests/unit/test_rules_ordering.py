"""Tests for declaration ordering."""

from __future__ import annotations


class TestDeclarationOrder:
    def test_constant_after_field(self, run_rule):
        text = """
            class A {
                private int count;
                public static final int MAX = 5;

                public A() {
                }

                public void run() {
                }
            }
        """
        found = run_rule("declaration-order", text)
        assert len(found) == 1
        assert found[0].line == 3
        assert found[0].message == "Constant 'MAX' is declared after fields"

    def test_well_ordered_class(self, run_rule):
        text = """
            class A {
                private static final int MAX = 5;
                private int count;

                public A() {
                }

                public void run() {
                }

                protected void check() {
                }

                private void helper() {
                }
            }
        """
        assert run_rule("declaration-order", text) == []

    def test_state_does_not_move_backwards(self, run_rule):
        text = """
            class A {
                private void helper() {
                }

                public void run() {
                }

                protected void check() {
                }
            }
        """
        found = run_rule("declaration-order", text)
        assert [v.message for v in found] == [
            "Public method 'run' is declared after private methods",
            "Protected method 'check' is declared after private methods",
        ]

    def test_custom_visibility_order(self, run_rule):
        text = """
            class A {
                private void helper() {
                }

                public void run() {
                }

                protected void check() {
                }
            }
        """
        found = run_rule(
            "declaration-order",
            text,
            visibility_order=["private", "protected", "public"],
        )
        assert [v.message for v in found] == [
            "Protected method 'check' is declared after public methods",
        ]

    def test_default_visibility(self, run_rule):
        text = """
            class A {
                private void helper() {
                }

                void run() {
                }
            }
        """
        found = run_rule("declaration-order", text)
        assert [v.message for v in found] == [
            "Method 'run' is declared after private methods",
        ]
        assert run_rule("declaration-order", text, default_visibility="private") == []

    def test_constructor_after_methods(self, run_rule):
        text = """
            class A {
                public void run() {
                }

                public A() {
                }
            }
        """
        found = run_rule("declaration-order", text)
        assert [v.message for v in found] == [
            "Constructor 'A' is declared after public methods",
        ]

    def test_nested_classes_are_checked_separately(self, run_rule):
        text = """
            class Outer {
                public void run() {
                }

                static class Inner {
                    private int value;
                    static final int LIMIT = 1;
                }
            }
        """
        found = run_rule("declaration-order", text)
        assert [v.message for v in found] == [
            "Constant 'LIMIT' is declared after fields",
        ]

    def test_python_class(self, run_rule):
        text = """
            class A:
                def run(self):
                    pass

                LIMIT = 3
        """
        found = run_rule("declaration-order", text, language="python")
        assert [v.message for v in found] == [
            "Constant 'LIMIT' is declared after public methods",
        ]
