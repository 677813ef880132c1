"""Tests for the explanatory comment rule."""

from __future__ import annotations

from styleguard.rules.models import Severity

JAVA = """
    class A {
        void f(int a, int b) {
            // both flags must be set before we continue
            if (a > 0 && b > 0) {
                run();
            }

            // simple check
            if (a > 0) {
                run();
            }

            // detached comment

            if (a > 0 || b > 0) {
                run();
            }
        }
    }
"""


class TestExplanatoryComment:
    def test_comment_before_compound_condition(self, run_rule):
        found = run_rule("explanatory-comment", JAVA)
        assert len(found) == 1
        assert (found[0].line, found[0].column) == (3, 9)
        assert found[0].severity is Severity.ADVISORY
        assert found[0].advisory
        assert "named boolean" in found[0].message

    def test_operator_list_is_configurable(self, run_rule):
        found = run_rule("explanatory-comment", JAVA, operators=[">"])
        assert [v.line for v in found] == [3, 8]

    def test_python_keyword_operators(self, run_rule):
        text = """
            def f(a, b):
                # a and b are both required here
                if a and not b:
                    return 1
                return 0
        """
        found = run_rule("explanatory-comment", text, language="python")
        assert [v.line for v in found] == [2]

    def test_trailing_comment_on_previous_statement(self, run_rule):
        text = """
            void f(int a, int b) {
                int x = 1; // reset
                if (a > 0 && b > 0) {
                    x = 0;
                }
            }
        """
        assert run_rule("explanatory-comment", text, language="c") == []

    def test_python_trailing_comment(self, run_rule):
        text = """
            def f(a, b):
                x = [a, b]  # pair
                if a and b:
                    return x
                return None
        """
        assert run_rule("explanatory-comment", text, language="python") == []

    def test_loops_are_ignored(self, run_rule):
        text = """
            void f(int a, int b) {
                // keep going while both hold
                while (a > 0 && b > 0) {
                    a--;
                }
            }
        """
        assert run_rule("explanatory-comment", text, language="c") == []
