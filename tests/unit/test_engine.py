"""Tests for the check engine, file collection and the evaluator."""

from __future__ import annotations

import random
import threading
from pathlib import Path

import pytest

from styleguard.engine import UNPARSEABLE_RULE_ID, CheckEngine, RunStatus, check, collect_files
from styleguard.engine.evaluator import Evaluator
from styleguard.errors import ConfigError
from styleguard.rules.base import Rule
from styleguard.rules.layout import LineLengthRule
from styleguard.rules.models import Severity
from styleguard.rules.registry import RuleRegistry, default_registry
from styleguard.ruleset.models import Configuration
from styleguard.ruleset.resolver import resolve

LONG_COMMENT = "// " + "x" * 130


class ExplodingRule(Rule):
    id = "exploding"
    description = "Fails on every file."

    def evaluate(self, model, settings):
        raise RuntimeError("boom")


class CancellingRule(Rule):
    id = "cancelling"
    description = "Sets the cancel event once it reaches a given file."

    def __init__(self, cancel: threading.Event, trigger: str) -> None:
        self.cancel = cancel
        self.trigger = trigger

    def evaluate(self, model, settings):
        if Path(model.path).name == self.trigger:
            self.cancel.set()
        return []


class ShuffledEngine(CheckEngine):
    """Submits files in a random order."""

    def _schedule(self, files):
        shuffled = list(files)
        random.Random(7).shuffle(shuffled)
        return shuffled


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "Good.java").write_text("class Good {\n}\n")
    (tmp_path / "Long.java").write_text(f"class Long {{\n}}\n{LONG_COMMENT}\n")
    (tmp_path / "Broken.java").write_text("class Broken {\n  void f() {\n")
    (tmp_path / "notes.txt").write_text("not code\n")
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "util.py").write_text("def load():\n    return 1\n")
    (pkg / "bad.py").write_text("def f():\nreturn 1\n")
    for i in range(6):
        (pkg / f"Mod{i}.java").write_text(f"class Mod{i} {{\n}}\n{LONG_COMMENT}\n")
    return tmp_path


class TestCollectFiles:
    def test_directory_walk_is_sorted_and_known_only(self, project):
        files, skipped = collect_files([project])
        names = [Path(f).relative_to(project).as_posix() for f in files]
        assert names[:3] == ["Broken.java", "Good.java", "Long.java"]
        assert names[3:] == sorted(names[3:])
        assert "notes.txt" not in names
        assert skipped == 0

    def test_skip_dirs_are_pruned(self, project):
        modules = project / "node_modules"
        modules.mkdir()
        (modules / "lib.js").write_text("let a = 1\n")
        files, _ = collect_files([project])
        assert not any("node_modules" in f for f in files)

    def test_explicit_files_keep_order(self, project):
        good, long_ = project / "Good.java", project / "Long.java"
        files, skipped = collect_files([long_, good, long_])
        assert files == [str(long_), str(good)]
        assert skipped == 0

    def test_explicit_unknown_file_is_counted(self, project):
        files, skipped = collect_files([project / "notes.txt"])
        assert files == []
        assert skipped == 1

    def test_oversized_explicit_file_is_skipped(self, project):
        big = project / "Big.java"
        big.write_text("// filler\n" * 110_000)
        files, skipped = collect_files([big, project / "Good.java"])
        assert files == [str(project / "Good.java")]
        assert skipped == 1

    def test_oversized_file_is_pruned_from_walk(self, project):
        (project / "Big.java").write_text("// filler\n" * 110_000)
        files, _ = collect_files([project])
        assert str(project / "Big.java") not in files

    def test_exclude_patterns(self, project):
        files, _ = collect_files([project], exclude=["Mod*.java", "*/pkg/bad.py"])
        names = [Path(f).name for f in files]
        assert "Mod0.java" not in names
        assert "bad.py" not in names
        assert "util.py" in names


class TestCheckEngine:
    def test_report_contents(self, project, active_rules):
        report = CheckEngine(active_rules).check([project])
        assert report.files_scanned == 11
        assert report.status is RunStatus.VIOLATIONS_FOUND
        assert report.violations(str(project / "Good.java")) == []

        long_ = report.violations(str(project / "Long.java"))
        assert [(v.rule_id, v.line, v.severity) for v in long_] == [
            ("line-length", 3, Severity.ERROR),
        ]

    def test_parse_errors_become_violations(self, project, active_rules):
        engine = CheckEngine(active_rules)
        report = engine.check([project / "Broken.java", project / "pkg" / "bad.py"])
        found = report.violations()
        assert [v.rule_id for v in found] == [UNPARSEABLE_RULE_ID] * 2
        assert all(v.severity is Severity.ERROR for v in found)
        assert found[0].message.startswith("Cannot parse as java:")
        assert found[1].line == 1
        assert "indented block" in found[1].message

    def test_rule_failure_is_isolated(self, project):
        registry = RuleRegistry([ExplodingRule(), LineLengthRule()])
        rules = resolve(Configuration(name="bare"), registry=registry)
        report = CheckEngine(rules, registry=registry).check([project / "Long.java"])
        assert [d.rule_id for d in report.diagnostics] == ["exploding"]
        assert "boom" in report.diagnostics[0].message
        assert [v.rule_id for v in report.violations()] == ["line-length"]

    def test_results_do_not_depend_on_scheduling(self, project, active_rules):
        serial = CheckEngine(active_rules, jobs=1).check([project])
        shuffled = ShuffledEngine(active_rules, jobs=4).check([project])
        assert serial.to_json() == shuffled.to_json()
        assert serial.to_json() == serial.to_json()

    def test_pre_set_cancel(self, project, active_rules):
        cancel = threading.Event()
        cancel.set()
        report = CheckEngine(active_rules).check([project], cancel=cancel)
        assert report.cancelled
        assert report.status is RunStatus.CANCELLED
        assert report.files_scanned == 0

    def test_timeout_cancels(self, project, active_rules):
        report = CheckEngine(active_rules).check([project], timeout=0)
        assert report.status is RunStatus.CANCELLED
        assert report.status.exit_code == 3

    def test_cancel_midway_keeps_finished_files(self, project):
        cancel = threading.Event()
        registry = RuleRegistry([CancellingRule(cancel, "Mod2.java"), LineLengthRule()])
        rules = resolve(Configuration(name="bare"), registry=registry)
        files = [project / "pkg" / f"Mod{i}.java" for i in range(5)]
        report = CheckEngine(rules, registry=registry, jobs=1).check(files, cancel=cancel)
        assert [Path(r.path).name for r in report.files] == ["Mod0.java", "Mod1.java"]
        assert report.files_scanned == 2
        assert report.violations(str(files[2])) == []
        assert [v.rule_id for v in report.violations()] == ["line-length"] * 2
        assert report.status is RunStatus.CANCELLED

    def test_adapter_crash_is_contained(self, project, active_rules):
        deep = project / "Deep.java"
        deep.write_text("class Deep {\n" + "{\n" * 1500 + "}\n" * 1500 + "}\n")
        good = project / "Good.java"
        report = CheckEngine(active_rules).check([good, deep])
        assert report.files_scanned == 2
        assert report.violations(str(good)) == []
        found = report.violations(str(deep))
        assert [(v.rule_id, v.line) for v in found] == [(UNPARSEABLE_RULE_ID, 1)]
        assert "RecursionError" in found[0].message
        assert report.status is RunStatus.VIOLATIONS_FOUND

    def test_unexpected_adapter_error_is_contained(self, project, active_rules, monkeypatch):
        def fail(source):
            raise ValueError("adapter bug")

        monkeypatch.setattr("styleguard.engine.runner.build_model", fail)
        report = CheckEngine(active_rules).check([project / "Good.java"])
        found = report.violations()
        assert [v.rule_id for v in found] == [UNPARSEABLE_RULE_ID]
        assert found[0].message.endswith("ValueError: adapter bug")

    def test_unknown_explicit_files_are_skipped(self, project, active_rules):
        report = CheckEngine(active_rules).check([project / "notes.txt", project / "Good.java"])
        assert report.files_scanned == 1
        assert report.files_skipped == 1
        assert report.status is RunStatus.SUCCESS


class TestCheckFunction:
    def test_uses_configuration(self, project):
        config = Configuration(rules={"line-length": {"enabled": False}})
        report = check([project / "Long.java"], config)
        assert report.status is RunStatus.SUCCESS

    def test_invalid_configuration_raises_before_scanning(self, project):
        with pytest.raises(ConfigError):
            check([project], Configuration(rules={"nope": {}}))

    def test_exclude_from_configuration(self, project):
        config = Configuration(exclude=("Broken.java", "bad.py", "Long.java", "Mod*.java"))
        assert check([project], config).status is RunStatus.SUCCESS


class TestEvaluator:
    def test_violations_are_sorted(self, make_model, active_rules):
        model = make_model(
            """
            class A {
                void f(int x) {
                    if (x > 5)
                        x = 0;
                }
            }
            """
        )
        evaluation = Evaluator(default_registry(), active_rules).evaluate(model)
        keys = [v.sort_key for v in evaluation.violations]
        assert keys == sorted(keys)
        assert {v.rule_id for v in evaluation.violations} >= {"block-delimiter", "magic-literal"}
