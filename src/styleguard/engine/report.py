"""Report aggregation and its external representations."""

from __future__ import annotations

import enum
import json
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from styleguard.rules.models import Diagnostic, Severity, Violation


class RunStatus(enum.Enum):
    """Terminal status of a run; ``exit_code`` is what the CLI exits with."""

    SUCCESS = "success"
    VIOLATIONS_FOUND = "violations-found"
    CONFIGURATION_INVALID = "configuration-invalid"
    CANCELLED = "cancelled"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]


_EXIT_CODES = {
    RunStatus.SUCCESS: 0,
    RunStatus.VIOLATIONS_FOUND: 1,
    RunStatus.CONFIGURATION_INVALID: 2,
    RunStatus.CANCELLED: 3,
}


@dataclass(frozen=True)
class FileResult:
    """Sorted violations and rule diagnostics for one file."""

    path: str
    violations: tuple[Violation, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass
class Report:
    """Per-file results of a run, kept in the order paths were supplied.

    Workers insert whole files through ``add``; a file is either fully
    present or absent.
    """

    order: tuple[str, ...] = ()
    fail_on: Severity = Severity.WARNING
    files_scanned: int = 0
    files_skipped: int = 0
    cancelled: bool = False
    _results: dict[str, FileResult] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add(
        self,
        path: str,
        violations: Iterable[Violation] = (),
        diagnostics: Iterable[Diagnostic] = (),
        unless: threading.Event | None = None,
    ) -> bool:
        """Insert one file's results; refused once *unless* is set.

        A refused file counts as abandoned and marks the report cancelled.
        """
        result = FileResult(
            path=path,
            violations=tuple(sorted(violations, key=lambda v: v.sort_key)),
            diagnostics=tuple(sorted(diagnostics, key=lambda d: d.rule_id)),
        )
        with self._lock:
            if unless is not None and unless.is_set():
                self.cancelled = True
                return False
            self._results[path] = result
            self.files_scanned += 1
        return True

    def skip(self) -> None:
        with self._lock:
            self.files_skipped += 1

    def abandon(self) -> None:
        """Record a file dropped because the run was cancelled."""
        with self._lock:
            self.cancelled = True

    @property
    def files(self) -> list[FileResult]:
        """Results in supplied-path order."""
        return [self._results[p] for p in self.order if p in self._results]

    def violations(self, path: str | None = None) -> list[Violation]:
        if path is not None:
            result = self._results.get(path)
            return list(result.violations) if result else []
        return [v for result in self.files for v in result.violations]

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [d for result in self.files for d in result.diagnostics]

    def failing(self) -> list[Violation]:
        """Violations at or above the failing threshold, advisory ones excluded."""
        return [v for v in self.violations() if v.counts_toward(self.fail_on)]

    @property
    def status(self) -> RunStatus:
        if self.cancelled:
            return RunStatus.CANCELLED
        if self.failing():
            return RunStatus.VIOLATIONS_FOUND
        return RunStatus.SUCCESS

    def counts(self) -> dict[str, int]:
        counts = {s.value: 0 for s in Severity}
        for v in self.violations():
            counts[v.severity.value] += 1
        return counts

    def records(self) -> list[dict]:
        """Flat ``{file, line, column, ruleId, severity, message}`` records."""
        return [
            {
                "file": v.path,
                "line": v.line,
                "column": v.column,
                "ruleId": v.rule_id,
                "severity": v.severity.value,
                "message": v.message,
            }
            for v in self.violations()
        ]

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "failOn": self.fail_on.value,
            "filesScanned": self.files_scanned,
            "filesSkipped": self.files_skipped,
            "cancelled": self.cancelled,
            "violations": self.records(),
            "diagnostics": [
                {"file": d.path, "ruleId": d.rule_id, "message": d.message}
                for d in self.diagnostics
            ],
        }

    def to_json(self) -> str:
        """Stable JSON: no timestamps or durations, so equal runs give equal bytes."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False)

    def to_text(self) -> str:
        lines = [
            f"{v.path}:{v.line}:{v.column}: {v.severity.value}"
            f"{' (advisory)' if v.advisory else ''} [{v.rule_id}] {v.message}"
            for v in self.violations()
        ]
        lines.extend(
            f"{d.path}: diagnostic [{d.rule_id}] {d.message}" for d in self.diagnostics
        )
        return "\n".join(lines)
