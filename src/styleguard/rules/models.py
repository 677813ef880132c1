"""Rule output models: severities, violations and rule diagnostics."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_RANKS = {"advisory": 0, "warning": 1, "error": 2}


class Severity(enum.Enum):
    """Violation severity, ordered ``ADVISORY < WARNING < ERROR``."""

    ADVISORY = "advisory"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _RANKS[self.value]

    def at_most(self, ceiling: Severity) -> Severity:
        return self if self.rank <= ceiling.rank else ceiling


@dataclass(frozen=True)
class Violation:
    """One reported instance of a rule failing at a location."""

    rule_id: str
    path: str
    line: int
    column: int
    severity: Severity
    message: str
    advisory: bool = False

    @property
    def sort_key(self) -> tuple[int, int, str]:
        return (self.line, self.column, self.rule_id)

    def counts_toward(self, threshold: Severity) -> bool:
        """Whether this violation makes a run fail at *threshold*."""
        if self.advisory or self.severity is Severity.ADVISORY:
            return False
        return self.severity.rank >= threshold.rank


@dataclass(frozen=True)
class Diagnostic:
    """A rule that crashed on a file; reported apart from violations."""

    rule_id: str
    path: str
    message: str
