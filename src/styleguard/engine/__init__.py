"""Check engine: evaluates rules across files and aggregates a report."""

from styleguard.engine.report import Report, RunStatus
from styleguard.engine.runner import UNPARSEABLE_RULE_ID, CheckEngine, check, collect_files

__all__ = [
    "UNPARSEABLE_RULE_ID",
    "CheckEngine",
    "Report",
    "RunStatus",
    "check",
    "collect_files",
]
