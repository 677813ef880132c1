"""Check engine: orchestrates parsing and rule evaluation across files."""

from __future__ import annotations

import fnmatch
import logging
import os
import threading
import time
from collections.abc import Iterable
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from pathlib import Path

from styleguard.engine.evaluator import Evaluation, Evaluator
from styleguard.engine.report import Report
from styleguard.errors import ParseError
from styleguard.rules.models import Severity, Violation
from styleguard.rules.registry import RuleRegistry, default_registry
from styleguard.ruleset.models import ActiveRuleSet, Configuration
from styleguard.ruleset.resolver import resolve_config
from styleguard.source.languages import build_model
from styleguard.source.lexer import split_lines
from styleguard.source.models import SourceFile
from styleguard.source.syntax import detect_language

logger = logging.getLogger(__name__)

UNPARSEABLE_RULE_ID = "unparseable-file"

# Directories to always skip
_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".venv",
    "venv",
    "dist",
    "build",
    ".tox",
    ".eggs",
}

# Max file size to check (1 MB)
_MAX_FILE_SIZE = 1_048_576

# How often the scheduler wakes to look at the cancel flag and the deadline.
_POLL_INTERVAL = 0.1


def collect_files(
    paths: Iterable[str | Path], exclude: Iterable[str] = ()
) -> tuple[list[str], int]:
    """Expand *paths* into checkable files.

    Explicit files keep their supplied order; directories expand to a
    sorted walk. Returns the files and the number of explicit files skipped
    because their language is unknown or they exceed the size cap.
    """
    patterns = tuple(exclude)
    files: list[str] = []
    seen: set[str] = set()
    skipped = 0

    def add(path: str) -> None:
        if path not in seen:
            seen.add(path)
            files.append(path)

    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for found in _walk(path, patterns):
                add(str(found))
            continue
        if _excluded(path, patterns):
            continue
        if detect_language(path) is None:
            logger.debug("Skipping %s: unsupported file type", path)
            skipped += 1
            continue
        if _too_large(path):
            skipped += 1
            continue
        add(str(raw))
    return files, skipped


def _walk(directory: Path, patterns: tuple[str, ...]):
    """Walk directory yielding files in a supported language, sorted."""
    for root, dirs, names in os.walk(directory):
        # Prune skipped directories in-place
        dirs[:] = sorted(
            d
            for d in dirs
            if d not in _SKIP_DIRS
            and not d.endswith(".egg-info")
            and not _excluded(Path(root) / d, patterns)
        )

        for name in sorted(names):
            path = Path(root) / name
            if detect_language(path) is None or _excluded(path, patterns):
                continue
            if _too_large(path):
                continue
            yield path


def _too_large(path: Path) -> bool:
    try:
        size = path.stat().st_size
    except OSError:
        # Left to the reader, which counts the file as skipped.
        return False
    if size > _MAX_FILE_SIZE:
        logger.debug("Skipping %s: larger than %d bytes", path, _MAX_FILE_SIZE)
        return True
    return False


def _excluded(path: Path, patterns: tuple[str, ...]) -> bool:
    return any(
        fnmatch.fnmatch(path.name, p) or fnmatch.fnmatch(path.as_posix(), p)
        for p in patterns
    )


class CheckEngine:
    """Checks files in parallel against a resolved rule set.

    Each file is read, parsed and evaluated independently on a worker
    thread; the only shared state is the report, which serialises inserts.
    """

    def __init__(
        self,
        rules: ActiveRuleSet,
        registry: RuleRegistry | None = None,
        jobs: int | None = None,
    ) -> None:
        self.rules = rules
        self.registry = registry if registry is not None else default_registry()
        self.jobs = jobs
        self._evaluator = Evaluator(self.registry, rules)

    def check(
        self,
        paths: Iterable[str | Path],
        *,
        cancel: threading.Event | None = None,
        timeout: float | None = None,
    ) -> Report:
        """Check *paths* and return the report.

        Setting *cancel*, or running past *timeout* seconds, stops the run:
        files already evaluated stay in the report, files in flight are
        dropped and the report is marked cancelled.
        """
        files, unsupported = collect_files(paths, self.rules.exclude)
        report = Report(order=tuple(files), fail_on=self.rules.fail_on)
        report.files_skipped = unsupported
        cancel = cancel if cancel is not None else threading.Event()
        deadline = time.monotonic() + timeout if timeout is not None else None

        logger.debug("Checking %d files with %s workers", len(files), self.jobs or "default")
        pool = ThreadPoolExecutor(max_workers=self.jobs, thread_name_prefix="styleguard")
        try:
            pending = {
                pool.submit(self._run_file, path, report, cancel)
                for path in self._schedule(files)
            }
            while pending:
                if deadline is not None and time.monotonic() >= deadline:
                    logger.info("Timeout of %ss reached, cancelling", timeout)
                    cancel.set()
                if cancel.is_set():
                    report.cancelled = True
                    break
                done, pending = wait(pending, timeout=_POLL_INTERVAL, return_when=FIRST_COMPLETED)
                for future in done:
                    future.result()
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

        return report

    def check_file(self, path: str) -> Evaluation | None:
        """Parse and evaluate one file; None when it cannot be read."""
        language = detect_language(path)
        if language is None:
            return None
        try:
            text = Path(path).read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.debug("Skipping %s: %s", path, e)
            return None

        source = SourceFile(path=path, text=text, language=language)
        try:
            model = build_model(source)
        except ParseError as e:
            logger.info("Cannot parse %s: %s", path, e)
            return Evaluation(violations=(_unparseable(source, e),))
        except Exception as e:
            logger.warning("Adapter failed on %s", path, exc_info=True)
            error = ParseError(f"{type(e).__name__}: {e}", 1)
            return Evaluation(violations=(_unparseable(source, error),))
        return self._evaluator.evaluate(model)

    def _run_file(self, path: str, report: Report, cancel: threading.Event) -> None:
        if cancel.is_set():
            report.abandon()
            return
        evaluation = self.check_file(path)
        if evaluation is None:
            report.skip()
            return
        report.add(path, evaluation.violations, evaluation.diagnostics, unless=cancel)

    def _schedule(self, files: list[str]) -> list[str]:
        """Order in which files are submitted to the pool."""
        return list(files)


def check(
    paths: Iterable[str | Path],
    config: Configuration | ActiveRuleSet | None = None,
    *,
    jobs: int | None = None,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
    registry: RuleRegistry | None = None,
) -> Report:
    """Check *paths* under *config*.

    The configuration is resolved before any file is touched, so a
    malformed one raises ``ConfigError`` without scanning anything.
    """
    rules = config if isinstance(config, ActiveRuleSet) else resolve_config(config, registry)
    engine = CheckEngine(rules, registry=registry, jobs=jobs)
    return engine.check(paths, cancel=cancel, timeout=timeout)


def _unparseable(source: SourceFile, error: ParseError) -> Violation:
    last = max(len(split_lines(source.text)), 1)
    return Violation(
        rule_id=UNPARSEABLE_RULE_ID,
        path=source.path,
        line=min(max(error.line, 1), last),
        column=1,
        severity=Severity.ERROR,
        message=f"Cannot parse as {source.language}: {error.message}",
    )
