"""Error taxonomy shared by the loader, adapters and evaluator."""

from __future__ import annotations


class StyleGuardError(Exception):
    """Base class for all styleguard errors."""


class ConfigError(StyleGuardError):
    """Malformed configuration. Fatal: aborts the run before any file is scanned."""


class ParseError(StyleGuardError):
    """A file cannot be tokenized under its language profile."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"line {line}: {message}")
        self.message = message
        self.line = line


class RuleError(StyleGuardError):
    """A rule failed unexpectedly on an otherwise valid model."""

    def __init__(self, rule_id: str, path: str, cause: BaseException) -> None:
        super().__init__(f"rule '{rule_id}' failed on {path}: {cause!r}")
        self.rule_id = rule_id
        self.path = path
        self.cause = cause
