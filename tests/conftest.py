"""Shared test fixtures."""

from __future__ import annotations

import dataclasses
import textwrap
from pathlib import Path

import pytest

from styleguard.rules.registry import default_registry
from styleguard.ruleset.resolver import resolve_config
from styleguard.source.languages import build_model
from styleguard.source.models import SourceFile

_EXTENSIONS = {
    "java": "Sample.java",
    "javascript": "sample.js",
    "typescript": "sample.ts",
    "csharp": "Sample.cs",
    "go": "sample.go",
    "c": "sample.c",
    "python": "sample.py",
}


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def strict_config_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "strict_java.yaml"


@pytest.fixture
def simple_config_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "simple_config.yaml"


@pytest.fixture(scope="session")
def active_rules():
    return resolve_config()


@pytest.fixture
def make_model():
    """Build a SourceModel from dedented source text."""

    def _make(text: str, language: str = "java"):
        source = SourceFile(
            path=_EXTENSIONS[language],
            text=textwrap.dedent(text).lstrip("\n"),
            language=language,
        )
        return build_model(source)

    return _make


@pytest.fixture
def run_rule(make_model, active_rules):
    """Evaluate one rule on source text with the default settings of a language.

    Keyword arguments override individual params.
    """
    registry = default_registry()

    def _run(rule_id: str, text: str, language: str = "java", **params):
        settings = active_rules.settings(language, rule_id)
        if params:
            settings = dataclasses.replace(settings, params={**settings.params, **params})
        model = make_model(text, language)
        return registry.get(rule_id).evaluate(model, settings)

    return _run
