"""Language adapters and the registry that selects one per language."""

from __future__ import annotations

from functools import cache

from styleguard.source.languages.base import LexicalAdapter
from styleguard.source.languages.braces import BraceAdapter
from styleguard.source.languages.python import IndentAdapter
from styleguard.source.models import SourceFile, SourceModel
from styleguard.source.syntax import SYNTAXES, get_syntax

_ADAPTERS: dict[str, type[LexicalAdapter]] = {
    "braces": BraceAdapter,
    "indent": IndentAdapter,
}


@cache
def get_adapter(language: str) -> LexicalAdapter:
    """Return the shared adapter for *language*. Raises ``KeyError`` if unknown."""
    syntax = get_syntax(language)
    return _ADAPTERS[syntax.block_style](syntax)


def supported_languages() -> list[str]:
    return sorted(SYNTAXES)


def build_model(source: SourceFile) -> SourceModel:
    """Parse *source* into a ``SourceModel``. Raises ``ParseError``."""
    return get_adapter(source.language).build(source)


__all__ = [
    "BraceAdapter",
    "IndentAdapter",
    "LexicalAdapter",
    "build_model",
    "get_adapter",
    "supported_languages",
]
