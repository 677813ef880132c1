"""StyleGuard: language-agnostic style-convention checking engine."""

__version__ = "0.1.0"
