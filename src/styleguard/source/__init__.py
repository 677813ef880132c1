"""Neutral source model and the lexical adapters that build it."""
