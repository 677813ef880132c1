"""Load Configuration objects from YAML files."""

from __future__ import annotations

import importlib.resources
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from styleguard.errors import ConfigError
from styleguard.rules.models import Severity
from styleguard.ruleset.models import Configuration, deep_merge

_PRESET_PREFIX = "preset:"

_TOP_LEVEL_KEYS = {"name", "extends", "fail_on", "exclude", "rules", "languages"}


def load_config(path: str | Path, _resolved: set[str] | None = None) -> Configuration:
    """Load a configuration from a YAML file path, resolving ``extends``."""
    path = Path(path)
    data = _read_document(path)
    merged = _resolve_extends(
        data, path.parent, str(path.resolve()), _resolved if _resolved is not None else set()
    )
    return _build_config(merged, source=path)


def load_config_from_string(text: str, base_dir: str | Path = ".") -> Configuration:
    """Parse a YAML string into a Configuration, resolving ``extends``."""
    data = _parse(text, "<string>")
    merged = _resolve_extends(data, Path(base_dir), "<string>", set())
    return _build_config(merged, source=None)


def load_defaults() -> Configuration:
    """The built-in language profiles shipped with the package."""
    text = importlib.resources.files("styleguard.ruleset").joinpath("defaults.yaml")
    data = _parse(text.read_text(encoding="utf-8"), "defaults.yaml")
    return _build_config(data, source=None)


def available_presets() -> list[str]:
    pkg = importlib.resources.files("styleguard.ruleset.presets")
    return sorted(
        entry.name[: -len(".yaml")]
        for entry in pkg.iterdir()
        if entry.name.endswith(".yaml")
    )


def _read_document(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration {path}: {e}") from e
    return _parse(text, str(path))


def _parse(text: str, origin: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {origin}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {origin} must be a mapping")
    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigError(f"Unknown configuration key(s) in {origin}: {', '.join(unknown)}")
    return data


def _resolve_extends(
    data: dict[str, Any], base_dir: Path, key: str, _resolved: set[str]
) -> dict[str, Any]:
    # Circular inheritance detection
    if key in _resolved:
        raise ConfigError(f"Circular configuration inheritance detected: {key}")
    _resolved.add(key)

    own = _absolute_lexicons(data, base_dir)
    extends = own.get("extends", [])
    if isinstance(extends, str):
        extends = [extends]
    if not isinstance(extends, list):
        raise ConfigError("'extends' must be a string or a list")

    # Parents first, in order; own keys last so they win.
    merged: dict[str, Any] = {}
    for ref in extends:
        merged = deep_merge(merged, _load_ref(str(ref), base_dir, _resolved))
    merged = deep_merge(merged, own)
    merged["extends"] = list(extends)
    # Only ancestors count as a cycle; shared parents may be reached twice.
    _resolved.discard(key)
    return merged


def _load_ref(ref: str, base_dir: Path, _resolved: set[str]) -> dict[str, Any]:
    if ref.startswith(_PRESET_PREFIX):
        return _load_preset(ref[len(_PRESET_PREFIX) :], _resolved)
    # Treat as file path, relative to the referencing file
    path = Path(ref).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    data = _read_document(path)
    return _resolve_extends(data, path.parent, str(path.resolve()), _resolved)


def _load_preset(name: str, _resolved: set[str]) -> dict[str, Any]:
    pkg = importlib.resources.files("styleguard.ruleset.presets")
    resource = pkg.joinpath(f"{name}.yaml")
    if not resource.is_file():
        raise ConfigError(f"Unknown preset: {name}")
    data = _parse(resource.read_text(encoding="utf-8"), f"preset:{name}")
    return _resolve_extends(data, Path("."), f"{_PRESET_PREFIX}{name}", _resolved)


def _absolute_lexicons(data: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Anchor relative ``lexicon_file`` params to the declaring file's directory."""
    data = deep_merge({}, data)
    entries: list[Any] = []
    if isinstance(data.get("rules"), dict):
        entries.extend(data["rules"].values())
    if isinstance(data.get("languages"), dict):
        for table in data["languages"].values():
            if isinstance(table, Mapping):
                entries.extend(table.values())
    for entry in entries:
        if not isinstance(entry, dict) or not isinstance(entry.get("params"), dict):
            continue
        lexicon = entry["params"].get("lexicon_file")
        if isinstance(lexicon, str) and lexicon:
            path = Path(lexicon).expanduser()
            if not path.is_absolute():
                entry["params"]["lexicon_file"] = str(base_dir / path)
    return data


def _build_config(data: dict[str, Any], source: Path | None) -> Configuration:
    fail_on = data.get("fail_on")
    if fail_on is not None:
        fail_on = parse_severity(fail_on, "fail_on")

    exclude = data.get("exclude") or []
    if isinstance(exclude, str):
        exclude = [exclude]
    if not isinstance(exclude, list):
        raise ConfigError("'exclude' must be a list of glob patterns")

    rules = _entry_table(data.get("rules"), "rules")
    languages_raw = data.get("languages") or {}
    if not isinstance(languages_raw, dict):
        raise ConfigError("'languages' must be a mapping of language to rules")
    languages = {
        str(lang): _entry_table(table, f"languages.{lang}")
        for lang, table in languages_raw.items()
    }

    return Configuration(
        name=str(data.get("name", "unnamed")),
        fail_on=fail_on,
        exclude=tuple(str(p) for p in exclude),
        rules=rules,
        languages=languages,
        extends=tuple(str(r) for r in data.get("extends") or ()),
        source=source,
    )


def _entry_table(raw: Any, where: str) -> dict[str, dict[str, Any]]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{where}' must be a mapping of rule id to settings")
    table: dict[str, dict[str, Any]] = {}
    for rule_id, entry in raw.items():
        if entry is None:
            entry = {}
        if not isinstance(entry, dict):
            raise ConfigError(f"Settings for '{rule_id}' in '{where}' must be a mapping")
        table[str(rule_id)] = entry
    return table


def parse_severity(value: Any, where: str) -> Severity:
    try:
        return Severity(str(value).lower())
    except ValueError:
        choices = ", ".join(s.value for s in Severity)
        raise ConfigError(
            f"Invalid severity {value!r} for {where} (expected one of: {choices})"
        ) from None
