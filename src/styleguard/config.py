"""Global configuration: XDG paths, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

PROJECT_CONFIG_NAME = ".styleguard.yaml"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "styleguard"
    return Path.home() / ".config" / "styleguard"


@dataclass
class StyleGuardConfig:
    """Application-wide settings, separate from the rule configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    jobs: int | None = None
    timeout: float | None = None
    verbose: bool = False

    @classmethod
    def load(cls) -> StyleGuardConfig:
        """Load settings from environment variables with XDG defaults."""
        config = cls()

        env_jobs = os.environ.get("STYLEGUARD_JOBS")
        if env_jobs:
            config.jobs = int(env_jobs)

        env_timeout = os.environ.get("STYLEGUARD_TIMEOUT")
        if env_timeout:
            config.timeout = float(env_timeout)

        return config

    def find_rule_config(
        self, explicit: str | Path | None = None, cwd: Path | None = None
    ) -> Path | None:
        """Locate the rule configuration file to use.

        An explicit path wins, then ``.styleguard.yaml`` in the working
        directory, then ``config.yaml`` in the user config directory.
        """
        if explicit:
            return Path(explicit)
        project = (cwd or Path.cwd()) / PROJECT_CONFIG_NAME
        if project.is_file():
            return project
        user = self.config_dir / "config.yaml"
        if user.is_file():
            return user
        return None
