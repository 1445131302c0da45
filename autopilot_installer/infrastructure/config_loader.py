"""Installer configuration.

Precedence, lowest to highest: built-in defaults, optional YAML file,
environment variables, command-line flags (applied by the CLI via
``InstallerConfig.with_overrides``).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from autopilot_installer.domain.errors import ConfigError

ENV_REPO = "AUTOPILOT_INSTALL_REPO"
ENV_REF = "AUTOPILOT_INSTALL_REF"
ENV_TOKEN = "GITHUB_TOKEN"


@dataclass(frozen=True)
class InstallerConfig:
    repo_owner: str = "donaldshen27"
    repo_name: str = "claude-code-autopilot"
    ref: str = "main"
    timeout_seconds: float = 60.0
    npm_command: str = "npm"
    npm_timeout_seconds: int = 300
    hooks_subdir: str = ".claude/hooks"
    github_token: str | None = None

    @property
    def repo_slug(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    @property
    def issues_url(self) -> str:
        return f"https://github.com/{self.repo_slug}/issues"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InstallerConfig":
        defaults = cls()
        values: dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            if f.name not in data or data[f.name] is None:
                continue
            raw = data[f.name]
            default = getattr(defaults, f.name)
            if isinstance(default, bool) or isinstance(raw, bool):
                raise ConfigError(f"Invalid value for {f.name}: {raw!r}")
            if isinstance(default, (int, float)):
                if not isinstance(raw, (int, float)) or raw <= 0:
                    raise ConfigError(f"{f.name} must be a positive number, got {raw!r}")
                values[f.name] = type(default)(raw)
                continue
            if not isinstance(raw, str) or not raw.strip():
                raise ConfigError(f"{f.name} must be a non-empty string, got {raw!r}")
            values[f.name] = raw.strip()
        return dataclasses.replace(defaults, **values)

    def with_overrides(self, **overrides: Any) -> "InstallerConfig":
        values = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **values)


def parse_repo_slug(slug: str) -> tuple[str, str]:
    owner, sep, name = slug.strip().strip("/").partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ConfigError(f"Repository must look like OWNER/NAME, got {slug!r}")
    return owner, name


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Config file not parseable: {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    section = data.get("installer", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'installer' section must be a mapping: {path}")
    return section


def load_installer_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> InstallerConfig:
    env = os.environ if env is None else env
    data: dict[str, Any] = _read_yaml(path) if path is not None else {}

    if "repo" in data and data["repo"] is not None:
        if not isinstance(data["repo"], str):
            raise ConfigError(f"repo must be a string, got {data['repo']!r}")
        data["repo_owner"], data["repo_name"] = parse_repo_slug(data["repo"])

    config = InstallerConfig.from_dict(data)

    overrides: dict[str, Any] = {}
    repo = env.get(ENV_REPO, "").strip()
    if repo:
        overrides["repo_owner"], overrides["repo_name"] = parse_repo_slug(repo)
    ref = env.get(ENV_REF, "").strip()
    if ref:
        overrides["ref"] = ref
    token = env.get(ENV_TOKEN, "").strip()
    if token and config.github_token is None:
        overrides["github_token"] = token
    return config.with_overrides(**overrides)
