"""ConsoleBlue configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site, not in this module)
  2. Environment variables  (CONSOLEBLUE_DB, GITHUB_OWNER, GITHUB_API_URL)
  3. Per-installation consoleblue.yaml  (in the current directory)
  4. Global ~/.consoleblue/config.yaml
  5. Hardcoded defaults

Config files must never contain tokens; GITHUB_TOKEN is read from the
environment only, by consoleblue.github.client.
All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".consoleblue"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "consoleblue.yaml"

# Key names that look like credentials. Does NOT match legitimate keys like
# max_limit or default_limit.
_SECRET_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(["database", "github", "publish", "history"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class DatabaseCfg:
    """Document store location (consoleblue.yaml: database:)."""

    path: str = ".consoleblue.db"


@dataclass
class GithubCfg:
    """VCS client settings (consoleblue.yaml: github:).

    Attributes:
        owner: Repository owner used when a project has no github_owner.
        api_url: GitHub REST API base URL.
        timeout: Seconds before a commit request is abandoned.
    """

    owner: str = "triadblue"
    api_url: str = "https://api.github.com"
    timeout: float = 30.0


@dataclass
class PublishCfg:
    """Publish defaults (consoleblue.yaml: publish:)."""

    target_path: str = "CLAUDE.md"
    auto_push: bool = True


@dataclass
class HistoryCfg:
    """Push-history pagination (consoleblue.yaml: history:)."""

    default_limit: int = 20
    max_limit: int = 100


@dataclass
class ConsoleBlueConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    database: DatabaseCfg = field(default_factory=DatabaseCfg)
    github: GithubCfg = field(default_factory=GithubCfg)
    publish: PublishCfg = field(default_factory=PublishCfg)
    history: HistoryCfg = field(default_factory=HistoryCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_secrets(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any credential-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _SECRET_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  Tokens must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export GITHUB_TOKEN=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}'; ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: ConsoleBlueConfig) -> None:
    if cfg.github.timeout <= 0:
        raise ConfigError(f"github.timeout must be > 0, got {cfg.github.timeout}")
    if cfg.history.max_limit < 1:
        raise ConfigError(f"history.max_limit must be >= 1, got {cfg.history.max_limit}")
    if not 1 <= cfg.history.default_limit <= cfg.history.max_limit:
        raise ConfigError(
            f"history.default_limit must be between 1 and history.max_limit "
            f"({cfg.history.max_limit}), got {cfg.history.default_limit}"
        )
    if not cfg.publish.target_path.strip():
        raise ConfigError("publish.target_path must not be empty")


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _as_bool(key: str, value: Any) -> bool:
    """Return *value* if it is a YAML boolean, else raise ConfigError."""
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def _cfg_from_dict(data: dict[str, Any]) -> ConsoleBlueConfig:
    """Build a *ConsoleBlueConfig* from a merged raw YAML dict."""
    cfg = ConsoleBlueConfig()

    if "database" in data:
        d = data["database"] or {}
        cfg.database = DatabaseCfg(path=str(d.get("path", cfg.database.path)))

    if "github" in data:
        g = data["github"] or {}
        cfg.github = GithubCfg(
            owner=str(g.get("owner", cfg.github.owner)),
            api_url=str(g.get("api_url", cfg.github.api_url)).rstrip("/"),
            timeout=float(g.get("timeout", cfg.github.timeout)),
        )

    if "publish" in data:
        p = data["publish"] or {}
        cfg.publish = PublishCfg(
            target_path=str(p.get("target_path", cfg.publish.target_path)),
            auto_push=_as_bool("publish.auto_push", p.get("auto_push", cfg.publish.auto_push)),
        )

    if "history" in data:
        h = data["history"] or {}
        cfg.history = HistoryCfg(
            default_limit=int(h.get("default_limit", cfg.history.default_limit)),
            max_limit=int(h.get("max_limit", cfg.history.max_limit)),
        )

    return cfg


def _apply_env_overrides(cfg: ConsoleBlueConfig) -> ConsoleBlueConfig:
    """Apply environment variable overrides (layer 2)."""
    if db_path := os.environ.get("CONSOLEBLUE_DB"):
        cfg.database.path = db_path
    if owner := os.environ.get("GITHUB_OWNER"):
        cfg.github.owner = owner
    if api_url := os.environ.get("GITHUB_API_URL"):
        cfg.github.api_url = api_url.rstrip("/")
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ConsoleBlueConfig:
    """Load and return a merged *ConsoleBlueConfig*.

    Applies layers in order: global → per-installation → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *consoleblue.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *ConsoleBlueConfig* with env var overrides applied.

    Raises:
        ConfigError: If a config file contains credential-like fields or an
            out-of-range value.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    for path in (global_path, search_dir / _PROJECT_CONFIG_NAME):
        if not path.exists():
            continue
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config '{path}' must be a YAML mapping.")
        _check_no_secrets(raw, path)
        _warn_unknown_keys(raw, path)
        merged = _deep_merge(merged, raw)

    try:
        cfg = _cfg_from_dict(merged)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc

    cfg = _apply_env_overrides(cfg)
    _validate(cfg)
    return cfg


def write_default_config(target: Path) -> bool:
    """Write a commented consoleblue.yaml with defaults unless it already exists.

    Returns:
        True if the file was written, False if it already existed.
    """
    if target.exists():
        return False
    content = (
        "# ConsoleBlue configuration.\n"
        "# NEVER store tokens here. Use environment variables:\n"
        "#   export GITHUB_TOKEN=ghp_...\n"
        "\n"
        "github:\n"
        "  owner: triadblue\n"
        "  timeout: 30\n"
        "\n"
        "publish:\n"
        "  target_path: CLAUDE.md\n"
        "  auto_push: true\n"
        "\n"
        "history:\n"
        "  default_limit: 20\n"
        "  max_limit: 100\n"
    )
    target.write_text(content, encoding="utf-8")
    return True
