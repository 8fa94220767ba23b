"""Agent configuration loader for patch-lag.

Resolution order (first match wins):
  1. --config <path> CLI flag (explicit_path argument)
  2. PATCH_LAG_CONFIG environment variable
  3. Local system file:
       Windows: %PROGRAMDATA%\\patch-lag\\agent.yaml
       macOS:   /Library/Application Support/patch-lag/agent.yaml
       Linux:   /etc/patch-lag/agent.yaml
  4. Built-in defaults only

Example::

    fetch:
      timeout_seconds: 15
    catalog:
      - product_name: Windows 11
        version_label: 25H2
        initial_build: "26200.6584"
        initial_release_date: 2025-09-30
        history_uri: https://support.microsoft.com/...
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

from ..fetch.update_page import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from ..analyzers.update_links import DEFAULT_ORIGIN


_CONFIG_ENV = "PATCH_LAG_CONFIG"

# Default config schema with all supported keys and their default values.
_DEFAULTS: dict[str, Any] = {
    "fetch": {
        "timeout_seconds": DEFAULT_TIMEOUT,
        "user_agent":      DEFAULT_USER_AGENT,
        "origin":          DEFAULT_ORIGIN,
    },
    "catalog": [],   # extra catalog rows, searched before the built-in table
    "output": {
        "pretty": False,
    },
}


# ── path helpers ──────────────────────────────────────────────────────────────

def _local_config_path() -> Path:
    """Return the platform-specific path of the local config file."""
    if sys.platform == "win32":
        base = os.environ.get("PROGRAMDATA", r"C:\ProgramData")
        return Path(base) / "patch-lag" / "agent.yaml"
    elif sys.platform == "darwin":
        return Path("/Library/Application Support/patch-lag/agent.yaml")
    else:
        return Path("/etc/patch-lag/agent.yaml")


# ── YAML loading ──────────────────────────────────────────────────────────────

def _load_yaml(path: Path) -> dict:
    """Load a YAML file and return its top-level mapping."""
    import yaml
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}: {path}")
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Return a new dict with override merged recursively into base."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _validate(config: dict) -> None:
    for section in ("fetch", "output"):
        if not isinstance(config.get(section), dict):
            raise ValueError(f"{section} must be a mapping, got {config.get(section)!r}")
    timeout = config["fetch"].get("timeout_seconds")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"fetch.timeout_seconds must be a positive number, got {timeout!r}")
    if not isinstance(config.get("catalog"), list):
        raise ValueError("catalog must be a list of catalog rows")


# ── public API ────────────────────────────────────────────────────────────────

def load_config(explicit_path: str | None = None) -> dict:
    """Load, validate, and return the resolved agent configuration dict.

    Args:
        explicit_path: Path passed via ``--config``. When provided, this is
            used exclusively and an error is raised if the file is missing.

    Returns:
        Config dict deeply merged over ``_DEFAULTS``.

    Raises:
        FileNotFoundError: If ``explicit_path`` is given but does not exist.
        ValueError: If the YAML file is not a mapping or a value is invalid.
    """
    raw: dict = {}

    if explicit_path is not None:
        p = Path(explicit_path)
        if not p.exists():
            raise FileNotFoundError(f"Config file not found: {p}")
        raw = _load_yaml(p)

    else:
        env_path_str = os.environ.get(_CONFIG_ENV)
        if env_path_str:
            env_p = Path(env_path_str)
            if env_p.exists():
                raw = _load_yaml(env_p)
            else:
                print(
                    f"  [config] Warning: {_CONFIG_ENV} points to missing file: {env_p}",
                    file=sys.stderr,
                    flush=True,
                )

        if not raw:
            local = _local_config_path()
            if local.exists():
                raw = _load_yaml(local)

    config = _deep_merge(_DEFAULTS, raw)
    _validate(config)
    return config
