from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from notify_probe.transport.client_config import (
    CONNECT_TIMEOUT_S,
    NATS_URL,
)


@dataclass(frozen=True)
class BusConfig:
    """NATS connection settings."""
    url: str = NATS_URL
    connect_timeout_s: float = CONNECT_TIMEOUT_S


@dataclass(frozen=True)
class ProbeConfig:
    """
    Root probe configuration loaded from YAML.

    Only transport settings are configurable. Subjects, the request timeout
    and the targeted client ids are fixed (see client_config and payloads).
    Every field has a default, so the probe runs without a config file.
    """
    bus: BusConfig = field(default_factory=BusConfig)


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("config.yaml must contain a YAML mapping at the root")
    return data


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    s = raw.get(name) or {}
    if not isinstance(s, dict):
        raise ValueError(f"'{name}' must be a mapping")
    return s


_KNOWN_KEYS = {"bus": {"url", "connect_timeout_s"}}


def _check_keys(raw: Dict[str, Any]) -> None:
    # subjects, request timeout and targeted clients are fixed, not configurable
    unknown = sorted(str(k) for k in set(raw) - set(_KNOWN_KEYS))
    if unknown:
        raise ValueError(f"Unsupported config keys: {unknown}")
    for name, allowed in _KNOWN_KEYS.items():
        extra = sorted(str(k) for k in set(_section(raw, name)) - allowed)
        if extra:
            raise ValueError(f"Unsupported keys in '{name}': {extra}")


def _positive(name: str, value: Any) -> float:
    v = float(value)
    if v <= 0:
        raise ValueError(f"{name} must be positive, got {v}")
    return v


def _resolve_default_config_path() -> Optional[Path]:
    """
    Resolve config.yaml location.

    Priority:
    1) PROBE_CONFIG env var if provided (returned even if missing)
    2) config.yaml next to the executable
    3) ./config.yaml in current working directory

    Returns None when neither implicit candidate exists.
    """
    env = os.getenv("PROBE_CONFIG")
    if env:
        return Path(env).expanduser().resolve()

    # PyInstaller-friendly: executable directory
    exe_dir = Path(sys.executable).resolve().parent
    candidate = exe_dir / "config.yaml"
    if candidate.exists():
        return candidate

    cwd_candidate = Path("config.yaml").resolve()
    if cwd_candidate.exists():
        return cwd_candidate
    return None


def load_probe_config(path: Optional[str] = None) -> ProbeConfig:
    """
    Load probe configuration from YAML and the environment.

    Parameters
    ----------
    path
        Explicit path to config.yaml. If None, uses default resolution and
        falls back to built-in defaults when no file is found.

    Returns
    -------
    ProbeConfig
        Parsed and validated configuration. ``NATS_URL`` from the environment
        (or a ``.env`` file) overrides ``bus.url``.

    Raises
    ------
    FileNotFoundError
        If an explicitly requested config file does not exist.
    ValueError
        If fields are invalid or keys other than ``bus.url`` and
        ``bus.connect_timeout_s`` are present.
    """
    load_dotenv(Path.cwd() / ".env")

    cfg_path = Path(path).expanduser().resolve() if path else _resolve_default_config_path()
    raw: Dict[str, Any] = {}
    if cfg_path is not None:
        if not cfg_path.exists():
            raise FileNotFoundError(f"Config not found: {cfg_path}")
        raw = _read_yaml(cfg_path)
    _check_keys(raw)

    # ---- bus ----
    b = _section(raw, "bus")
    url = os.getenv("NATS_URL") or str(b.get("url", NATS_URL))
    bus = BusConfig(
        url=url,
        connect_timeout_s=_positive("bus.connect_timeout_s", b.get("connect_timeout_s", CONNECT_TIMEOUT_S)),
    )

    return ProbeConfig(bus=bus)
