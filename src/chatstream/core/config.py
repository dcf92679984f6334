"""Configuration loading (TOML, env vars, .env)."""

from __future__ import annotations

import codecs
import logging
import math
import os
import tomllib
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from chatstream.types.config import ChatConfig

logger = logging.getLogger(__name__)

# Load .env from current directory (and parents), won't override existing env vars
load_dotenv()

ENV_MAP = {
    "url": "CHATSTREAM_URL",
    "model": "CHATSTREAM_MODEL",
    "timeout": "CHATSTREAM_TIMEOUT",
    "encoding": "CHATSTREAM_ENCODING",
}

_FIELD_NAMES = frozenset(f.name for f in fields(ChatConfig))


def config_paths(cwd: str | None = None) -> list[Path]:
    """Candidate config files, highest priority first."""
    base = Path(cwd) if cwd else Path.cwd()
    return [
        base / ".chatstream" / "config.toml",
        Path.home() / ".chatstream" / "config.toml",
    ]


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}
    for key, env_var in ENV_MAP.items():
        if value := os.environ.get(env_var):
            config[key] = value
    return config


def load_toml_config(cwd: str | None = None) -> dict[str, Any]:
    """Load the ``[client]`` table from the first config.toml found."""
    for path in config_paths(cwd):
        if not path.exists():
            continue
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", path, exc)
            continue
        client = data.get("client", {})
        if isinstance(client, dict):
            return client
        logger.warning("Ignoring non-table [client] in %s", path)
    return {}


def resolve_config(cwd: str | None = None, **overrides: Any) -> ChatConfig:
    """Build a :class:`ChatConfig` from defaults, TOML, env vars and overrides.

    Later sources win: defaults < config.toml < environment < *overrides*.
    Override values of ``None`` are ignored so CLI options can be passed
    straight through.
    """
    merged: dict[str, Any] = {}
    merged.update(load_toml_config(cwd))
    merged.update(load_env_config())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(merged) - _FIELD_NAMES
    for key in sorted(unknown):
        logger.warning("Ignoring unknown config key %r", key)
        del merged[key]

    if "timeout" in merged:
        merged["timeout"] = _to_float("timeout", merged["timeout"])
    if "encoding" in merged:
        merged["encoding"] = _check_encoding(merged["encoding"])
    if "headers" in merged and not isinstance(merged["headers"], dict):
        raise ValueError("Config key 'headers' must be a table of strings")

    return ChatConfig(**merged)


def describe_config(config: ChatConfig) -> dict[str, Any]:
    """Plain dict view of *config* for display."""
    return asdict(config)


def _to_float(key: str, value: Any) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Config key {key!r} must be a number, got {value!r}") from None
    if not math.isfinite(result):
        raise ValueError(f"Config key {key!r} must be a finite number, got {value!r}")
    if result <= 0:
        raise ValueError(f"Config key {key!r} must be positive, got {value!r}")
    return result


def _check_encoding(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"Config key 'encoding' must be a codec name, got {value!r}")
    try:
        codecs.lookup(value)
    except LookupError:
        raise ValueError(f"Config key 'encoding' names an unknown codec: {value!r}") from None
    return value
