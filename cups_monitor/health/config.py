"""
Health configuration - Loads and validates monitor configuration.

This module reads the monitor settings from the process environment and
from an optional ``.env``-style file of KEY=VALUE lines.
"""

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_CUPS_URL = "http://localhost:631"
DEFAULT_EVENTS_URL = "https://events.pagerduty.com/v2/enqueue"
DEFAULT_INTERVAL_SECONDS = 30.0
DEFAULT_TIMEOUT_SECONDS = 10.0

# Keys recognised in the environment and in the config file
# {
#   "CUPS_URL": str,                  # optional, defaults to localhost:631
#   "PAGERDUTY_ROUTING_KEY": str,     # required
#   "PAGERDUTY_EVENTS_URL": str,      # optional
#   "CHECK_INTERVAL_SECONDS": float,  # optional, > 0
#   "REQUEST_TIMEOUT_SECONDS": float, # optional, > 0
# }
CONFIG_KEYS = (
    "CUPS_URL",
    "PAGERDUTY_ROUTING_KEY",
    "PAGERDUTY_EVENTS_URL",
    "CHECK_INTERVAL_SECONDS",
    "REQUEST_TIMEOUT_SECONDS",
)


class ConfigError(ValueError):
    """Raised when the monitor cannot start with the given configuration."""


@dataclass(frozen=True)
class MonitorConfig:
    """Validated monitor settings."""

    routing_key: str
    cups_url: str = DEFAULT_CUPS_URL
    events_url: str = DEFAULT_EVENTS_URL
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def parse_env_file(text: str) -> Dict[str, str]:
    """
    Parse KEY=VALUE lines.

    Blank lines and lines starting with ``#`` are ignored. The first ``=``
    splits the key from the value; lines without ``=`` are skipped.

    Args:
        text: File contents

    Returns:
        Dict with key -> value mappings
    """
    values: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        values[key.strip()] = value.strip()
    return values


def load_env_file(path: str) -> Dict[str, str]:
    """
    Load KEY=VALUE pairs from a file.

    Args:
        path: Path to the file

    Returns:
        Parsed values, or an empty dict if the file is missing or unreadable
    """
    env_file = Path(path)
    try:
        text = env_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Config file not found: %s. Using environment only.", path)
        return {}
    except OSError as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}

    values = parse_env_file(text)
    logger.debug("Loaded %d keys from %s", len(values), path)
    return values


def load_config(
    env_file: Optional[str] = ".env", environ: Optional[Mapping[str, str]] = None
) -> MonitorConfig:
    """
    Build the monitor configuration.

    Values are seeded from the environment, then overridden by non-empty
    values found in ``env_file``.

    Args:
        env_file: Path to the KEY=VALUE file. None skips the file.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        MonitorConfig

    Raises:
        ConfigError: If the routing key is missing or a number is invalid
    """
    if environ is None:
        environ = os.environ

    raw: Dict[str, str] = {}
    for key in CONFIG_KEYS:
        value = environ.get(key, "").strip()
        if value:
            raw[key] = value

    if env_file:
        for key, value in load_env_file(env_file).items():
            if value:
                raw[key] = value

    routing_key = raw.get("PAGERDUTY_ROUTING_KEY", "")
    if not routing_key:
        where = f"environment or {env_file}" if env_file else "environment"
        raise ConfigError(f"PAGERDUTY_ROUTING_KEY required in {where}")

    return MonitorConfig(
        routing_key=routing_key,
        cups_url=raw.get("CUPS_URL", DEFAULT_CUPS_URL),
        events_url=raw.get("PAGERDUTY_EVENTS_URL", DEFAULT_EVENTS_URL),
        interval_seconds=_positive_float(
            raw, "CHECK_INTERVAL_SECONDS", DEFAULT_INTERVAL_SECONDS
        ),
        timeout_seconds=_positive_float(
            raw, "REQUEST_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
        ),
    )


def _positive_float(raw: Dict[str, str], key: str, default: float) -> float:
    if key not in raw:
        return default
    try:
        value = float(raw[key])
    except ValueError:
        raise ConfigError(f"Field '{key}' must be a number, got: {raw[key]!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(
            f"Field '{key}' must be a positive finite number, got: {raw[key]!r}"
        )
    return value
