"""Load settings from defaults, a JSON settings file and the environment."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from cmdfix.config.settings import Settings
from cmdfix.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CMDFIX_"
SETTINGS_FILE = "settings.json"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def get_config_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Directory holding ``settings.json`` and user rules."""
    environ = os.environ if environ is None else environ
    if environ.get("CMDFIX_CONFIG_DIR"):
        return Path(environ["CMDFIX_CONFIG_DIR"]).expanduser()
    base = environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base).expanduser() / "cmdfix"


def get_rules_dir(environ: Mapping[str, str] | None = None) -> Path:
    return get_config_dir(environ) / "rules"


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build settings from all sources.

    Later sources override earlier ones: defaults, then the settings file,
    then ``CMDFIX_*`` environment variables.

    Args:
        path: Settings file, defaults to ``<config dir>/settings.json``
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        The merged settings

    Raises:
        ConfigurationError: If a source holds an invalid value
    """
    environ = os.environ if environ is None else environ
    settings = Settings()

    settings_path = Path(path) if path else get_config_dir(environ) / SETTINGS_FILE
    if settings_path.exists():
        logger.debug("Loading settings from %s", settings_path)
        _apply(settings, _read_file(settings_path), source=str(settings_path))
    else:
        logger.debug("No settings file at %s", settings_path)

    _apply(settings, _read_env(environ), source="environment")
    return settings


def _read_file(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")
    return data


def _read_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """Translate ``CMDFIX_*`` variables into settings-file keys."""
    values: dict[str, Any] = {}

    for key in ("rules", "exclude_rules", "excluded_search_path_prefixes"):
        raw = environ.get(ENV_PREFIX + key.upper())
        if raw is not None:
            values[key] = [item for item in raw.split(":") if item]

    for key in ("require_confirmation", "debug"):
        raw = environ.get(ENV_PREFIX + key.upper())
        if raw is not None:
            values[key] = _parse_bool(key, raw)

    for key in ("rule_timeout", "side_effect_timeout", "workers", "num_close_matches"):
        raw = environ.get(ENV_PREFIX + key.upper())
        if raw is not None:
            values[key] = raw

    raw = environ.get(ENV_PREFIX + "PRIORITY")
    if raw is not None:
        values["priority"] = _parse_priority(raw)

    return values


def _parse_bool(key: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"{key}: expected a boolean, got {raw!r}")


def _parse_priority(raw: str) -> dict[str, int]:
    """Parse ``name=value:name=value``."""
    priorities = {}
    for pair in filter(None, raw.split(":")):
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ConfigurationError(f"priority: malformed entry {pair!r}, expected name=value")
        priorities[name] = _parse_int("priority", value)
    return priorities


def _parse_int(key: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ConfigurationError(f"{key}: expected an integer, got {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key}: expected an integer, got {raw!r}") from e


def _parse_timeout(key: str, raw: Any) -> float | None:
    if raw is None or (isinstance(raw, str) and raw.strip().lower() in ("", "none")):
        return None
    if isinstance(raw, bool):
        raise ConfigurationError(f"{key}: expected a number of seconds, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key}: expected a number of seconds, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{key}: must be positive, got {raw!r}")
    return value


def _parse_names(key: str, raw: Any) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(n, str) and n for n in raw):
        raise ConfigurationError(f"{key}: expected a list of non-empty names, got {raw!r}")
    return list(raw)


def _apply(settings: Settings, values: dict[str, Any], source: str) -> None:
    """Validate ``values`` and copy them onto ``settings``."""
    for key, raw in values.items():
        if key in ("rules", "exclude_rules", "excluded_search_path_prefixes"):
            setattr(settings, key, _parse_names(key, raw))
        elif key in ("require_confirmation", "debug"):
            setattr(settings, key, _parse_bool(key, raw))
        elif key in ("rule_timeout", "side_effect_timeout"):
            setattr(settings, key, _parse_timeout(key, raw))
        elif key in ("workers", "num_close_matches"):
            value = _parse_int(key, raw)
            if value < 0:
                raise ConfigurationError(f"{key}: must not be negative, got {raw!r}")
            setattr(settings, key, value)
        elif key == "priority":
            if not isinstance(raw, dict):
                raise ConfigurationError(f"priority: expected an object, got {raw!r}")
            settings.priority.update(
                {name: _parse_int("priority", value) for name, value in raw.items()}
            )
        else:
            logger.warning("Ignoring unknown setting %r from %s", key, source)
