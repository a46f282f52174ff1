"""YAML configuration loader for emitter definitions."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from eventemitter.errors import ConfigError

_RESERVED_EVENTS = ("newListener", "removeListener")
_DIAGNOSTICS = ("log", "warnings")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
_UNLIMITED = "unlimited"


@dataclass
class EmitterConfig:
    # Vocabulary of allowed event names; empty means unrestricted.
    events: list[str] = field(default_factory=list)
    max_listeners: float = 10
    diagnostics: str = "log"  # "log" or "warnings"
    log_level: str = "WARNING"
    log_file: str | None = None
    source_path: str | None = None

    def validate(self) -> list[str]:
        """Validate config, returning a list of error messages (empty = valid)."""
        errors: list[str] = []

        seen: set[str] = set()
        for name in self.events:
            if not isinstance(name, str) or not name:
                errors.append(f"Event names must be non-empty strings, got {name!r}")
                continue
            if name in _RESERVED_EVENTS:
                errors.append(f"Event name '{name}' is reserved")
            elif name in seen:
                errors.append(f"Duplicate event name: '{name}'")
            seen.add(name)

        if (
            isinstance(self.max_listeners, bool)
            or not isinstance(self.max_listeners, (int, float))
            or math.isnan(self.max_listeners)
            or self.max_listeners < 1
        ):
            errors.append(f"max_listeners must be >= 1 or '{_UNLIMITED}'")

        if self.diagnostics not in _DIAGNOSTICS:
            errors.append(
                f"diagnostics must be one of {', '.join(_DIAGNOSTICS)}, got '{self.diagnostics}'"
            )

        if str(self.log_level).upper() not in _LOG_LEVELS:
            errors.append(f"Unknown log_level: '{self.log_level}'")

        if self.log_file:
            log_parent = Path(self.log_file).expanduser().parent
            if not log_parent.exists():
                errors.append(f"Log file parent directory does not exist: {log_parent}")

        return errors

    def apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if val := os.environ.get("EVENTEMITTER_MAX_LISTENERS"):
            try:
                self.max_listeners = _parse_max_listeners(val)
            except ValueError:
                pass
        if val := os.environ.get("EVENTEMITTER_LOG_LEVEL"):
            self.log_level = val.upper()


def _parse_max_listeners(value: Any) -> float:
    if value is None or value == _UNLIMITED:
        return math.inf
    if isinstance(value, str):
        return int(value)
    return value


def load_config(path: str | None = None) -> EmitterConfig:
    """Load config from explicit path, eventemitter.yaml in CWD, or
    ~/.config/eventemitter/config.yaml.  Falls back to defaults."""
    candidates = []
    if path:
        candidates.append(Path(path))
    else:
        candidates.append(Path.cwd() / "eventemitter.yaml")
        candidates.append(Path.home() / ".config" / "eventemitter" / "config.yaml")

    for candidate in candidates:
        if candidate.exists():
            config = _parse_config(candidate)
            break
    else:
        config = EmitterConfig()

    config.apply_env_overrides()
    return config


def _parse_config(path: Path) -> EmitterConfig:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}", {"path": str(path)}) from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping", {"path": str(path)})

    events = data.get("events") or []
    if not isinstance(events, list):
        raise ConfigError("'events' must be a list of event names", {"events": events})

    try:
        max_listeners = _parse_max_listeners(data.get("max_listeners", 10))
    except ValueError as exc:
        raise ConfigError(
            f"Invalid max_listeners: {data.get('max_listeners')!r}",
            {"max_listeners": data.get("max_listeners")},
        ) from exc

    return EmitterConfig(
        events=events,
        max_listeners=max_listeners,
        diagnostics=data.get("diagnostics", "log"),
        log_level=data.get("log_level", "WARNING"),
        log_file=data.get("log_file"),
        source_path=str(path),
    )


def serialize_config(config: EmitterConfig) -> dict[str, Any]:
    """Serialize EmitterConfig to a dict. Omits an unset log_file."""
    data: dict[str, Any] = {
        "events": list(config.events),
        "max_listeners": (
            _UNLIMITED if config.max_listeners == math.inf else config.max_listeners
        ),
        "diagnostics": config.diagnostics,
        "log_level": config.log_level,
    }
    if config.log_file:
        data["log_file"] = config.log_file
    return data


def write_config(output_path: str, config: EmitterConfig) -> None:
    """Write an eventemitter.yaml config file."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write("# Generated by eventemitter init\n")
        yaml.dump(serialize_config(config), f, default_flow_style=False, sort_keys=False)
