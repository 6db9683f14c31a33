"""Layered configuration.

A key such as 'archives.compression' is looked up in this order, first hit
wins:

    cli            values passed by the caller (flat 'a.b' or nested keys)
    env            ZIPTREE_ARCHIVES_COMPRESSION
    user_config    ~/.config/ziptree/config.yaml
    system_config  /etc/ziptree/config.yaml
    default        DEFAULTS below

Config files are read lazily, only when a lookup falls through to them.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ziptree.core.errors import ConfigError

ENV_PREFIX = "ZIPTREE_"
SYSTEM_CONFIG_PATH = Path("/etc/ziptree/config.yaml")

DEFAULT_LOGGING_LEVEL = "normal"
ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
ALLOWED_COMPRESSION = frozenset({"stored", "deflated"})

DEFAULTS: dict[str, Any] = {
    "logging": {"level": DEFAULT_LOGGING_LEVEL, "color": True},
    "archives": {
        "compression": "deflated",
        "chunk_size": 64 * 1024,
        "debug": {"include_trace": False, "include_stack": False},
    },
}

_BOOL_WORDS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


@dataclass(frozen=True)
class LoggingPolicy:
    level_name: str
    source: str


def default_user_config_path() -> Path:
    return Path.home() / ".config" / "ziptree" / "config.yaml"


def env_var_name(key: str) -> str:
    """'archives.chunk_size' -> 'ZIPTREE_ARCHIVES_CHUNK_SIZE'."""
    return ENV_PREFIX + key.upper().replace(".", "_")


def lookup(data: Mapping[str, Any], key: str) -> Any | None:
    """Find key in data stored either flat ('a.b') or nested ({'a': {'b': ...}})."""
    if key in data:
        return data[key]
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Parse a YAML config file; a missing or empty file is an empty mapping."""
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Failed to load config from {path}: top level must be a mapping")
    return data


class ConfigResolver:
    """Resolve keys across the configuration layers.

    Example:
        resolver = ConfigResolver(cli_args={"archives.compression": "stored"})
        resolver.resolve("archives.compression")  # ('stored', 'cli')
        resolver.resolve_int("archives.chunk_size", 65536)  # 65536
    """

    def __init__(
        self,
        cli_args: Mapping[str, Any] | None = None,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        self.cli_args = dict(cli_args or {})
        self.user_config_path = user_config_path or default_user_config_path()
        self.system_config_path = system_config_path or SYSTEM_CONFIG_PATH
        self.defaults = DEFAULTS if defaults is None else defaults
        self._files: dict[Path, dict[str, Any]] = {}

    def resolve(self, key: str) -> tuple[Any, str]:
        """Return (value, source) for key.

        Raises:
            ConfigError: key is set nowhere, or a config file cannot be parsed
        """
        found = self._find(key)
        if found is None:
            raise ConfigError(f"Config key '{key}' not found in any source")
        return found

    def resolve_logging_policy(self) -> LoggingPolicy:
        found = self._find("logging.level")
        if found is None:
            return LoggingPolicy(level_name=DEFAULT_LOGGING_LEVEL, source="default")
        value, source = found
        level = _normalize_choice("logging.level", value, ALLOWED_LOGGING_LEVELS)
        return LoggingPolicy(level_name=level, source=source)

    def resolve_bool(self, key: str, default: bool) -> bool:
        found = self._find(key)
        if found is None:
            return default
        value = found[0]
        if isinstance(value, bool):
            return value
        word = str(value).strip().lower()
        if word not in _BOOL_WORDS:
            raise ConfigError(f"Config key '{key}' must be a bool, got {value!r}")
        return _BOOL_WORDS[word]

    def resolve_int(self, key: str, default: int, *, minimum: int = 1) -> int:
        found = self._find(key)
        if found is None:
            return default
        value = found[0]
        if isinstance(value, str) and value.strip().isdigit():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"Config key '{key}' must be an int, got {value!r}")
        if value < minimum:
            raise ConfigError(f"Config key '{key}' must be >= {minimum}, got {value}")
        return value

    def resolve_choice(self, key: str, allowed: frozenset[str], default: str) -> str:
        found = self._find(key)
        if found is None:
            return default
        return _normalize_choice(key, found[0], allowed)

    def _find(self, key: str) -> tuple[Any, str] | None:
        for source, value in self._layers(key):
            if value is not None:
                return value, source
        return None

    def _layers(self, key: str) -> Iterator[tuple[str, Any]]:
        yield "cli", lookup(self.cli_args, key)
        yield "env", os.environ.get(env_var_name(key))
        yield "user_config", lookup(self._file(self.user_config_path), key)
        yield "system_config", lookup(self._file(self.system_config_path), key)
        yield "default", lookup(self.defaults, key)

    def _file(self, path: Path) -> dict[str, Any]:
        if path not in self._files:
            self._files[path] = load_yaml_file(path)
        return self._files[path]


def _normalize_choice(key: str, value: Any, allowed: frozenset[str]) -> str:
    norm = str(value).strip().lower()
    if norm not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ConfigError(f"Invalid '{key}': {value!r}. Allowed values: {choices}")
    return norm
