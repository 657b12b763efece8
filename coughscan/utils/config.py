"""
YAML configuration for CoughScan.

A config file only needs the keys it changes; everything else comes
from get_default_config(). String values may reference environment
variables as ${NAME}.
"""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from coughscan.utils.errors import ConfigurationError


# Dotted key -> rules. "type" is checked when the key is present,
# "min" / "choices" constrain the value, "required" rejects absence.
CONFIG_SCHEMA: Dict[str, Dict[str, Any]] = {
    "audio.supported_formats": {"type": list},
    "audio.max_file_size": {"type": int, "min": 1},
    "audio.max_duration": {"type": (int, float), "min": 0.001},
    "audio.target_sample_rate": {"type": int, "min": 1},
    "classifier.conditions": {"type": list},
    "logging.level": {"type": str},
    "logging.format": {"type": str, "choices": ("text", "json")},
    "performance.max_workers": {"type": int, "min": 1},
}

_ENV_REFERENCE = re.compile(r'\$\{([^}]+)\}')


def _expand_env(value: Any) -> Any:
    """Substitute ${NAME} in every string of a parsed YAML tree."""
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        # Unset variables keep their ${NAME} text
        return _ENV_REFERENCE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of base with override applied section by section."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _type_name(expected: Any) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


class ConfigManager:
    """
    Dotted-key access over a nested configuration dict.

    Example:
        manager = ConfigManager.from_file(Path("config/config.yaml"))
        manager.get("performance.max_workers", default=4)
        manager.get_section("audio")
    """

    _MISSING = object()

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        self._config: Dict[str, Any] = config_dict if config_dict is not None else {}

    @classmethod
    def from_file(cls, file_path: Path) -> "ConfigManager":
        """
        Parse a YAML file and expand environment references.

        Raises:
            ConfigurationError: If the file is missing, is not valid YAML,
                or its top level is not a mapping
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {file_path}",
                config_key=str(file_path)
            )

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                parsed = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {file_path}: {e}",
                config_key=str(file_path)
            ) from e

        if parsed is None:
            parsed = {}
        if not isinstance(parsed, dict):
            raise ConfigurationError(
                f"Top level of {file_path} must be a mapping, got {type(parsed).__name__}",
                config_key=str(file_path)
            )

        return cls(_expand_env(parsed))

    def _lookup(self, key: str) -> Any:
        node: Any = self._config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return self._MISSING
            node = node[part]
        return node

    def get(self, key: str, default: Any = None, required: bool = False) -> Any:
        """
        Value at a dotted key such as "audio.max_duration".

        Raises:
            ConfigurationError: If required and the key is absent
        """
        value = self._lookup(key)
        if value is self._MISSING:
            if required:
                raise ConfigurationError(
                    f"Missing required configuration key: {key}",
                    config_key=key
                )
            return default
        return value

    def get_section(self, key: str) -> Dict[str, Any]:
        """Mapping at key; empty when absent or not a mapping."""
        value = self.get(key)
        return value if isinstance(value, dict) else {}

    def set(self, key: str, value: Any) -> None:
        *parents, leaf = key.split('.')
        node = self._config
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

    def merge_defaults(self, defaults: Dict[str, Any]) -> None:
        """Fill keys the loaded file left out."""
        self._config = _deep_merge(defaults, self._config)

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the configuration."""
        return copy.deepcopy(self._config)

    def validate(self, schema: Dict[str, Dict[str, Any]]) -> None:
        """
        Check values against schema rules (see CONFIG_SCHEMA).

        A key set to null counts as absent.

        Raises:
            ConfigurationError: On the first rule that fails
        """
        for key, rules in schema.items():
            value = self.get(key)
            if value is None:
                if rules.get("required"):
                    raise ConfigurationError(f"Missing required configuration key: {key}",
                                             config_key=key)
                continue

            expected = rules.get("type")
            # bool is an int subclass; "true" is never a valid count
            if expected and (isinstance(value, bool) or not isinstance(value, expected)):
                raise ConfigurationError(
                    f"{key} must be {_type_name(expected)}, got {type(value).__name__}",
                    config_key=key
                )

            minimum = rules.get("min")
            if minimum is not None and value < minimum:
                raise ConfigurationError(f"{key} must be at least {minimum}, got {value}",
                                         config_key=key)

            choices = rules.get("choices")
            if choices and value not in choices:
                raise ConfigurationError(
                    f"{key} must be one of {', '.join(choices)}, got {value}",
                    config_key=key
                )


def get_default_config() -> Dict[str, Any]:
    """Built-in configuration; config/config.yaml mirrors it."""
    return {
        "audio": {
            "supported_formats": [".wav", ".flac", ".aif", ".aiff", ".ogg", ".mp3"],
            "max_file_size": 104857600,  # 100MB
            "max_duration": 10.0,  # seconds; the whole-signal transform is O(N^2)
            "target_sample_rate": None,  # keep native rate
        },
        "classifier": {
            "conditions": ["COVID-19", "Asthma", "Bronchitis", "Pneumonia"],
        },
        "logging": {
            "level": "INFO",
            "format": "text",
            "file": None,
        },
        "performance": {
            "max_workers": 4,
        },
    }


def _find_config_file() -> Optional[Path]:
    candidates = (
        Path("config") / "config.yaml",
        Path("config.yaml"),
        Path(__file__).resolve().parents[2] / "config" / "config.yaml",
    )
    return next((path for path in candidates if path.is_file()), None)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load, complete and validate the configuration.

    Without a path, config/config.yaml and config.yaml in the working
    directory are tried, then the one shipped beside the package, then
    the built-in defaults.

    Raises:
        ConfigurationError: If an explicit path is missing, or the file
            is unreadable or fails CONFIG_SCHEMA
    """
    if config_path is not None:
        path: Optional[Path] = Path(config_path)
        if not path.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                config_key=str(config_path)
            )
    else:
        path = _find_config_file()

    if path is None:
        return get_default_config()

    manager = ConfigManager.from_file(path)
    manager.merge_defaults(get_default_config())
    manager.validate(CONFIG_SCHEMA)
    return manager.to_dict()
