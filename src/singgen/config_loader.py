"""
Multi-subscription configuration files.

Search order when no path is given (first readable, valid file wins):
- ./singgen.yaml, ./singgen.json
- ~/.config/singgen/config.yaml, ~/.config/singgen/config.json
- /etc/singgen/config.yaml, /etc/singgen/config.json

Example (YAML):

    global:
      template: v1.12
      platform: linux
      remove_emoji: true
    subscriptions:
      - name: provider1
        url: https://example1.com/subscription
        skip_tls_verify: true
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from singgen.exceptions import ConfigError
from singgen.logging_config import logger
from singgen.schemas import MultiConfig, SubscriptionConfig


CONFIG_PATHS = [
    "./singgen.yaml",
    "./singgen.json",
    "~/.config/singgen/config.yaml",
    "~/.config/singgen/config.json",
    "/etc/singgen/config.yaml",
    "/etc/singgen/config.json",
]


def load_config_file(config_path: Optional[str] = None) -> MultiConfig:
    """
    Load and validate a configuration file.

    Args:
        config_path: Explicit path. If None or empty, search CONFIG_PATHS.

    Raises:
        ConfigError: If the file is missing, malformed, or fails validation.
    """
    if not config_path:
        return load_config_auto()

    path = Path(config_path).expanduser()
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    return parse_config_data(text, path)


def load_config_auto() -> MultiConfig:
    """Return the first valid configuration found in CONFIG_PATHS."""
    for candidate in CONFIG_PATHS:
        path = Path(candidate).expanduser()
        if not path.is_file():
            continue
        try:
            config = parse_config_data(path.read_text(encoding="utf-8"), path)
            logger.debug(f"Loaded configuration from {path}")
            return config
        except (OSError, ConfigError) as e:
            logger.warning(f"Skipping config file {path}: {e}")

    raise ConfigError("Configuration file not found in any default location")


def parse_config_data(text: str, path: Path) -> MultiConfig:
    """
    Decode configuration text by file extension (YAML, JSON, or either when
    the extension is unknown) and validate it.
    """
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        data = _load_yaml(text)
    elif suffix == ".json":
        data = _load_json(text)
    else:
        try:
            data = _load_yaml(text)
        except ConfigError:
            data = _load_json(text)

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid configuration format in {path}: expected a mapping")

    try:
        config = MultiConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration format in {path}: {e}") from e

    config.validate_config()
    return config


def save_config_file(config: MultiConfig, config_path: str, fmt: str = "yaml") -> Path:
    """
    Write a configuration file, creating parent directories as needed.

    Raises:
        ConfigError: If the format is not yaml/yml/json.
    """
    data = config.model_dump(by_alias=True, exclude_none=True)
    fmt = fmt.lower()

    if fmt in ("yaml", "yml"):
        text = yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
    elif fmt == "json":
        text = json.dumps(data, indent=2, ensure_ascii=False)
    else:
        raise ConfigError(f"Unsupported config format: {fmt}")

    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def example_config() -> MultiConfig:
    """Two-subscription example used by `singgen example-config`."""
    return MultiConfig(
        subscriptions=[
            SubscriptionConfig(
                name="provider1",
                url="https://example1.com/subscription",
                remove_emoji=False,
                skip_tls_verify=True,
            ),
            SubscriptionConfig(
                name="provider2",
                url="https://example2.com/subscription",
            ),
        ]
    )


def _load_yaml(text: str) -> Dict[str, Any]:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e


def _load_json(text: str) -> Dict[str, Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON: {e}") from e
