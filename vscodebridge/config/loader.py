"""Configuration loading utilities."""

import json
import re
from pathlib import Path
from typing import Any

from vscodebridge.config.schema import BridgeSettings


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".vscodebridge" / "config.json"


def get_logs_dir() -> Path:
    return Path.home() / ".vscodebridge" / "logs"


def camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def convert_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Convert top-level camelCase keys to snake_case."""
    return {camel_to_snake(key): value for key, value in data.items()}


def load_settings(config_path: Path | None = None) -> BridgeSettings:
    """
    Load settings from file (when present) plus environment.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded settings object.
    """
    path = config_path or get_config_path()
    if not path.exists():
        return BridgeSettings()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("config must be a JSON object")
        return BridgeSettings(**convert_keys(data))
    except (json.JSONDecodeError, ValueError) as e:
        raise ValueError(
            f"Failed to load config from {path}: {e}. "
            "Fix the file or remove it to use defaults."
        ) from e
