"""Configuration module for vscodebridge."""

from vscodebridge.config.loader import get_config_path, load_settings
from vscodebridge.config.schema import BridgeSettings

__all__ = ["BridgeSettings", "get_config_path", "load_settings"]
