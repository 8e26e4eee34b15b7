"""Layered settings store served through getSetting / setSetting."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from vscodebridge.protocol.messages import GetSettingArgs, SetSettingArgs, SettingScope, VSCodeCommand

_UNSET = object()


def split_key(key: str) -> tuple[str, str]:
    """Split "section.rest.of.key" into its section and property."""
    section, _, prop = key.partition(".")
    if not section or not prop:
        raise ValueError(f'Invalid configuration key format: "{key}". Expected format: "section.key"')
    return section, prop


class SettingsStore:
    """Default, user and workspace layers, looked up most specific first.

    When `path` is given the user and workspace layers are persisted there
    as JSON after every write.
    """

    def __init__(self, defaults: dict[str, Any] | None = None, path: Path | None = None):
        self.path = path
        self._defaults: dict[str, Any] = dict(defaults or {})
        self._layers: dict[str, dict[str, Any]] = {"user": {}, "workspace": {}}
        if path is not None and path.exists():
            self._load(path)

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"Failed to load settings from {path}: {exc}") from exc
        for scope in ("user", "workspace"):
            values = data.get(scope) if isinstance(data, dict) else None
            if isinstance(values, dict):
                self._layers[scope].update(values)

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._layers, indent=2, ensure_ascii=False), encoding="utf-8")

    def inspect(self, key: str) -> dict[str, Any]:
        split_key(key)
        return {
            "key": key,
            "defaultValue": self._defaults.get(key),
            "globalValue": self._layers["user"].get(key),
            "workspaceValue": self._layers["workspace"].get(key),
        }

    def get(self, key: str, scope: SettingScope = "workspace") -> Any:
        split_key(key)
        order = ("workspace", "user") if scope == "workspace" else ("user",)
        for layer in order:
            value = self._layers[layer].get(key, _UNSET)
            if value is not _UNSET:
                return value
        return self._defaults.get(key)

    def set(self, key: str, value: Any, scope: SettingScope = "workspace") -> None:
        split_key(key)
        if value is None:
            self._layers[scope].pop(key, None)
        else:
            self._layers[scope][key] = value
        self._save()
        logger.info("Setting {} updated in {} scope", key, scope)


def register_settings_handlers(dispatcher: Any, store: SettingsStore) -> None:
    """Expose `store` as the getSetting and setSetting commands."""

    def get_setting(arguments: dict[str, Any]) -> dict[str, Any]:
        args = GetSettingArgs.model_validate(arguments)
        return {"value": store.get(args.key, args.scope)}

    def set_setting(arguments: dict[str, Any]) -> dict[str, Any]:
        args = SetSettingArgs.model_validate(arguments)
        store.set(args.key, args.value, args.scope)
        return {"success": True}

    dispatcher.register(VSCodeCommand.GET_SETTING.value, get_setting)
    dispatcher.register(VSCodeCommand.SET_SETTING.value, set_setting)
