from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from donelist.core.logging import get_logger
from donelist.core.settings_model import SettingsModel

logger = get_logger(__name__)


class SettingsStore:
    """Load and persist donelist user settings."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> dict[str, Any]:
        """Read settings from disk, injecting expected sections."""
        if self._path.exists():
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                logger.warning("Unreadable settings at %s; using defaults", self._path)
                raw = {}
        else:
            raw = {}
        migrated = self._migrate(raw)
        normalized = self._normalize(migrated)
        if self._should_persist_upgrade(raw, normalized):
            self._backup_raw_settings()
            self.save(normalized)
        return normalized

    def save(self, settings: dict[str, Any]) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(settings, indent=4), encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to save settings to %s: %s", self._path, exc)

    def update_theme(self, settings: dict[str, Any], theme_name: str) -> None:
        """Store the active theme."""
        settings.setdefault("userPreferences", {})["theme"] = theme_name
        self.save(settings)

    def theme(self, settings: dict[str, Any]) -> str:
        preferences = settings.get("userPreferences", {})
        value = preferences.get("theme") if isinstance(preferences, dict) else None
        return value if isinstance(value, str) else ""

    def _normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        try:
            model = SettingsModel.model_validate(data or {})
        except ValidationError:
            model = SettingsModel()
        return model.model_dump()

    def _migrate(self, data: Any) -> dict[str, Any]:
        if not isinstance(data, dict):
            return {}
        version = data.get("schemaVersion")
        if not isinstance(version, int):
            version = 0
        if version < 1:
            data = dict(data)
            data["schemaVersion"] = 1
        return data

    def _should_persist_upgrade(self, raw: Any, normalized: dict[str, Any]) -> bool:
        if not isinstance(raw, dict):
            return True
        if raw.get("schemaVersion") != normalized.get("schemaVersion"):
            return True
        return raw != normalized

    def _backup_raw_settings(self) -> None:
        if not self._path.exists():
            return
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        backup_path = self._path.with_name(f"{self._path.stem}.bak-{timestamp}.json")
        try:
            backup_path.write_text(self._path.read_text(encoding="utf-8"), encoding="utf-8")
        except OSError:
            logger.debug("Could not back up settings file %s", self._path, exc_info=True)
