import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from drive_scanner.db.sqlite import Database

logger = logging.getLogger(__name__)

UNSAFE_MODE = "unsafe_mode"

# key -> (default value, value type, description, editable)
SettingDefaults = Dict[str, Tuple[str, str, str, bool]]


def default_settings(unsafe_mode: bool = False) -> SettingDefaults:
    """Settings seeded into an empty store."""
    return {
        UNSAFE_MODE: (
            str(unsafe_mode).lower(), "bool", "Include system drives in scan results", True),
    }


class SettingsService:
    """Persisted application settings backed by SQLite."""

    def __init__(self, db: Database, defaults: Optional[SettingDefaults] = None):
        """Initialize the settings service."""
        self._db = db
        self._cache: Dict[str, Any] = {}
        self._defaults = defaults if defaults is not None else default_settings()

    async def initialize(self) -> None:
        """Insert defaults for missing settings and load the cache."""
        async with self._db.transaction() as conn:
            for key, (default_value, value_type, description, editable) in self._defaults.items():
                await conn.execute(
                    """
                    INSERT OR IGNORE INTO settings (key, value, value_type, description, editable, last_updated)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (key, default_value, value_type, description, editable, datetime.now().isoformat())
                )

        await self._reload_cache()

    async def _reload_cache(self) -> None:
        """Reload all settings into memory cache."""
        settings = await self._db.execute_and_fetchall("SELECT * FROM settings")
        self._cache = {}

        for setting in settings:
            self._cache[setting['key']] = self._convert_value(setting['value'], setting['value_type'])

        logger.debug(f"Loaded {len(self._cache)} settings")

    def _convert_value(self, value: str, value_type: str) -> Any:
        """Convert value from string to the appropriate type."""
        if value_type == "int":
            return int(value)
        elif value_type == "bool":
            return value.lower() == "true"
        elif value_type == "json":
            return json.loads(value)
        # Default to string
        return value

    def _convert_to_string(self, value: Any, value_type: str) -> str:
        """Convert value to string based on type."""
        if value_type == "json":
            return json.dumps(value)
        elif value_type == "bool":
            return str(bool(value)).lower()
        return str(value)

    async def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        if key in self._cache:
            return self._cache[key]
        return default

    async def set(self, key: str, value: Any) -> bool:
        """Set a setting value."""
        setting = await self._db.execute_and_fetchone(
            "SELECT * FROM settings WHERE key = ?", (key,)
        )

        if not setting:
            raise ValueError(f"Setting {key} does not exist")

        if not setting['editable']:
            raise ValueError(f"Setting {key} is not editable")

        value_type = setting['value_type']
        str_value = self._convert_to_string(value, value_type)

        async with self._db.transaction() as conn:
            await conn.execute(
                "UPDATE settings SET value = ?, last_updated = ? WHERE key = ?",
                (str_value, datetime.now().isoformat(), key)
            )

        self._cache[key] = self._convert_value(str_value, value_type)
        logger.info(f"Setting {key} updated to {str_value}")
        return True

    async def get_all(self) -> Dict[str, Dict[str, Union[str, Any]]]:
        """Get all settings."""
        settings = await self._db.execute_and_fetchall("SELECT * FROM settings ORDER BY key")

        result = {}
        for setting in settings:
            result[setting['key']] = {
                "value": self._convert_value(setting['value'], setting['value_type']),
                "value_type": setting['value_type'],
                "description": setting['description'],
                "editable": bool(setting['editable']),
                "last_updated": setting['last_updated']
            }

        return result

    async def get_setting(self, key: str) -> Optional[Dict[str, Union[str, Any]]]:
        """Get details about a specific setting."""
        setting = await self._db.execute_and_fetchone(
            "SELECT * FROM settings WHERE key = ?", (key,)
        )

        if not setting:
            return None

        return {
            "key": setting['key'],
            "value": self._convert_value(setting['value'], setting['value_type']),
            "value_type": setting['value_type'],
            "description": setting['description'],
            "editable": bool(setting['editable']),
            "last_updated": setting['last_updated']
        }
