import logging
from typing import Callable, Optional

from inventory_app.application.data_access import DataAccess
from inventory_app.core.domain.models import SettingsUpdate, UserSettings
from inventory_app.core.exceptions import ValidationError
from inventory_app.core.formatters import SUPPORTED_CURRENCIES, SUPPORTED_LANGUAGES
from inventory_app.core.ports.backend import Query
from inventory_app.core.timeutils import utcnow

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "settings"
SUPPORTED_THEMES = ("light", "dark")
BACKUP_FREQUENCIES = ("daily", "weekly", "monthly")

DEFAULT_SETTINGS = {
    "currency": "MAD",
    "language": "en",
    "theme": "light",
    "backup_frequency": "weekly",
}


class SettingsService:
    def __init__(self, data: DataAccess, defaults: Optional[dict] = None, clock: Callable = utcnow):
        self.data = data
        self.defaults = {**DEFAULT_SETTINGS, **(defaults or {})}
        self._clock = clock

    def _find(self, user_id: Optional[str]):
        query = Query().eq("user_id", user_id).order("created_at").range(0, 0)
        rows = self.data.backend.select(SETTINGS_TABLE, query).rows
        return rows[0] if rows else None

    def get_settings(self, user_id: Optional[str] = None) -> UserSettings:
        """Return the user's settings row, creating it with defaults on first access."""
        row = self._find(user_id)
        if row is None:
            row = self.data.mutate(
                lambda: self.data.backend.insert(SETTINGS_TABLE, {"user_id": user_id, **self.defaults}),
                ("settings:",),
                {"operation": "create_settings"},
            )
            logger.info(f"Created default settings for user {user_id}")
        return UserSettings.model_validate(row)

    def update_settings(self, user_id: Optional[str], changes: SettingsUpdate) -> UserSettings:
        values = changes.model_dump(exclude_none=True)
        if "currency" in values and values["currency"] not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {values['currency']}")
        if "language" in values and values["language"] not in SUPPORTED_LANGUAGES:
            raise ValidationError(f"Unsupported language: {values['language']}")
        if "theme" in values and values["theme"] not in SUPPORTED_THEMES:
            raise ValidationError(f"Unsupported theme: {values['theme']}")
        if "backup_frequency" in values and values["backup_frequency"] not in BACKUP_FREQUENCIES:
            raise ValidationError(f"Unsupported backup frequency: {values['backup_frequency']}")

        current = self.get_settings(user_id)
        if not values:
            return current

        values["updated_at"] = self._clock()
        rows = self.data.mutate(
            lambda: self.data.backend.update(SETTINGS_TABLE, values, Query().eq("id", current.id)),
            ("settings:", "dashboard:", "items:"),
            {"operation": "update_settings"},
        )
        return UserSettings.model_validate(rows[0])
