"""
Display preferences kept in the metadata collection
"""
from backend.storage.base import DEFAULT_THEME, METADATA, THEME, VALID_THEMES, PersistenceAdapter
from backend.utils.errors import PersistenceError, ValidationError
from backend.utils.logger import get_logger

logger = get_logger(__name__)


class ThemePreference:

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter

    async def get(self) -> str:
        """Stored theme, or the default when unset, unknown or unreadable"""
        try:
            record = await self.adapter.get(METADATA, THEME)
        except PersistenceError as e:
            logger.warning(f"Could not read theme preference: {e}")
            return DEFAULT_THEME

        theme = record.get("value") if record else None
        return theme if theme in VALID_THEMES else DEFAULT_THEME

    async def set(self, theme: str) -> str:
        if theme not in VALID_THEMES:
            raise ValidationError(f"Unknown theme: {theme}")
        await self.adapter.put(METADATA, {"key": THEME, "value": theme})
        return theme

    async def toggle(self) -> str:
        current = await self.get()
        return await self.set("light" if current == "dark" else "dark")
