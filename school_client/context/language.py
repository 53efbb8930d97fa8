"""
LanguageContext - שפת הממשק ותרגום מחרוזות
"""
from typing import Any, Callable, Optional

from school_client.core.config import VALID_LANGUAGES, settings
from school_client.core.logging import get_logger
from school_client.core.storage import DeviceStorage
from school_client.domain.locales import translate

logger = get_logger(__name__)

LANGUAGE_KEY = "language"


class LanguageContext:
    def __init__(self, device: Optional[DeviceStorage] = None, default: Optional[str] = None):
        self._device = device
        stored = device.get(LANGUAGE_KEY) if device else None
        self._language = stored if stored in VALID_LANGUAGES else (default or settings.DEFAULT_LANGUAGE)
        self._listeners: list[Callable[[str], None]] = []

    @property
    def language(self) -> str:
        return self._language

    def change_language(self, language: str) -> bool:
        """שפה לא נתמכת מתעלמים ממנה (מחזיר False)"""
        if language not in VALID_LANGUAGES:
            logger.warning("שפה לא נתמכת", extra_data={"language": language})
            return False
        self._language = language
        if self._device:
            self._device.set(LANGUAGE_KEY, language)
        for listener in list(self._listeners):
            listener(language)
        return True

    def on_change(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def t(self, key: str, **params: Any) -> str:
        return translate(self._language, key, **params)
