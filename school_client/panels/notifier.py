"""
Notifier - דיאלוגים חוסמים (alert / confirm / prompt) מאחורי ממשק אחד.

הפאנלים לא מדברים עם המסוף ישירות; ה-CLI מזריק ConsoleNotifier
והבדיקות מזריקות מימוש מתוסרט.
"""
from abc import ABC, abstractmethod
from typing import Callable, Optional

from school_client.core.logging import get_logger

logger = get_logger(__name__)


class Notifier(ABC):
    @abstractmethod
    def alert(self, message: str) -> None:
        ...

    @abstractmethod
    def confirm(self, message: str) -> bool:
        ...

    @abstractmethod
    def prompt(self, message: str) -> Optional[str]:
        """None = המשתמש ביטל"""
        ...


class ConsoleNotifier(Notifier):
    """דיאלוגים במסוף. assume_yes מדלג על אישורים (להרצה לא אינטראקטיבית)."""

    def __init__(
        self,
        assume_yes: bool = False,
        output: Callable[[str], None] = print,
        read: Callable[[str], str] = input,
    ):
        self.assume_yes = assume_yes
        self._output = output
        self._read = read

    def alert(self, message: str) -> None:
        self._output(message)

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        try:
            answer = self._read(f"{message} [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")

    def prompt(self, message: str) -> Optional[str]:
        try:
            answer = self._read(f"{message} ")
        except EOFError:
            logger.debug("prompt בוטל (EOF)")
            return None
        return answer
