"""
ViewScope - עבודה אסינכרונית שקשורה לחיי מסך.

כל טעינה של מסך רצה בתוך scope. סגירת ה-scope מבטלת משימות פתוחות,
ותוצאה שמגיעה אחרי הסגירה נזרקת ולא נכתבת למצב.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from school_client.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class LoadState(Generic[T]):
    """data / loading / error של טעינה אחת"""
    data: Optional[T] = None
    loading: bool = False
    error: Optional[BaseException] = field(default=None)


class ScopeClosedError(RuntimeError):
    pass


class ViewScope:
    def __init__(self, name: str = "view"):
        self.name = name
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @staticmethod
    def _discard(coro: Awaitable[Any]) -> None:
        # סוגרים את ה-coroutine כדי שלא תישאר אזהרת "never awaited"
        close = getattr(coro, "close", None)
        if close:
            close()

    def spawn(self, coro: Awaitable[T]) -> "asyncio.Task[T]":
        if self._closed:
            self._discard(coro)
            raise ScopeClosedError(f"ViewScope '{self.name}' is closed")
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self, coro: Awaitable[T], apply: Callable[[T], Any]) -> bool:
        """
        מריץ את coro ב-scope ומחיל את התוצאה רק אם ה-scope עדיין פתוח.

        רענון שמתחיל אחרי שהמסך כבר נסגר (למשל אחרי פעולת כתיבה שהסתיימה
        באיחור) לא נשלח בכלל.

        Returns:
            True אם התוצאה הוחלה, False אם נזרקה (scope נסגר)
        """
        if self._closed:
            self._discard(coro)
            logger.debug("טעינה אחרי סגירת המסך לא נשלחה", extra_data={"scope": self.name})
            return False
        task = self.spawn(coro)
        try:
            result = await task
        except asyncio.CancelledError:
            if self._closed:
                return False
            raise
        if self._closed:
            logger.debug("תוצאה הגיעה אחרי סגירת המסך ונזרקה", extra_data={"scope": self.name})
            return False
        apply(result)
        return True

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.debug(
                "משימות פתוחות בוטלו בסגירת מסך",
                extra_data={"scope": self.name, "cancelled": len(pending)},
            )

    async def __aenter__(self) -> "ViewScope":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
