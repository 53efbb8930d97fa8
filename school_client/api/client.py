"""
API Gateway Client - לקוח HTTP יחיד ומוגדר מראש מול ה-backend.

- מצמיד Authorization: Bearer <token> לכל בקשה כשיש טוקן בסשן
- 401 מכל בקשה: מנקה token+user מהסשן ומודיע למנויים (מעטפת האפליקציה
  היא זו שמנווטת למסך ההתחברות, לא שכבת התעבורה)
- אין retry, אין תור, אין איחוד בקשות כפולות
- חוזה תוצאה אחיד: מעטפת {success, data, message} נפתחת תמיד ל-data
"""
from __future__ import annotations

import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from school_client.core.config import settings
from school_client.core.exceptions import (
    ApiError,
    SessionExpiredError,
    TransportError,
    response_message,
)
from school_client.core.logging import get_correlation_id, get_logger, mask_token
from school_client.core.storage import SessionStorage

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionExpiredEvent:
    """אירוע פקיעת סשן - נשלח לכל המנויים אחרי ניקוי הסשן"""
    operation: str
    login_route: str
    # False כשהבקשה יצאה בלי טוקן (למשל login עם פרטים שגויים)
    had_token: bool = True


SessionExpiredCallback = Callable[[SessionExpiredEvent], Union[Awaitable[None], None]]


def _clean_params(params: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """פרמטרים עם None לא נשלחים (כמו undefined ב-query string)"""
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None}


class ApiClient:
    """
    לקוח HTTP משותף לכל עטיפות ה-API.

    ניתן להזריק transport (למשל httpx.ASGITransport בבדיקות).
    """

    def __init__(
        self,
        session: SessionStorage,
        base_url: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        login_route: Optional[str] = None,
    ) -> None:
        self._session = session
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._login_route = login_route or settings.LOGIN_ROUTE
        self._listeners: list[SessionExpiredCallback] = []

        client_kwargs: dict[str, Any] = {}
        if settings.API_TIMEOUT_SECONDS is not None:
            client_kwargs["timeout"] = settings.API_TIMEOUT_SECONDS
        if transport is not None:
            client_kwargs["transport"] = transport

        # Content-Type לא מוגדר ברמת הלקוח: httpx קובע application/json עבור json=
        # ו-multipart עם boundary עבור files=
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Accept": "application/json"},
            event_hooks={
                "request": [self._on_request],
                "response": [self._on_response],
            },
            **client_kwargs,
        )

    # ── מחזור חיים ──

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def session(self) -> SessionStorage:
        return self._session

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── פקיעת סשן ──

    def subscribe_session_expired(self, callback: SessionExpiredCallback) -> Callable[[], None]:
        """הרשמה לאירוע 401. מחזיר פונקציה לביטול ההרשמה."""
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    async def _emit_session_expired(self, operation: str, had_token: bool = True) -> None:
        event = SessionExpiredEvent(
            operation=operation, login_route=self._login_route, had_token=had_token
        )
        for callback in list(self._listeners):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                # מנוי שנכשל לא מונע ממנויים אחרים לקבל את האירוע
                logger.error(
                    "מנוי לאירוע פקיעת סשן נכשל",
                    extra_data={"operation": operation, "error": str(exc)},
                    exc_info=True,
                )

    # ── event hooks ──

    async def _on_request(self, request: httpx.Request) -> None:
        token = self._session.token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        request.headers["X-Correlation-ID"] = get_correlation_id()

        logger.debug(
            f"API request: {request.method} {request.url.path}",
            extra_data={
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.url.params),
                "token": mask_token(token),
            },
        )

    async def _on_response(self, response: httpx.Response) -> None:
        if response.status_code != 401:
            return

        operation = f"{response.request.method} {response.request.url.path}"
        logger.warning(
            "401 מהשרת - מנקה סשן ומנווט להתחברות",
            extra_data={"operation": operation, "login_route": self._login_route},
        )
        self._session.clear()
        await self._emit_session_expired(
            operation, had_token="Authorization" in response.request.headers
        )

    # ── בקשות ──

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        files: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> Any:
        """בקשה אחת לשרת. מחזיר את data מתוך המעטפת, או את הגוף כולו כשאין מעטפת."""
        method = method.upper()
        operation = f"{method} {path}"
        started = time.monotonic()

        try:
            response = await self._client.request(
                method,
                path,
                params=_clean_params(params),
                json=json,
                files=files,
                data=data,
            )
        except httpx.TimeoutException as exc:
            logger.warning(
                f"API timeout: {operation}",
                extra_data={"operation": operation, "error": str(exc)},
            )
            raise TransportError(operation, str(exc), timeout=True) from exc
        except httpx.RequestError as exc:
            logger.warning(
                f"API network error: {operation}",
                extra_data={"operation": operation, "error": str(exc)},
            )
            raise TransportError(operation, str(exc)) from exc

        duration = round(time.monotonic() - started, 4)
        log_level = "info" if response.status_code < 400 else "warning"
        getattr(logger, log_level)(
            f"API response: {operation}",
            extra_data={
                "operation": operation,
                "status_code": response.status_code,
                "duration_seconds": duration,
            },
        )

        if response.status_code == 401:
            raise SessionExpiredError(operation, response_message(response))
        if response.status_code >= 400:
            raise ApiError.from_response(operation, response)

        return self._unwrap(operation, response)

    @staticmethod
    def _unwrap(operation: str, response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except ValueError:
            raise ApiError.from_response(
                operation,
                response,
                message=f"{operation} returned a non-JSON body",
            )

        if isinstance(body, dict) and "success" in body:
            if body.get("success") is False:
                raise ApiError.from_response(operation, response)
            # חלק מהתשובות (login) מחזירות שדות ליד success ולא תחת data
            if "data" in body:
                return body["data"]
            return {key: value for key, value in body.items() if key not in ("success", "message")}
        return body

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("DELETE", path, params=params)

    # ── עזרים ──

    def image_url(self, filename: Optional[str]) -> Optional[str]:
        """URL מלא לתמונה: קישור מלא (ImageKit) חוזר כמו שהוא, שם קובץ -> /uploads/ בשרת"""
        if not filename:
            return None
        if filename.startswith("http://") or filename.startswith("https://"):
            return filename
        root = self._base_url[:-len("/api")] if self._base_url.endswith("/api") else self._base_url
        return f"{root}/uploads/{filename}"
