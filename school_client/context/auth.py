"""
AuthContext - המשתמש המחובר, התחברות/התנתקות והתחזות ("צפייה כתלמיד").

כל קריאה של token/user עוברת דרך הקונטקסט הזה ו-SessionStorage בלבד.
"""
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from school_client.api import SchoolApi, SessionExpiredEvent
from school_client.core.exceptions import AppException, user_message
from school_client.core.logging import get_logger
from school_client.core.storage import SessionStorage

logger = get_logger(__name__)

AuthListener = Callable[[], Union[Awaitable[None], None]]


@dataclass
class LoginResult:
    success: bool
    user: Optional[dict[str, Any]] = None
    message: Optional[str] = None


class AuthContext:
    """מצב התחברות משותף לכל המסכים"""

    def __init__(self, api: SchoolApi, session: SessionStorage):
        self.api = api
        self.session = session
        self.loading = False
        self._listeners: list[AuthListener] = []
        api.client.subscribe_session_expired(self._on_session_expired)

    # ── מצב ──

    @property
    def user(self) -> Optional[dict[str, Any]]:
        return self.session.user

    @property
    def is_authenticated(self) -> bool:
        return self.session.has_token and self.session.user is not None

    @property
    def role(self) -> Optional[str]:
        user = self.session.user or {}
        return user.get("role") or user.get("userType")

    def has_role(self, *roles: str) -> bool:
        return self.role in roles

    @property
    def is_impersonating(self) -> bool:
        return self.session.staff_user is not None

    # ── מאזינים לשינוי התחברות (BranchContext וכו') ──

    def add_listener(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            result = listener()
            if inspect.isawaitable(result):
                await result

    async def _on_session_expired(self, event: SessionExpiredEvent) -> None:
        # הסשן כבר נוקה בשכבת התעבורה
        self.session.set_staff_user(None)
        await self._notify()

    # ── פעולות ──

    async def restore(self) -> Optional[dict[str, Any]]:
        """טעינת המשתמש מ-/auth/me כשיש טוקן. כישלון מנקה את הסשן."""
        if not self.session.has_token:
            return None

        self.loading = True
        try:
            user = await self.api.auth.me()
            self.session.set_user(user)
        except AppException as exc:
            logger.warning(
                "שחזור משתמש נכשל, מנקה סשן",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
            self.session.clear()
        finally:
            self.loading = False

        await self._notify()
        return self.session.user

    async def login(self, email: str, password: str, user_type: str = "teacher") -> LoginResult:
        self.loading = True
        try:
            result = await self.api.auth.login(email, password, user_type)
        except AppException as exc:
            logger.info(
                "התחברות נכשלה",
                extra_data={"user_type": user_type, "error_code": exc.error_code.value},
            )
            return LoginResult(success=False, message=user_message(exc, lambda _: "Login failed"))
        finally:
            self.loading = False

        token = result.get("token")
        user = result.get("user")
        if not token:
            return LoginResult(success=False, message="Login failed")

        self.session.set_token(token)
        self.session.set_user(user)
        self.session.set_staff_user(None)
        logger.info(
            "משתמש התחבר",
            extra_data={"user_id": (user or {}).get("id"), "user_type": user_type},
        )
        await self._notify()
        return LoginResult(success=True, user=self.session.user)

    async def logout(self) -> None:
        self.session.clear()
        self.session.set_staff_user(None)
        await self._notify()

    async def view_as_student(self, student: dict[str, Any]) -> dict[str, Any]:
        """איש צוות צופה באפליקציה כתלמיד. המשתמש המקורי נשמר כ-staff_user."""
        if not self.is_impersonating:
            self.session.set_staff_user(self.session.user)

        student_user = {
            "id": student.get("_id") or student.get("id"),
            "studentId": student.get("studentId"),
            "name": student.get("name"),
            "email": student.get("email"),
            "role": "student",
            "userType": "student",
        }
        self.session.set_user(student_user)
        logger.info(
            "צפייה כתלמיד",
            extra_data={"student_id": student_user["id"]},
        )
        await self._notify()
        return student_user

    async def return_to_staff(self) -> Optional[dict[str, Any]]:
        staff_user = self.session.staff_user
        if staff_user is None:
            return None
        self.session.set_user(staff_user)
        self.session.set_staff_user(None)
        await self._notify()
        return staff_user
