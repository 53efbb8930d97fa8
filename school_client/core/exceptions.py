"""
Client Exception Hierarchy

Four failure categories reach callers:
- validation errors (raised before any network call)
- session expiry (HTTP 401, handled centrally by the gateway)
- server-rejected operations (other 4xx/5xx, or success=false bodies)
- transport failures (network errors, timeouts)
"""
from typing import Any, Callable
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes"""

    # General errors (1xxx)
    INTERNAL_ERROR = "ERR_1000"
    VALIDATION_ERROR = "ERR_1001"
    NOT_FOUND = "ERR_1002"
    UNAUTHORIZED = "ERR_1004"
    FORBIDDEN = "ERR_1005"

    # Session errors (3xxx)
    SESSION_EXPIRED = "ERR_3001"
    NOT_AUTHENTICATED = "ERR_3002"

    # Wallet errors (4xxx)
    WALLET_NOT_FOUND = "ERR_4001"
    INVALID_AMOUNT = "ERR_4003"
    REASON_TOO_SHORT = "ERR_4005"

    # Backend errors (5xxx)
    API_ERROR = "ERR_5000"
    BACKEND_UNAVAILABLE = "ERR_5003"
    BACKEND_TIMEOUT = "ERR_5004"


class AppException(Exception):
    """Base exception for all client errors"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int | None = None,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
                "status_code": self.status_code,
                "details": self.details
            }
        }


class ValidationException(AppException):
    """ולידציה בצד הלקוח נכשלה - לא נשלחה שום בקשה לשרת"""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )
        self.field = field
        if field:
            self.details["field"] = field


def response_message(response: Any) -> str | None:
    """השדה message מגוף JSON של תשובה, אם יש"""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"] or None
    return None


class ApiError(AppException):
    """השרת דחה את הפעולה (4xx/5xx שאינו 401, או success=false)"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
        error_code: ErrorCode = ErrorCode.API_ERROR,
        details: dict[str, Any] | None = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status_code,
            details=details
        )
        self.server_message = server_message

    @classmethod
    def from_response(
        cls,
        operation: str,
        response: Any,
        *,
        message: str | None = None,
        max_response_chars: int = 500
    ) -> "ApiError":
        """
        יצירת ApiError מתוך HTTP response בצורה עקבית.

        Args:
            operation: שם הפעולה (לדוגמה: "POST /wallet/top-up")
            response: אובייקט response (למשל httpx.Response)
            message: הודעת שגיאה מותאמת (אם לא סופק - נבנית אוטומטית)
            max_response_chars: אורך מקסימלי לשמירת response_text
        """
        status_code = getattr(response, "status_code", None)
        response_text = getattr(response, "text", "") or ""

        server_message = response_message(response)

        error_code = ErrorCode.API_ERROR
        if status_code == 404:
            error_code = ErrorCode.NOT_FOUND
        elif status_code == 403:
            error_code = ErrorCode.FORBIDDEN

        return cls(
            message=message or server_message or f"{operation} returned status {status_code}",
            status_code=status_code,
            server_message=server_message,
            error_code=error_code,
            details={
                "operation": operation,
                "status_code": status_code,
                "response_text": response_text[:max_response_chars],
            },
        )


class SessionExpiredError(AppException):
    """401 - הסשן נוקה והאפליקציה מנווטת למסך ההתחברות"""

    def __init__(self, operation: str, server_message: str | None = None):
        super().__init__(
            message=f"Session expired during {operation}",
            error_code=ErrorCode.SESSION_EXPIRED,
            status_code=401,
            details={"operation": operation}
        )
        # למשל "Invalid credentials" כשה-401 הגיע מ-login
        self.server_message = server_message


class TransportError(AppException):
    """שגיאת רשת או timeout - אין תשובה מהשרת"""

    def __init__(self, operation: str, error: str, timeout: bool = False):
        super().__init__(
            message=f"{operation} failed: {error}",
            error_code=ErrorCode.BACKEND_TIMEOUT if timeout else ErrorCode.BACKEND_UNAVAILABLE,
            details={"operation": operation, "timeout": timeout}
        )


class NotFoundException(AppException):
    """Raised when a requested resource is not found"""

    def __init__(
        self,
        resource: str,
        identifier: Any,
        error_code: ErrorCode = ErrorCode.NOT_FOUND
    ):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            error_code=error_code,
            status_code=404,
            details={"resource": resource, "identifier": str(identifier)}
        )


class WalletNotFoundError(NotFoundException):
    """Raised when the summary lookup returns no wallet"""

    def __init__(self, owner_id: str, owner_type: str):
        super().__init__(
            resource="Wallet",
            identifier=f"{owner_type}/{owner_id}",
            error_code=ErrorCode.WALLET_NOT_FOUND
        )


class NotAuthenticatedError(AppException):
    """הפעולה דורשת משתמש מחובר"""

    def __init__(self, action: str):
        super().__init__(
            message=f"Login required for {action}",
            error_code=ErrorCode.NOT_AUTHENTICATED,
            details={"action": action}
        )


class AccessDeniedError(AppException):
    """התפקיד של המשתמש לא מורשה לפעולה בפאנל"""

    def __init__(self, action: str, role: str | None, allowed: tuple[str, ...]):
        super().__init__(
            message=f"Role '{role}' may not perform {action}",
            error_code=ErrorCode.FORBIDDEN,
            status_code=403,
            details={"action": action, "role": role, "allowed_roles": list(allowed)}
        )


def user_message(exc: BaseException, translate: Callable[[str], str]) -> str:
    """ההודעה שמוצגת למשתמש: הודעת השרת אם יש, אחרת fallback מתורגם"""
    if isinstance(exc, (ApiError, SessionExpiredError)) and exc.server_message:
        return exc.server_message
    if isinstance(exc, ValidationException):
        return exc.message
    return translate("common.error")
