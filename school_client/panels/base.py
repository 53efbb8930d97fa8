"""
בסיס משותף לפאנלים: תלויות, תרגום, בדיקת הרשאות והצגת שגיאות
"""
from typing import Optional

from school_client.api import SchoolApi
from school_client.context.auth import AuthContext
from school_client.context.branch import BranchContext
from school_client.context.language import LanguageContext
from school_client.core.exceptions import AccessDeniedError, NotAuthenticatedError, user_message
from school_client.hooks.scope import ViewScope
from school_client.panels.notifier import Notifier


class Panel:
    name = "panel"

    def __init__(
        self,
        api: SchoolApi,
        auth: AuthContext,
        language: LanguageContext,
        notifier: Notifier,
        branch: Optional[BranchContext] = None,
        scope: Optional[ViewScope] = None,
    ):
        self.api = api
        self.auth = auth
        self.language = language
        self.notifier = notifier
        self.branch = branch
        self.scope = scope or ViewScope(self.name)

    def t(self, key: str, **params) -> str:
        return self.language.t(key, **params)

    def branch_filter(self) -> dict:
        return self.branch.get_branch_filter() if self.branch else {}

    def require_user(self, action: str) -> dict:
        user = self.auth.user
        if not user:
            raise NotAuthenticatedError(action)
        return user

    def require_role(self, action: str, allowed: tuple[str, ...]) -> None:
        self.require_user(action)
        if not self.auth.has_role(*allowed):
            raise AccessDeniedError(action, self.auth.role, allowed)

    def alert_error(self, exc: BaseException) -> None:
        self.notifier.alert(user_message(exc, self.t))

    async def close(self) -> None:
        await self.scope.close()
