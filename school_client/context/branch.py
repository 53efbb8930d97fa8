"""
BranchContext - בחירת סניף וסינון לפי סניף לשאילתות רשימה.

selected_branch = None פירושו "כל הסניפים".
"""
from typing import Any, Optional

from school_client.api import SchoolApi
from school_client.context.auth import AuthContext
from school_client.core.exceptions import AppException
from school_client.core.logging import get_logger

logger = get_logger(__name__)

BRANCH_ROLES = ("founder", "admin", "manager")


class BranchContext:
    def __init__(self, api: SchoolApi, auth: AuthContext):
        self.api = api
        self.auth = auth
        self.branches: list[dict[str, Any]] = []
        self.selected_branch: Optional[dict[str, Any]] = None
        self.loading = False
        auth.add_listener(self.on_auth_change)

    @property
    def is_all_branches(self) -> bool:
        return self.selected_branch is None

    def get_branch_filter(self) -> dict[str, Any]:
        if self.selected_branch is None:
            return {}
        return {"branchId": self.selected_branch.get("_id")}

    def select_branch(self, branch_id: Optional[str]) -> Optional[dict[str, Any]]:
        """None = כל הסניפים. מזהה שלא ברשימה לא משנה את הבחירה."""
        if branch_id is None:
            self.selected_branch = None
            return None
        for branch in self.branches:
            if branch.get("_id") == branch_id:
                self.selected_branch = branch
                return branch
        logger.warning("סניף לא נמצא ברשימה", extra_data={"branch_id": branch_id})
        return self.selected_branch

    async def on_auth_change(self) -> None:
        if self.auth.session.has_token and self.auth.has_role(*BRANCH_ROLES):
            await self.fetch_branches()
        else:
            self.branches = []
            self.selected_branch = None

    async def fetch_branches(self) -> list[dict[str, Any]]:
        if not self.auth.session.has_token:
            logger.warning("אין טוקן, לא נטענים סניפים")
            self.branches = []
            return self.branches

        self.loading = True
        try:
            data = await self.api.branches.get_all()
        except AppException as exc:
            logger.error(
                "טעינת סניפים נכשלה",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
            self.branches = []
            return self.branches
        finally:
            self.loading = False

        branches = [b for b in (data or []) if b.get("isActive")]
        user = self.auth.user or {}
        if user.get("role") != "founder" and user.get("branchId"):
            # לא-מייסד רואה רק את הסניף שלו, והוא נבחר אוטומטית
            branches = [b for b in branches if b.get("_id") == user["branchId"]]
            if branches:
                self.selected_branch = branches[0]

        self.branches = branches
        logger.debug(
            "סניפים נטענו",
            extra_data={"count": len(branches), "role": user.get("role")},
        )
        return branches
