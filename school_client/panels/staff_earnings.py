"""
הכנסות צוות: תצוגה למורה (קריאה בלבד) ופאנל אדמין לאישור וזיכוי/חיוב ידני.
"""
import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Optional

from school_client.core.exceptions import AppException
from school_client.core.logging import get_logger
from school_client.domain.models import Direction, StaffAccount, StaffEarning
from school_client.domain.money import (
    earning_type_icon,
    format_earning_amount,
    format_uzs,
    get_earning_status_color,
    parse_uzs,
)
from school_client.domain.validation import validate_positive_amount, validate_reason
from school_client.panels.base import Panel

logger = get_logger(__name__)

STATUS_FILTERS = ("all", "pending", "approved", "paid")
APPROVE_ROLES = ("admin", "founder", "manager")
ADMIN_ROLES = ("admin", "founder")
EARNING_ACTIONS = ("bonus", "penalty", "adjustment")


@dataclass(frozen=True)
class EarningRow:
    icon: str
    type_label: str
    amount: str
    is_deduction: bool
    status_label: str
    status_color: str
    description: str
    reference_date: str


def earning_rows(earnings: list[StaffEarning], panel: Panel) -> list[EarningRow]:
    lang = panel.language.language
    rows = []
    for earning in earnings:
        display = format_earning_amount(earning.amount, lang)
        key = f"earnings.{earning.earning_type}"
        label = panel.t(key)
        rows.append(
            EarningRow(
                icon=earning_type_icon(earning.earning_type),
                type_label=earning.earning_type if label == key else label,
                amount=display.text,
                is_deduction=display.is_deduction,
                status_label=panel.t(f"common.{earning.status}"),
                status_color=get_earning_status_color(earning.status),
                description=earning.description or earning.reason or panel.t("common.noData"),
                reference_date=(
                    earning.reference_date.strftime("%d.%m.%Y")
                    if earning.reference_date
                    else panel.t("common.noData")
                ),
            )
        )
    return rows


class StaffEarningsView(Panel):
    """ההכנסות של המורה המחובר"""

    name = "staff-earnings"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.account: Optional[StaffAccount] = None
        self.earnings: list[StaffEarning] = []
        self.status_filter = "all"
        self.start_date: Optional[date] = None
        self.end_date: Optional[date] = None
        self.loading = False

    def set_filter(self, status: str) -> None:
        if status not in STATUS_FILTERS:
            raise ValueError(f"Unknown earnings filter: {status}")
        self.status_filter = status

    def set_date_range(self, start: Optional[date], end: Optional[date]) -> None:
        self.start_date = start
        self.end_date = end

    def _earnings_params(self) -> dict:
        params = dict(self.branch_filter())
        if self.status_filter != "all":
            params["status"] = self.status_filter
        if self.start_date:
            params["startDate"] = self.start_date.isoformat()
        if self.end_date:
            params["endDate"] = self.end_date.isoformat()
        return params

    async def fetch(self) -> None:
        self.require_user("staff earnings")
        self.loading = True

        def _apply_account(account: Optional[StaffAccount]) -> None:
            self.account = account

        def _apply_earnings(earnings: list[StaffEarning]) -> None:
            self.earnings = earnings

        try:
            await self.scope.run(
                self.api.staff_earnings.get_account(self.branch_filter()), _apply_account
            )
            await self.scope.run(
                self.api.staff_earnings.list_earnings(self._earnings_params()), _apply_earnings
            )
        except AppException as exc:
            logger.error(
                "טעינת הכנסות נכשלה",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
            self.alert_error(exc)
        finally:
            self.loading = False

    def account_cards(self) -> dict[str, str]:
        lang = self.language.language
        account = self.account or StaffAccount()
        return {
            "total_earned": format_uzs(account.total_earned, lang),
            "available_for_payout": format_uzs(account.available_for_payout, lang),
            "pending_earnings": format_uzs(account.pending_earnings, lang),
            "total_paid_out": format_uzs(account.total_paid_out, lang),
        }

    def rows(self) -> list[EarningRow]:
        return earning_rows(self.earnings, self)


class AdminEarningsPanel(Panel):
    """אישור הכנסות ממתינות ובונוס/קנס/התאמה"""

    name = "admin-earnings"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.teachers: list[dict] = []
        self.pending_earnings: list[StaffEarning] = []
        self.all_earnings: list[StaffEarning] = []
        self.active_tab = "pending"
        self.loading = False

    @property
    def can_approve(self) -> bool:
        return self.auth.has_role(*APPROVE_ROLES)

    @property
    def has_admin_access(self) -> bool:
        return self.auth.has_role(*ADMIN_ROLES)

    async def load(self) -> None:
        if self.active_tab == "pending":
            await asyncio.gather(self.fetch_teachers(), self.fetch_pending_earnings())
        else:
            await asyncio.gather(self.fetch_teachers(), self.fetch_all_earnings())

    async def fetch_teachers(self) -> list[dict]:
        def _apply(data) -> None:
            self.teachers = list(data or [])

        try:
            await self.scope.run(self.api.teachers.get_all(self.branch_filter()), _apply)
        except AppException as exc:
            logger.warning(
                "טעינת מורים נכשלה",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
        return self.teachers

    async def fetch_pending_earnings(self) -> list[StaffEarning]:
        self.loading = True

        def _apply(earnings: list[StaffEarning]) -> None:
            self.pending_earnings = earnings

        try:
            await self.scope.run(self.api.staff_earnings.list_pending(self.branch_filter()), _apply)
        except AppException as exc:
            logger.warning(
                "טעינת הכנסות ממתינות נכשלה",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
            self.alert_error(exc)
        finally:
            self.loading = False
        return self.pending_earnings

    async def fetch_all_earnings(self) -> list[StaffEarning]:
        self.loading = True

        def _apply(earnings: list[StaffEarning]) -> None:
            self.all_earnings = earnings

        try:
            await self.scope.run(self.api.staff_earnings.list_earnings(self.branch_filter()), _apply)
        except AppException as exc:
            logger.warning(
                "טעינת הכנסות נכשלה",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
        finally:
            self.loading = False
        return self.all_earnings

    async def approve(self, earning_id: str) -> bool:
        self.require_role("approve earning", APPROVE_ROLES)
        if not self.notifier.confirm(self.t("earnings.approveConfirm")):
            return False
        try:
            await self.api.staff_earnings.approve(earning_id)
        except AppException as exc:
            self.alert_error(exc)
            return False
        logger.info("הכנסה אושרה", extra_data={"earning_id": earning_id})
        self.notifier.alert(self.t("earnings.approveSuccess"))
        await self.fetch_pending_earnings()
        return True

    async def submit_action(
        self,
        action: str,
        staff_id: Optional[str],
        amount: str,
        reason: str,
        direction: str = Direction.CREDIT.value,
    ) -> bool:
        """amount ב-so'm כפי שהוקלד; נשלח לשרת ב-tyiyn"""
        if action not in EARNING_ACTIONS:
            raise ValueError(f"Unknown earning action: {action}")
        self.require_role(f"earning {action}", ADMIN_ROLES)
        lang = self.language.language

        if not staff_id:
            self.notifier.alert(self.t("earnings.chooseTeacher"))
            return False
        amount_error = validate_positive_amount(amount, lang)
        if amount_error:
            self.notifier.alert(amount_error)
            return False
        reason_error = validate_reason(f"earning_{action}", reason, lang)
        if reason_error:
            self.notifier.alert(reason_error)
            return False

        amount_tyiyn = parse_uzs(amount)
        reason = reason.strip()
        earnings_api = self.api.staff_earnings
        try:
            if action == "bonus":
                await earnings_api.apply_bonus(staff_id, amount_tyiyn, reason)
            elif action == "penalty":
                await earnings_api.apply_penalty(staff_id, amount_tyiyn, reason)
            else:
                await earnings_api.apply_adjustment(staff_id, amount_tyiyn, direction, reason)
        except AppException as exc:
            logger.warning(
                "פעולת הכנסות נכשלה",
                extra_data={"action": action, "staff_id": staff_id, "error": exc.message},
            )
            self.alert_error(exc)
            return False

        logger.info(
            "פעולת הכנסות בוצעה",
            extra_data={"action": action, "staff_id": staff_id, "amount_tyiyn": amount_tyiyn},
        )
        self.notifier.alert(self.t("earnings.applySuccess", type=self.t(f"earnings.{action}")))
        if self.active_tab == "all":
            await self.fetch_all_earnings()
        return True

    def pending_rows(self) -> list[EarningRow]:
        return earning_rows(self.pending_earnings, self)
