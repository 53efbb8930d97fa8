"""
Admin Payout Panel - רישום תשלומי שכר בפועל (מזומן/העברה) לצוות.

אין התאמה מול ספר ההכנסות: התשלומים נרשמים בנפרד.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from school_client.core.exceptions import AppException
from school_client.core.logging import get_logger
from school_client.domain.models import BankDetails, PayoutMethod, SalaryPayout
from school_client.domain.money import format_uzs, get_payout_status_color, parse_uzs
from school_client.domain.validation import validate_payout_form, validate_reason
from school_client.panels.base import Panel

logger = get_logger(__name__)

PAYOUT_ROLES = ("admin", "founder", "manager")


@dataclass
class PayoutForm:
    teacher_id: str = ""
    amount: str = ""
    method: str = PayoutMethod.CASH.value
    payment_date: date = field(default_factory=date.today)
    account_number: str = ""
    account_name: str = ""
    bank_name: str = ""
    notes: str = ""

    def bank_details(self) -> Optional[BankDetails]:
        if self.method != PayoutMethod.BANK_TRANSFER.value:
            return None
        return BankDetails(
            account_number=self.account_number,
            account_name=self.account_name,
            bank_name=self.bank_name,
        )


class AdminPayoutPanel(Panel):
    name = "admin-payouts"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.teachers: list[dict] = []
        self.payouts: list[SalaryPayout] = []
        self.active_tab = "create"
        self.loading = False

    @property
    def has_access(self) -> bool:
        role = (self.auth.role or "").lower().strip()
        return role in PAYOUT_ROLES

    async def load(self) -> None:
        """מורים והיסטוריה במקביל, כל אחד למצב נפרד"""
        self.require_role("salary payouts", PAYOUT_ROLES)
        await asyncio.gather(self.fetch_teachers(), self.fetch_payout_history())

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

    async def fetch_payout_history(self) -> list[SalaryPayout]:
        self.loading = True

        def _apply(payouts: list[SalaryPayout]) -> None:
            self.payouts = payouts

        try:
            await self.scope.run(self.api.salary_payouts.list_payouts(self.branch_filter()), _apply)
        except AppException as exc:
            logger.warning(
                "טעינת היסטוריית תשלומים נכשלה",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
        finally:
            self.loading = False
        return self.payouts

    def _teacher_name(self, teacher_id: str) -> str:
        for teacher in self.teachers:
            if teacher.get("_id") == teacher_id:
                return teacher.get("name") or self.t("common.noData")
        return self.t("common.noData")

    async def create_payout(self, form: PayoutForm) -> bool:
        self.require_role("record payout", PAYOUT_ROLES)
        lang = self.language.language

        error = validate_payout_form(
            form.teacher_id, form.amount, form.method, form.account_number, lang
        )
        if error:
            self.notifier.alert(error)
            return False

        amount_tyiyn = parse_uzs(form.amount)
        question = self.t(
            "payouts.recordConfirm",
            amount=format_uzs(amount_tyiyn, lang),
            name=self._teacher_name(form.teacher_id),
        )
        if not self.notifier.confirm(question):
            return False

        try:
            await self.api.salary_payouts.create_payout(
                form.teacher_id,
                amount_tyiyn,
                method=form.method,
                payment_date=form.payment_date,
                bank_details=form.bank_details(),
                notes=form.notes,
            )
        except AppException as exc:
            logger.warning(
                "רישום תשלום נכשל",
                extra_data={"staff_id": form.teacher_id, "error": exc.message},
            )
            self.alert_error(exc)
            return False

        logger.info(
            "תשלום שכר נרשם",
            extra_data={"staff_id": form.teacher_id, "amount_tyiyn": amount_tyiyn, "method": form.method},
        )
        self.notifier.alert(self.t("payouts.recordSuccess"))
        await self.fetch_payout_history()
        self.active_tab = "history"
        return True

    async def complete_payout(self, payout_id: str) -> bool:
        """pending -> completed"""
        self.require_role("complete payout", PAYOUT_ROLES)
        if not self.notifier.confirm(self.t("payouts.completeConfirm")):
            return False
        try:
            await self.api.salary_payouts.complete_payout(payout_id)
        except AppException as exc:
            self.alert_error(exc)
            return False
        logger.info("תשלום הושלם", extra_data={"payout_id": payout_id})
        self.notifier.alert(self.t("payouts.completeSuccess"))
        await self.fetch_payout_history()
        return True

    async def cancel_payout(self, payout_id: str) -> bool:
        """pending -> cancelled, עם סיבה של 10 תווים לפחות"""
        self.require_role("cancel payout", PAYOUT_ROLES)
        reason = self.notifier.prompt(self.t("payouts.cancelReason"))
        if reason is None:
            return False
        error = validate_reason("payout_cancel", reason, self.language.language)
        if error:
            self.notifier.alert(error)
            return False
        try:
            await self.api.salary_payouts.cancel_payout(payout_id, reason.strip())
        except AppException as exc:
            self.alert_error(exc)
            return False
        logger.info("תשלום בוטל", extra_data={"payout_id": payout_id})
        self.notifier.alert(self.t("payouts.cancelSuccess"))
        await self.fetch_payout_history()
        return True

    def history_rows(self) -> list[dict]:
        lang = self.language.language
        return [
            {
                "id": payout.id,
                "payout_id": payout.payout_id,
                "staff": payout.staff_name or self.t("common.noData"),
                "amount": format_uzs(payout.amount, lang),
                "method": self.t(f"payouts.{payout.method}"),
                "status": self.t(f"common.{payout.status}"),
                "status_color": get_payout_status_color(payout.status),
                "can_complete": payout.status == "pending",
                "can_cancel": payout.status == "pending",
            }
            for payout in self.payouts
        ]
