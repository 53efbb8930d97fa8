"""
Admin Wallet Panel - תור בקשות טעינה ממתינות ופעולות קנס/החזר/התאמה.

הרשאות:
- אישור/דחיית טעינות: admin, founder, receptionist, manager
- קנס / החזר / התאמה / נעילה: admin, founder
"""
from typing import Optional

from school_client.core.exceptions import AppException, WalletNotFoundError
from school_client.core.logging import get_logger
from school_client.domain.models import Direction, OwnerType, WalletTransaction
from school_client.domain.money import format_uzs, get_transaction_status_color, parse_uzs
from school_client.domain.validation import validate_positive_amount, validate_reason
from school_client.panels.base import Panel

logger = get_logger(__name__)

CONFIRM_ROLES = ("admin", "founder", "receptionist", "manager")
ADMIN_ROLES = ("admin", "founder")

WALLET_ACTIONS = ("penalty", "refund", "adjustment")


class AdminWalletPanel(Panel):
    name = "admin-wallet"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.pending_top_ups: list[WalletTransaction] = []
        self.students: list[dict] = []
        self.loading = False

    @property
    def can_confirm_top_ups(self) -> bool:
        return self.auth.has_role(*CONFIRM_ROLES)

    @property
    def has_admin_access(self) -> bool:
        return self.auth.has_role(*ADMIN_ROLES)

    # ── תור ממתינים ──

    async def fetch_pending_top_ups(self) -> list[WalletTransaction]:
        """כל התנועות מהשרת, סינון top-up + pending בצד הלקוח"""
        self.require_role("view pending top-ups", CONFIRM_ROLES)
        self.loading = True

        def _apply(page) -> None:
            self.pending_top_ups = [tx for tx in page.transactions if tx.is_pending_top_up]

        try:
            await self.scope.run(self.api.wallet.get_all_transactions(), _apply)
        except AppException as exc:
            logger.warning(
                "טעינת טעינות ממתינות נכשלה",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
        finally:
            self.loading = False
        return self.pending_top_ups

    def pending_rows(self) -> list[dict]:
        lang = self.language.language
        return [
            {
                "id": tx.id,
                "amount": format_uzs(tx.amount, lang),
                "payment_method": tx.payment_method,
                "reason": tx.reason or self.t("common.noData"),
                "status": self.t(f"common.{tx.status}"),
                "status_color": get_transaction_status_color(tx.status),
                "created_at": tx.created_at,
            }
            for tx in self.pending_top_ups
        ]

    async def confirm_top_up(self, transaction_id: str) -> bool:
        self.require_role("confirm top-up", CONFIRM_ROLES)
        if not self.notifier.confirm(self.t("walletAdmin.confirmTopUp")):
            return False

        try:
            await self.api.wallet.confirm_top_up(transaction_id)
        except AppException as exc:
            logger.warning(
                "אישור טעינה נכשל",
                extra_data={"transaction_id": transaction_id, "error": exc.message},
            )
            self.alert_error(exc)
            return False
        else:
            logger.info("טעינה אושרה", extra_data={"transaction_id": transaction_id})
            self.notifier.alert(self.t("walletAdmin.confirmSuccess"))
            return True
        finally:
            # רענון התור תמיד, גם אחרי כישלון
            await self.fetch_pending_top_ups()

    async def reject_top_up(self, transaction_id: str) -> bool:
        """סיבה ריקה או ביטול -> אין קריאה ואין שינוי מצב"""
        self.require_role("reject top-up", CONFIRM_ROLES)
        reason = self.notifier.prompt(self.t("walletAdmin.rejectReason"))
        if not reason:
            return False

        error = validate_reason("topup_reject", reason, self.language.language)
        if error:
            self.notifier.alert(error)
            return False

        try:
            await self.api.wallet.fail_top_up(transaction_id, reason.strip())
        except AppException as exc:
            logger.warning(
                "דחיית טעינה נכשלה",
                extra_data={"transaction_id": transaction_id, "error": exc.message},
            )
            self.alert_error(exc)
            return False
        else:
            logger.info("טעינה נדחתה", extra_data={"transaction_id": transaction_id})
            self.notifier.alert(self.t("walletAdmin.rejectSuccess"))
            return True
        finally:
            await self.fetch_pending_top_ups()

    # ── תלמידים לבחירה ──

    async def fetch_students(self) -> list[dict]:
        """כישלון רק נרשם ללוג, הרשימה נשארת ריקה"""
        def _apply(data) -> None:
            self.students = list(data or [])

        try:
            await self.scope.run(self.api.students.get_all(self.branch_filter()), _apply)
        except AppException as exc:
            logger.warning(
                "טעינת תלמידים נכשלה",
                extra_data={"error_code": exc.error_code.value, "error": exc.message},
            )
        return self.students

    # ── קנס / החזר / התאמה ──

    async def submit_action(
        self,
        action: str,
        student_id: Optional[str],
        amount: str,
        reason: str,
        direction: str = Direction.DEBIT.value,
        original_transaction_id: Optional[str] = None,
    ) -> bool:
        """
        ולידציה ואז קריאה אחת (או שתיים בהתאמה).

        Args:
            action: penalty / refund / adjustment
            amount: סכום ב-so'm כפי שהוקלד; נשלח ב-tyiyn
        """
        if action not in WALLET_ACTIONS:
            raise ValueError(f"Unknown wallet action: {action}")
        self.require_role(f"wallet {action}", ADMIN_ROLES)
        lang = self.language.language

        if not student_id:
            self.notifier.alert(self.t("walletAdmin.chooseStudent"))
            return False
        amount_error = validate_positive_amount(amount, lang)
        if amount_error:
            self.notifier.alert(amount_error)
            return False
        reason_error = validate_reason(f"wallet_{action}", reason, lang)
        if reason_error:
            self.notifier.alert(reason_error)
            return False

        amount_tyiyn = parse_uzs(amount)
        reason = reason.strip()
        try:
            if action == "penalty":
                await self.api.wallet.apply_penalty(student_id, amount_tyiyn, reason)
            elif action == "refund":
                await self.api.wallet.process_refund(
                    student_id, amount_tyiyn, reason, original_transaction_id or None
                )
            else:
                # שני צעדים לא אטומיים: איתור walletId ואז ההתאמה עצמה
                summary = await self.api.wallet.get_summary(student_id, OwnerType.STUDENT.value)
                if not summary.wallet_id:
                    raise WalletNotFoundError(student_id, OwnerType.STUDENT.value)
                await self.api.wallet.adjust(
                    summary.wallet_id,
                    amount_tyiyn,
                    direction,
                    reason,
                    original_transaction_id or None,
                )
        except AppException as exc:
            logger.warning(
                "פעולת ארנק נכשלה",
                extra_data={
                    "action": action,
                    "student_id": student_id,
                    "amount_tyiyn": amount_tyiyn,
                    "error_code": exc.error_code.value,
                    "error": exc.message,
                },
            )
            self.alert_error(exc)
            return False

        logger.info(
            "פעולת ארנק בוצעה",
            extra_data={"action": action, "student_id": student_id, "amount_tyiyn": amount_tyiyn},
        )
        self.notifier.alert(
            self.t("walletAdmin.submitSuccess", type=self.t(f"walletAdmin.{action}"))
        )
        return True

    # ── נעילה ──

    async def lock_wallet(self, wallet_id: str, reason: str) -> bool:
        self.require_role("lock wallet", ADMIN_ROLES)
        error = validate_reason("wallet_lock", reason, self.language.language)
        if error:
            self.notifier.alert(error)
            return False
        try:
            await self.api.wallet.lock(wallet_id, reason.strip())
        except AppException as exc:
            self.alert_error(exc)
            return False
        logger.info("ארנק ננעל", extra_data={"wallet_id": wallet_id})
        return True

    async def unlock_wallet(self, wallet_id: str) -> bool:
        self.require_role("unlock wallet", ADMIN_ROLES)
        try:
            await self.api.wallet.unlock(wallet_id)
        except AppException as exc:
            self.alert_error(exc)
            return False
        logger.info("נעילת ארנק הוסרה", extra_data={"wallet_id": wallet_id})
        return True
