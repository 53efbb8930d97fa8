"""
ארנק התלמיד: טופס בקשת טעינה, לוח סיכום וטבלת היסטוריית תנועות.

הטופס רק מוודא את הקלט ומחזיר בקשה; הלוח שולח אותה לשרת ותופס כישלונות.
"""
import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Optional

from school_client.core.config import settings
from school_client.core.exceptions import AppException, ValidationException
from school_client.core.logging import get_logger
from school_client.domain.models import (
    OwnerType,
    TopUpMethod,
    TransactionType,
    WalletSummary,
    WalletTransaction,
)
from school_client.domain.money import (
    format_transaction_amount,
    format_uzs,
    get_transaction_status_color,
    get_transaction_type_color,
    parse_uzs,
    som_to_tyiyn,
)
from school_client.domain.validation import quick_amounts, validate_topup_amount
from school_client.context.language import LanguageContext
from school_client.hooks.wallet import WalletHook
from school_client.panels.base import Panel

logger = get_logger(__name__)

DEDUCTION_TYPES = (TransactionType.CLASS_DEDUCTION.value, TransactionType.PENALTY.value)


@dataclass(frozen=True)
class TopUpRequest:
    amount_tyiyn: int
    payment_method: str
    reason: str


class TopUpForm:
    """מודאל בקשת טעינה"""

    def __init__(self, language: LanguageContext):
        self.language = language
        self.reset()

    def reset(self) -> None:
        self.amount = ""
        self.payment_method = TopUpMethod.CASH.value
        self.reason = self.language.t("paymentTopUp.title")
        self.error = ""

    @property
    def payment_methods(self) -> list[str]:
        return [method.value for method in TopUpMethod]

    @property
    def quick_amounts(self) -> list[int]:
        return quick_amounts()

    def bounds_hint(self) -> str:
        lang = self.language.language
        return self.language.t(
            "paymentTopUp.minMaxAmount",
            min=format_uzs(som_to_tyiyn(settings.TOPUP_MIN_SOM), lang),
            max=format_uzs(som_to_tyiyn(settings.TOPUP_MAX_SOM), lang),
        )

    def daily_limit_hint(self) -> str:
        """מידע בלבד: את המגבלה היומית אוכף השרת מול סך הבקשות של היום"""
        return self.language.t(
            "paymentTopUp.dailyLimit",
            limit=format_uzs(som_to_tyiyn(settings.TOPUP_DAILY_LIMIT_SOM), self.language.language),
        )

    def set_amount(self, value: str) -> str:
        """ולידציה חיה. שדה ריק מנקה את השגיאה."""
        self.amount = (value or "").strip()
        self.error = validate_topup_amount(self.amount, self.language.language) if self.amount else ""
        return self.error

    def choose_quick_amount(self, amount_som: int) -> str:
        return self.set_amount(str(amount_som))

    def set_payment_method(self, method: str) -> None:
        if method not in self.payment_methods:
            raise ValidationException(f"Unknown payment method: {method}", field="payment_method")
        self.payment_method = method

    def set_reason(self, reason: str) -> None:
        self.reason = (reason or "")[: settings.TOPUP_REASON_MAX_LENGTH]

    def preview(self) -> Optional[str]:
        if not self.amount or self.error:
            return None
        return self.language.t(
            "paymentTopUp.youAreToppingUp",
            amount=format_uzs(parse_uzs(self.amount), self.language.language),
        )

    @property
    def can_submit(self) -> bool:
        return bool(self.amount) and not validate_topup_amount(self.amount, self.language.language)

    def submit(self) -> Optional[TopUpRequest]:
        """מחזיר בקשה ומאפס את הטופס, או None כשהקלט לא תקין"""
        error = validate_topup_amount(self.amount, self.language.language)
        if error:
            self.error = error
            return None

        request = TopUpRequest(
            amount_tyiyn=parse_uzs(self.amount),
            payment_method=self.payment_method,
            reason=self.reason,
        )
        self.reset()
        return request


@dataclass(frozen=True)
class SummaryCard:
    title: str
    amount: str
    badge: Optional[str] = None


@dataclass(frozen=True)
class TransactionRow:
    date: str
    type_label: str
    type_color: str
    amount: str
    is_credit: bool
    status_label: str
    status_color: str
    reason: str
    recorded_by: str


class TransactionHistoryTable:
    def __init__(self, transactions: list[WalletTransaction], language: LanguageContext):
        self.transactions = transactions
        self.language = language

    @property
    def empty_message(self) -> Optional[str]:
        if self.transactions:
            return None
        return self.language.t("transactionHistory.noTransactions")

    def _type_label(self, transaction_type: str) -> str:
        key = f"wallet.{transaction_type}"
        label = self.language.t(key)
        return transaction_type if label == key else label

    def rows(self) -> list[TransactionRow]:
        t = self.language.t
        lang = self.language.language
        rows = []
        for tx in self.transactions:
            recorded_by = None
            for person in (tx.created_by, tx.recorded_by):
                name = getattr(person, "name", None)
                if name:
                    recorded_by = name
                    break
            rows.append(
                TransactionRow(
                    date=tx.created_at.strftime("%d.%m.%Y") if tx.created_at else t("common.noData"),
                    type_label=self._type_label(tx.transaction_type),
                    type_color=get_transaction_type_color(tx.transaction_type),
                    amount=format_transaction_amount(tx.amount, tx.direction, lang),
                    is_credit=tx.is_credit,
                    status_label=t(f"common.{tx.status}"),
                    status_color=get_transaction_status_color(tx.status),
                    reason=tx.reason or t("common.noData"),
                    recorded_by=recorded_by or t("transactionHistory.system"),
                )
            )
        return rows


class WalletDashboard(Panel):
    name = "wallet-dashboard"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.wallet = WalletHook(self.api.wallet, self.scope)
        self.top_up_form = TopUpForm(self.language)
        self.top_up_error: Optional[str] = None
        self.date_from: Optional[date] = None
        self.date_to: Optional[date] = None
        self.transaction_type = ""

    # ── בעלים ──

    @property
    def owner_id(self) -> str:
        user = self.require_user("wallet dashboard")
        return user.get("_id") or user.get("id")

    owner_type = OwnerType.STUDENT.value

    @property
    def can_top_up(self) -> bool:
        return (self.auth.user or {}).get("userType") == "student"

    # ── טעינה ──

    async def load(self) -> None:
        owner_id = self.owner_id
        await asyncio.gather(
            self.wallet.fetch_wallet_summary(owner_id, self.owner_type),
            self.wallet.fetch_transaction_history(owner_id, self.owner_type),
        )

    async def handle_top_up(self, request: TopUpRequest) -> bool:
        """שליחת בקשת טעינה ורענון. כישלון נתפס ונרשם כאן ולא בטופס."""
        owner_id = self.owner_id
        self.top_up_error = None
        try:
            await self.api.wallet.top_up(
                owner_id,
                self.owner_type,
                request.amount_tyiyn,
                request.payment_method,
                request.reason,
            )
        except AppException as exc:
            logger.error(
                "בקשת טעינה נכשלה",
                extra_data={
                    "owner_id": owner_id,
                    "amount_tyiyn": request.amount_tyiyn,
                    "error_code": exc.error_code.value,
                    "error": exc.message,
                },
            )
            self.top_up_error = exc.message
            return False

        logger.info(
            "בקשת טעינה נשלחה",
            extra_data={"owner_id": owner_id, "amount_tyiyn": request.amount_tyiyn},
        )
        await self.load()
        return True

    # ── תצוגה ──

    @property
    def summary(self) -> WalletSummary:
        return self.wallet.summary.data or WalletSummary()

    @property
    def transactions(self) -> list[WalletTransaction]:
        return self.wallet.transactions.data or []

    def set_filters(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        transaction_type: str = "",
    ) -> None:
        self.date_from = date_from
        self.date_to = date_to
        self.transaction_type = transaction_type

    def filtered_transactions(self) -> list[WalletTransaction]:
        result = []
        for tx in self.transactions:
            created = tx.created_at.date() if tx.created_at else None
            if self.date_from and created and created < self.date_from:
                continue
            if self.date_to and created and created > self.date_to:
                continue
            if self.transaction_type and tx.transaction_type != self.transaction_type:
                continue
            result.append(tx)
        return result

    def total_top_ups(self) -> int:
        return self.summary.stat_total(TransactionType.TOP_UP.value)

    def total_deductions(self) -> int:
        return self.summary.stat_total(*DEDUCTION_TYPES)

    def summary_cards(self) -> list[SummaryCard]:
        lang = self.language.language
        summary = self.summary
        badge = None
        if summary.is_locked:
            badge = f"{self.t('wallet.walletLocked')}: {summary.lock_reason or ''}".rstrip(": ")

        cards = [
            SummaryCard(self.t("wallet.totalBalance"), format_uzs(summary.balance, lang), badge),
            SummaryCard(self.t("wallet.availableBalance"), format_uzs(summary.available_balance, lang)),
            SummaryCard(self.t("wallet.pendingBalance"), format_uzs(summary.pending_balance, lang)),
        ]
        if self.can_top_up:
            cards.append(SummaryCard(self.t("wallet.totalTopUps"), format_uzs(self.total_top_ups(), lang)))
            cards.append(SummaryCard(self.t("wallet.totalDeductions"), format_uzs(self.total_deductions(), lang)))
        return cards

    def history_table(self) -> TransactionHistoryTable:
        return TransactionHistoryTable(self.filtered_transactions(), self.language)
