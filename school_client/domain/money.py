"""
עיצוב סכומים וצבעי תצוגה - פונקציות טהורות בלבד.

השרת שומר ומעביר סכומים ב-tyiyn (1/100 so'm). התצוגה מעגלת ל-so'm שלם;
קלט טופס ב-so'm מומר חזרה ל-tyiyn בלי לאבד יחידות.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from school_client.domain.locales import translate

TYIYN_PER_SOM = 100

# צבע ניטרלי לערכים שהלקוח לא מכיר עדיין
NEUTRAL_COLOR = "#6c757d"

TRANSACTION_STATUS_COLORS = {
    "pending": "#FFA500",
    "completed": "#28a745",
    "failed": "#dc3545",
    "reversed": "#495057",
}

TRANSACTION_TYPE_COLORS = {
    "top-up": "#28a745",
    "class-deduction": "#007bff",
    "penalty": "#dc3545",
    "refund": "#17a2b8",
    "adjustment": "#ffc107",
}

EARNING_STATUS_COLORS = {
    "pending": "#FFA500",
    "approved": "#28a745",
    "paid": "#007bff",
    "cancelled": "#495057",
}

PAYOUT_STATUS_COLORS = {
    "pending": "#FFA500",
    "completed": "#28a745",
    "cancelled": "#495057",
}

EARNING_TYPE_ICONS = {
    "per-class": "📚",
    "hourly": "⏰",
    "commission": "💰",
    "bonus": "🎁",
    "adjustment": "🔧",
    "penalty": "⚠️",
}
DEFAULT_EARNING_ICON = "💵"


def currency_symbol(language: str) -> str:
    return "сум" if language == "ru" else "so'm"


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def _group_thousands(number: int) -> str:
    """125500 -> '125 500'"""
    return f"{number:,}".replace(",", " ")


def tyiyn_to_som(amount_tyiyn: Any) -> Decimal:
    value = _to_decimal(amount_tyiyn) or Decimal(0)
    return value / TYIYN_PER_SOM


def som_to_tyiyn(amount_som: Any) -> int:
    """so'm -> tyiyn שלם, עיגול חצי-למעלה ל-tyiyn הקרוב"""
    value = _to_decimal(amount_som)
    if value is None:
        return 0
    return int((value * TYIYN_PER_SOM).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_uzs(amount_tyiyn: Any, language: str = "en") -> str:
    """
    עיצוב סכום ב-tyiyn לתצוגה ב-so'm.

    >>> format_uzs(12550000)
    "125 500 so'm"
    """
    symbol = currency_symbol(language)
    value = _to_decimal(amount_tyiyn)
    if value is None:
        return f"0 {symbol}"

    som = int((value / TYIYN_PER_SOM).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if som < 0 else ""
    return f"{sign}{_group_thousands(abs(som))} {symbol}"


def parse_uzs(amount_som: Any) -> int:
    """קלט משתמש ב-so'm -> tyiyn לשרת. קלט לא מספרי -> 0."""
    return som_to_tyiyn(amount_som)


def format_transaction_amount(amount_tyiyn: Any, direction: str, language: str = "en") -> str:
    """זיכוי עם +, חיוב עם -"""
    formatted = format_uzs(amount_tyiyn, language)
    return f"+{formatted}" if direction == "credit" else f"-{formatted}"


def get_transaction_status_color(status: Any) -> str:
    return TRANSACTION_STATUS_COLORS.get(status, NEUTRAL_COLOR) if isinstance(status, str) else NEUTRAL_COLOR


def get_transaction_type_color(transaction_type: Any) -> str:
    if not isinstance(transaction_type, str):
        return NEUTRAL_COLOR
    return TRANSACTION_TYPE_COLORS.get(transaction_type, NEUTRAL_COLOR)


def get_earning_status_color(status: Any) -> str:
    return EARNING_STATUS_COLORS.get(status, NEUTRAL_COLOR) if isinstance(status, str) else NEUTRAL_COLOR


def get_payout_status_color(status: Any) -> str:
    return PAYOUT_STATUS_COLORS.get(status, NEUTRAL_COLOR) if isinstance(status, str) else NEUTRAL_COLOR


def earning_type_icon(earning_type: Any) -> str:
    if not isinstance(earning_type, str):
        return DEFAULT_EARNING_ICON
    return EARNING_TYPE_ICONS.get(earning_type, DEFAULT_EARNING_ICON)


@dataclass(frozen=True)
class EarningAmountDisplay:
    text: str
    is_deduction: bool


def format_earning_amount(amount_tyiyn: Any, language: str = "en") -> EarningAmountDisplay:
    """סכום שלילי מוצג כערך מוחלט עם סיומת "(deduction)", לעולם לא כמספר שלילי חשוף"""
    value = _to_decimal(amount_tyiyn) or Decimal(0)
    text = format_uzs(abs(value), language)
    if value < 0:
        return EarningAmountDisplay(
            text=f"{text} ({translate(language, 'staffEarnings.deduction')})",
            is_deduction=True,
        )
    return EarningAmountDisplay(text=text, is_deduction=False)
