"""
WalletHook - טעינת סיכום ארנק והיסטוריית תנועות עם מצב loading/error.

שגיאות נשמרות ב-error ולא נזרקות. תוצאה שמגיעה אחרי סגירת ה-scope נזרקת.
"""
from typing import Any, Optional

from school_client.api.resources.wallet import WalletApi
from school_client.core.exceptions import AppException
from school_client.core.logging import get_logger
from school_client.domain.models import TransactionPage, WalletSummary, WalletTransaction
from school_client.hooks.scope import LoadState, ViewScope

logger = get_logger(__name__)


class WalletHook:
    def __init__(self, wallet_api: WalletApi, scope: Optional[ViewScope] = None):
        self.wallet_api = wallet_api
        self.scope = scope or ViewScope("wallet")
        self.summary: LoadState[WalletSummary] = LoadState()
        self.transactions: LoadState[list[WalletTransaction]] = LoadState(data=[])
        self.page: Optional[TransactionPage] = None

    @property
    def loading(self) -> bool:
        return self.summary.loading or self.transactions.loading

    @property
    def error(self) -> Optional[BaseException]:
        return self.summary.error or self.transactions.error

    async def fetch_wallet_summary(self, owner_id: str, owner_type: str) -> Optional[WalletSummary]:
        self.summary.loading = True
        self.summary.error = None

        def _apply(summary: WalletSummary) -> None:
            self.summary.data = summary

        try:
            await self.scope.run(self.wallet_api.get_summary(owner_id, owner_type), _apply)
        except AppException as exc:
            logger.warning(
                "טעינת סיכום ארנק נכשלה",
                extra_data={"owner_id": owner_id, "owner_type": owner_type, "error": exc.message},
            )
            self.summary.error = exc
        finally:
            self.summary.loading = False
        return self.summary.data

    async def fetch_transaction_history(
        self, owner_id: str, owner_type: str, **params: Any
    ) -> list[WalletTransaction]:
        self.transactions.loading = True
        self.transactions.error = None

        def _apply(page: TransactionPage) -> None:
            self.page = page
            self.transactions.data = page.transactions

        try:
            await self.scope.run(
                self.wallet_api.get_transactions(owner_id, owner_type, **params), _apply
            )
        except AppException as exc:
            logger.warning(
                "טעינת היסטוריית תנועות נכשלה",
                extra_data={"owner_id": owner_id, "owner_type": owner_type, "error": exc.message},
            )
            self.transactions.error = exc
        finally:
            self.transactions.loading = False
        return self.transactions.data or []
