"""
Panels - מודלי תצוגה למסכי הארנק, ההכנסות והתשלומים
"""
from school_client.panels.admin_wallet import AdminWalletPanel
from school_client.panels.notifier import ConsoleNotifier, Notifier
from school_client.panels.payouts import AdminPayoutPanel, PayoutForm
from school_client.panels.staff_earnings import AdminEarningsPanel, StaffEarningsView
from school_client.panels.wallet_dashboard import (
    TopUpForm,
    TopUpRequest,
    TransactionHistoryTable,
    WalletDashboard,
)

__all__ = [
    "AdminWalletPanel",
    "AdminPayoutPanel",
    "AdminEarningsPanel",
    "ConsoleNotifier",
    "Notifier",
    "PayoutForm",
    "StaffEarningsView",
    "TopUpForm",
    "TopUpRequest",
    "TransactionHistoryTable",
    "WalletDashboard",
]
