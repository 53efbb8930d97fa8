"""
Hooks - טעינות עם מצב data/loading/error הקשורות לחיי מסך
"""
from school_client.hooks.scope import LoadState, ScopeClosedError, ViewScope
from school_client.hooks.wallet import WalletHook

__all__ = ["LoadState", "ScopeClosedError", "ViewScope", "WalletHook"]
