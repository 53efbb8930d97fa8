"""
Context Providers - מצב משותף: משתמש, שפה, סניף
"""
from school_client.context.auth import AuthContext, LoginResult
from school_client.context.branch import BranchContext
from school_client.context.language import LanguageContext

__all__ = ["AuthContext", "LoginResult", "BranchContext", "LanguageContext"]
