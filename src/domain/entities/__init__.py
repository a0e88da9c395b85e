"""Export the persistent domain entities for use across the application."""

from .account import Account, Gender, Role
from .session_token import SessionToken

__all__ = ["Account", "Gender", "Role", "SessionToken"]
