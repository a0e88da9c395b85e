"""Subpackage aggregating individual auth route modules."""

__all__ = [
    "register",
    "login",
    "activate_email",
    "validate_otp",
    "resend_otp",
    "resend_account_activation",
    "logout",
]
