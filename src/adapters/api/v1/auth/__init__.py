"""Authentication router package, bundling the public and authenticated auth endpoints."""

from fastapi import APIRouter

from .routes import activate_email as activate_email_route
from .routes import login as login_route
from .routes import logout as logout_route
from .routes import register as register_route
from .routes import resend_account_activation as resend_account_activation_route
from .routes import resend_otp as resend_otp_route
from .routes import validate_otp as validate_otp_route

router = APIRouter(tags=["auth"])

router.include_router(register_route.router, prefix="/register")
router.include_router(login_route.router, prefix="/login")
router.include_router(activate_email_route.router, prefix="/activate_email")
router.include_router(validate_otp_route.router, prefix="/validate_otp")
router.include_router(resend_otp_route.router, prefix="/resend_otp")
router.include_router(resend_account_activation_route.router, prefix="/resend_account_activation")
router.include_router(logout_route.router, prefix="/logout")

__all__ = ["router"]
