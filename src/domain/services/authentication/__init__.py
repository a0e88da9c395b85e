from .authentication_service import AuthenticationService, wait_for_pending_notifications

__all__ = ["AuthenticationService", "wait_for_pending_notifications"]
