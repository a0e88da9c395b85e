"""Centralized, structured exception hierarchy for the identity service.

Every error raised by the domain and infrastructure layers derives from
`IdentityServiceError` and carries a machine-readable `code` plus a
human-readable `message`. The API layer translates each family to an HTTP
status in `src.core.handlers`; routes never build error responses themselves.
"""

from typing import Final

__all__: Final = [
    "IdentityServiceError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "SessionTokenError",
    "SessionTokenExpiredError",
    "SessionTokenNotYetValidError",
    "MalformedSessionTokenError",
    "PermissionError",
    "SessionRevokedError",
    "ValidationError",
    "AccountNotFoundError",
    "SecretNotFoundError",
    "EmailAlreadyRegisteredError",
    "AccountNotEnabledError",
    "CodeExpiredError",
    "DatabaseError",
    "ServiceUnavailableError",
    "MissingAccountIdError",
    "EmailServiceError",
    "TemplateRenderError",
]


class IdentityServiceError(Exception):
    """Base exception class for all custom errors in the identity service.

    Attributes:
        message (str): A human-readable error message, suitable for logging
                       and for the `detail` field of error responses.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Auth-related errors
# ---------------------------------------------------------------------------


class AuthenticationError(IdentityServiceError):
    """Raised for general authentication failures. Maps to `401 Unauthorized`."""

    def __init__(self, message: str = "Authentication failed", code: str = "authentication_error"):
        super().__init__(message, code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the supplied password does not match the stored hash."""

    def __init__(self, message: str = "Invalid credentials", code: str = "invalid_credentials"):
        super().__init__(message, code)


class SessionTokenError(AuthenticationError):
    """Base class for session token decoding failures.

    Exactly one of the subclasses below is raised by
    `TokenService.decode_session_token`; all map to `401 Unauthorized`.
    """

    def __init__(self, message: str = "Invalid session token", code: str = "invalid_session_token"):
        super().__init__(message, code)


class SessionTokenExpiredError(SessionTokenError):
    """The token's `exp` claim is in the past."""

    def __init__(self, message: str = "Session token has expired", code: str = "session_token_expired"):
        super().__init__(message, code)


class SessionTokenNotYetValidError(SessionTokenError):
    """The token's `nbf` claim is in the future."""

    def __init__(
        self,
        message: str = "Session token is not yet valid",
        code: str = "session_token_not_yet_valid",
    ):
        super().__init__(message, code)


class MalformedSessionTokenError(SessionTokenError):
    """Bad signature, unparsable token or missing required claims."""

    def __init__(self, message: str = "Malformed session token", code: str = "malformed_session_token"):
        super().__init__(message, code)


class PermissionError(IdentityServiceError):
    """Raised when an authenticated caller is not allowed to proceed.

    Maps to `403 Forbidden`.
    """

    def __init__(self, message: str = "Permission denied", code: str = "permission_denied"):
        super().__init__(message, code)


class SessionRevokedError(PermissionError):
    """A correctly signed token that is not the account's stored session token.

    Raised after logout or after a newer login replaced the token.
    """

    def __init__(self, message: str = "Token revoked or not valid", code: str = "session_revoked"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Validation errors (400 Bad Request)
# ---------------------------------------------------------------------------


class ValidationError(IdentityServiceError):
    """Raised for request data validation failures. Maps to `400 Bad Request`."""

    def __init__(self, message: str, code: str = "validation_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Lookup errors
# ---------------------------------------------------------------------------


class AccountNotFoundError(IdentityServiceError):
    """No account matches the given identifier. Maps to `404 Not Found`."""

    def __init__(self, message: str = "User not found", code: str = "account_not_found"):
        super().__init__(message, code)


class SecretNotFoundError(IdentityServiceError):
    """No activation code or OTP is stored for the given email.

    Raised by the secret store only; the token service turns it into a
    failed check, so it never reaches a client.
    """

    def __init__(self, message: str = "Secret not found", code: str = "secret_not_found"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Account state errors
# ---------------------------------------------------------------------------


class EmailAlreadyRegisteredError(IdentityServiceError):
    """Registration with an email (or username) already in use. Maps to `409 Conflict`."""

    def __init__(self, message: str = "Email already exists", code: str = "email_already_registered"):
        super().__init__(message, code)


class AccountNotEnabledError(IdentityServiceError):
    """The account has not completed email activation. Maps to `423 Locked`.

    A fresh activation code has always been dispatched by the time this is
    raised.
    """

    def __init__(
        self,
        message: str = "Account not enabled, check your email to activate your account",
        code: str = "account_not_enabled",
    ):
        super().__init__(message, code)


class CodeExpiredError(IdentityServiceError):
    """Activation code or OTP is wrong, expired or missing. Maps to `410 Gone`."""

    def __init__(self, message: str = "Token expired or invalid", code: str = "code_expired"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Dependency errors
# ---------------------------------------------------------------------------


class DatabaseError(IdentityServiceError):
    """Raised for credential store failures. Maps to `500 Internal Server Error`."""

    def __init__(self, message: str = "Database error", code: str = "database_error"):
        super().__init__(message, code)


class ServiceUnavailableError(IdentityServiceError):
    """The secret store could not be reached. Maps to `503 Service Unavailable`."""

    def __init__(
        self,
        message: str = "Secret store is unavailable",
        code: str = "service_unavailable",
    ):
        super().__init__(message, code)


class MissingAccountIdError(IdentityServiceError):
    """Logout invoked without an account id.

    Only reachable through a wiring mistake, since the admission dependency
    always supplies the id. Maps to `418`.
    """

    def __init__(self, message: str = "Missing user id", code: str = "missing_account_id"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Notification errors
# ---------------------------------------------------------------------------


class EmailServiceError(IdentityServiceError):
    """Raised when an email cannot be delivered.

    Dispatch is fire-and-forget, so the orchestrator logs these instead of
    propagating them.
    """

    def __init__(self, message: str = "Email delivery failed", code: str = "email_service_error"):
        super().__init__(message, code)


class TemplateRenderError(EmailServiceError):
    """Raised when an email template is missing or fails to render."""

    def __init__(self, message: str = "Email template rendering failed", code: str = "template_render_error"):
        super().__init__(message, code)
