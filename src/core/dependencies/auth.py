"""Request admission for authenticated routes.

``get_current_session`` parses the ``Authorization: Bearer`` header and hands
the token to ``TokenService.authenticate_session``, the single place where
signature, expiry and revocation are checked. ``require_roles`` layers an
allowed-role list on top.
"""

from typing import Annotated, Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from structlog import get_logger

from src.core.exceptions import AuthenticationError, PermissionError
from src.domain.entities.account import Role
from src.domain.value_objects.session import SessionClaims
from src.infrastructure.dependency_injection.auth_dependencies import TokenServiceDep

__all__ = [
    "get_current_session",
    "require_roles",
    "CurrentSession",
]

logger = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


async def get_current_session(
    request: Request,
    token_service: TokenServiceDep,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer)],
) -> SessionClaims:
    """Return the claims of the caller's live session token.

    Raises:
        AuthenticationError: No bearer token, or it cannot be decoded (401).
        SessionRevokedError: The token is not the account's stored token (403).
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token", code="missing_token")

    claims = await token_service.authenticate_session(credentials.credentials)
    request.state.account_id = claims.account_id
    return claims


CurrentSession = Annotated[SessionClaims, Depends(get_current_session)]


def require_roles(*roles: Role) -> Callable[..., SessionClaims]:
    """Build a dependency admitting only sessions whose role is in ``roles``.

    With no roles given, any live session is admitted.
    """
    allowed = frozenset(roles)

    async def _check_role(session: CurrentSession) -> SessionClaims:
        if allowed and session.role not in allowed:
            logger.warning(
                "Role not permitted",
                account_id=session.account_id,
                role=session.role.value,
            )
            raise PermissionError("Insufficient role")
        return session

    return _check_role
