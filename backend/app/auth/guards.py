"""Two-stage authorization gate exposed as FastAPI dependencies.

``require_user`` authenticates the bearer token; ``require_admin`` builds on it
and additionally checks the role claim. Because the role stage depends on the
authentication stage, a missing or bad token is always reported as 401
before any role check can produce a 403.
"""
from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import Request

from ..core import errors
from ..core.security import InvalidToken, TokenClaims, verify_token

bearer_scheme = HTTPBearer(auto_error=False)


def require_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    """Authenticate the request from its ``Authorization: Bearer`` header."""

    if credentials is None or not credentials.credentials:
        raise errors.Unauthenticated()
    try:
        claims = verify_token(credentials.credentials)
    except InvalidToken:
        raise errors.Unauthenticated("Session is invalid or has expired") from None

    request.state.claims = claims
    request.state.user_id = claims.id
    return claims


def require_admin(claims: TokenClaims = Depends(require_user)) -> TokenClaims:
    """Allow only administrators through."""

    if not claims.is_admin:
        raise errors.Forbidden()
    return claims
