"""
auth/dependencies.py -- FastAPI Depends() helpers forming the access control gate.

Two stages run in order on every protected route:
  1. get_current_claims() -- authentication. Requires an
     "Authorization: Bearer <token>" header carrying a valid token.
     Missing header, wrong scheme, and invalid token all raise HTTP 401.
     On success the claims are stored on request.state.claims.
  2. require_roles(*roles) -- authorization. Builds a dependency that
     checks the authenticated role against an allow-list and raises
     HTTP 403 when it is not a member.

Neither stage touches a store: tokens are verified by signature alone.
A rejection in either stage ends the request before the handler runs.

Layer rule: no imports from api/ or school/.
  auth/dependencies.py may import from fastapi (for Depends/HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import Depends, HTTPException, Request

from auth.models import TokenClaims
from auth.tokens import decode_access_token
from core.config import get_settings

logger = logging.getLogger("schoolrecords.auth")


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "unauthorized", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(request: Request) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" header, if any.

    The scheme is matched case-insensitively per RFC 6750.
    """
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def get_current_claims(request: Request) -> TokenClaims:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: TokenClaims = Depends(get_current_claims)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise _unauthorized("Authentication required.")
    claims = decode_access_token(token)
    if claims is None:
        raise _unauthorized("Invalid or expired token.")
    request.state.claims = claims
    return claims


def require_roles(*roles: str) -> Callable[..., TokenClaims]:
    """Build a dependency that admits only the given roles.

    Every role must be one of Settings.roles; an unknown name is a
    configuration error and raises ValueError when the route is defined,
    not a silent deny at request time.

    Use on a route:
        @router.post("/students", dependencies=[Depends(require_roles("teacher"))])
    """
    if not roles:
        raise ValueError("require_roles() needs at least one role.")
    unknown = sorted(set(roles) - set(get_settings().roles))
    if unknown:
        raise ValueError(f"Unknown roles in allow-list: {unknown!r}")
    allowed = frozenset(roles)

    def check_role(request: Request, claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role not in allowed:
            logger.info(
                "Access denied: user_id=%s role=%s %s %s",
                claims.user_id,
                claims.role,
                request.method,
                request.url.path,
            )
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": "Access denied."},
            )
        return claims

    return check_role
