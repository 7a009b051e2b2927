"""
api/routes/auth.py -- Registration and login endpoints.

Routes:
  POST /register  -- create a user; 201 {user_id}
  POST /login     -- check credentials; 200 {token, token_type, expires_in}

Both routes are public. They are plain `def` handlers so FastAPI runs them
in its threadpool: bcrypt and SQLite work never blocks the event loop.

Security:
  POST /login is rate-limited per client IP (Settings.login_rate_limit,
  read on every request). Over the limit the route raises RateLimitExceeded,
  which api/main.py turns into a 429 with Retry-After.
  authenticate_user() provides timing equalization -- use it, never inline.
  Unknown username and wrong password return the same 400 body.
  Cache-Control: no-store on login responses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from auth.models import User
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token, hash_password
from core.config import get_settings

logger = logging.getLogger("schoolrecords.auth")

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create a user with a bcrypt-hashed password.

    A bcrypt failure propagates to the generic 500 handler, so no user is
    stored without a proper hash. A duplicate username trips the UNIQUE
    constraint and becomes a 400.
    """
    user_store: UserStore = request.app.state.user_store
    new_user = User(
        username=body.username,
        role=body.role,
        password_hash=hash_password(body.password),
    )
    try:
        user_id = user_store.create_user(new_user)
    except IntegrityError as exc:
        logger.info("Registration rejected: username already exists")
        raise HTTPException(
            status_code=400,
            detail={"code": "conflict", "message": "User already exists or invalid input."},
        ) from exc

    logger.info("Registered user_id=%d role=%s", user_id, body.role)
    return RegisterResponse(user_id=user_id)


def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


# @router must be outermost so the route registers the rate-limited wrapper.
@router.post("/login", response_model=LoginResponse)
@limiter.limit(_login_rate_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password and return a bearer token."""
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.username, body.password)
    if user is None:
        logger.info("Login failed from %s", request.client.host if request.client else "unknown")
        resp = JSONResponse(
            status_code=400,
            content={"error": {"code": "invalid_credentials", "message": "Invalid Credentials"}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token = create_access_token(user.id, user.role)
    expires_in = get_settings().token_expire_seconds or None
    logger.info("Login succeeded for user_id=%d", user.id)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(token=token, expires_in=expires_in).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
