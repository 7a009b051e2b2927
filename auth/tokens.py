"""
auth/tokens.py -- JWT issuance/verification and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry user_id, role, iat and (unless
       expiry is disabled) exp. The header carries a "kid" naming the signing
       key, so SECRET_KEY can be rotated: the old key moves to
       RETIRED_SECRET_KEYS and keeps verifying outstanding tokens until they
       expire. Verification never raises -- it returns None on any failure and
       the route layer turns that into a 401.

       Tokens are stateless. There is no revocation list, so a token stays
       valid until exp even if the user record changes.

  Passwords: bcrypt with a fixed work factor (Settings.bcrypt_rounds). The
       salt is embedded in the hash string. Hashing errors propagate so a
       registration is aborted rather than stored with a weaker hash.

  Timing: authenticate_user() runs bcrypt whether or not the username exists,
       so response time does not reveal which usernames are registered.

Layer rule: no imports from api/ or school/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from auth.models import TokenClaims
from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("schoolrecords.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only reads the first 72 bytes of its input; the API layer rejects
    longer passwords before they get here.
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed; treating as mismatch")
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than later ones.
_DUMMY_HASH: str = hash_password("schoolrecords_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, role: str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT carrying the user's id and role.

    Args:
        user_id:        Numeric user ID stored in the DB.
        role:           User role at login time.
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds; when that is also 0
                        the token has no exp claim.
    """
    now = datetime.now(timezone.utc)
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    payload: dict = {
        "user_id": user_id,
        "role": role,
        "iat": now,
    }
    if duration > 0:
        payload["exp"] = now + timedelta(seconds=duration)
    return jwt.encode(
        payload,
        _settings.secret_key,
        algorithm=_ALGORITHM,
        headers={"kid": _settings.secret_key_id},
    )


def _signature_is_canonical(token: str) -> bool:
    """Return True if the signature segment is the canonical base64url form of its bytes.

    base64 decoding ignores the unused low bits of the final character, so
    several spellings of one signature would otherwise all verify.
    """
    _, _, segment = token.rpartition(".")
    try:
        raw = segment.encode("ascii")
        return base64url_encode(base64url_decode(raw)) == raw
    except ValueError:
        return False


def decode_access_token(token: str) -> TokenClaims | None:
    """Verify a JWT and return its claims, or None on any failure.

    Failure covers malformed input, an unknown or missing kid, a bad or
    non-canonically encoded signature, an expired token, and a payload
    without an integer user_id and a string role. Returning None (rather than raising) keeps the gate
    simple: every invalid token is just unauthenticated.
    """
    if not _signature_is_canonical(token):
        return None
    try:
        key_id = jwt.get_unverified_header(token).get("kid")
        key = _settings.signing_keys.get(key_id) if isinstance(key_id, str) else None
        if key is None:
            return None
        payload = jwt.decode(token, key, algorithms=[_ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("user_id")
    role = payload.get("role")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(role, str):
        return None
    return TokenClaims(
        user_id=user_id,
        role=role,
        issued_at=payload.get("iat"),
        expires_at=payload.get("exp"),
        key_id=key_id,
    )


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, username: str, password: str) -> User | None:
    """Check a username/password pair with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success, None on any failure.
    """
    user = store.get_by_username(username)
    if user is None or user.password_hash is None:
        # Equalize timing -- do NOT return early before running bcrypt
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
