"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in school/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/, core/, or school/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity.

    Users are created once by POST /register and never updated or deleted
    through the HTTP surface. role is one of Settings.roles at creation time.
    """

    username: str
    role: str  # "teacher", "student", ...
    id: int | None = None
    password_hash: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """The verified payload of an access token.

    Built only by auth.tokens.decode_access_token() after signature checks
    pass. expires_at is None for tokens issued while expiry was disabled.
    """

    user_id: int
    role: str
    issued_at: int | None = None  # epoch seconds
    expires_at: int | None = None  # epoch seconds
    key_id: str | None = None  # "kid" header of the signing key
