"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the school records service happen here.
No module should call os.getenv() or os.environ.get() directly -- import
get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). List and dict fields are parsed as JSON
      (e.g. ROLES='["teacher", "student", "admin"]').

  @model_validator(mode="after"): cross-field validation once every field is
      resolved. Handles the DEBUG-conditional SECRET_KEY policy and the
      signing keyring.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright; the same rule
  applies to every retired key still accepted for verification.

  In production mode (DEBUG not set or false), a missing SECRET_KEY is a hard
  startup failure.

  TOKEN_EXPIRE_SECONDS=0 issues tokens with no exp claim. Supported for
  compatibility only and logged as a warning every time settings load.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or school/.
"""

import logging
import re
import secrets
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("schoolrecords.config")

_ROLE_RE = re.compile(r"^[a-z][a-z0-9_]*$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file (with DEBUG=true for the key).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "sqlite:///./school_records.db"
    # Seconds a statement waits on a locked SQLite database before failing.
    store_timeout_seconds: float = 5.0

    # ------------------------------------------------------------------
    # Token signing
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    # Written into the JWT "kid" header of every issued token.
    secret_key_id: str = "v1"
    # Keys that still verify tokens but never sign new ones, keyed by kid.
    retired_secret_keys: dict[str, str] = {}
    token_expire_seconds: int = 3600

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    bcrypt_rounds: int = 12
    roles: list[str] = ["teacher", "student"]
    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("roles")
    @classmethod
    def validate_roles(cls, value: list[str]) -> list[str]:
        """Reject an empty role set and anything that is not a lowercase identifier."""
        if not value:
            raise ValueError("ROLES must name at least one role.")
        bad = [r for r in value if not _ROLE_RE.match(r)]
        if bad:
            raise ValueError(f"Invalid role names in ROLES: {bad!r}")
        return list(dict.fromkeys(value))

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return value

    @field_validator("token_expire_seconds")
    @classmethod
    def validate_token_expiry(cls, value: int) -> int:
        if value < 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be >= 0.")
        return value

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy and keyring consistency.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters, and reject a
            retired key that reuses the active key id.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning(
                    "WARNING: Using auto-generated SECRET_KEY. " "Tokens will not verify across restarts."
                )
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        if self.secret_key_id in self.retired_secret_keys:
            raise ValueError(f"SECRET_KEY_ID {self.secret_key_id!r} also appears in RETIRED_SECRET_KEYS.")
        short = [kid for kid, key in self.retired_secret_keys.items() if len(key) < 32]
        if short:
            raise ValueError(f"Retired signing keys must be at least 32 characters: {short!r}")
        if self.token_expire_seconds == 0:
            logger.warning("TOKEN_EXPIRE_SECONDS=0: access tokens are issued without expiry.")
        return self

    @property
    def signing_keys(self) -> dict[str, str]:
        """Every key that may verify a token, keyed by kid. The active key wins."""
        return {**self.retired_secret_keys, self.secret_key_id: self.secret_key}


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    All modules should call get_settings() rather than constructing Settings()
    directly. In tests: call get_settings.cache_clear() between test cases if
    you need to inject different environment variables.
    """
    return Settings()
