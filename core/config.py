"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for channelsync happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. store_url -> STORE_URL). Type coercion and validation are built in.

  @model_validator(mode="after"): cross-field checks once every field is
      resolved. Used for the key prefix and bcrypt cost bounds.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or store/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("channelsync.config")

_DEFAULT_STORE_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'store' / 'channelsync.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
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

    # ------------------------------------------------------------------
    # Identity store
    # ------------------------------------------------------------------

    # SQLAlchemy URL of the document store that holds user records.
    store_url: str = _DEFAULT_STORE_URL
    # Record key for user "bob" is user_key_prefix + "bob".
    user_key_prefix: str = "user:"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    bcrypt_rounds: int = 12
    # False disables channel access control entirely: every request acts as
    # the absent user and is allowed everywhere.
    access_control_enabled: bool = True

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_auth_settings(self) -> "Settings":
        """Reject settings that would corrupt the keyspace or weaken hashing.

        An empty user_key_prefix would let a username collide with any other
        document key in the shared store. bcrypt only accepts cost factors in
        4..31; anything below 10 is logged as a warning outside debug mode.
        """
        if not self.user_key_prefix:
            raise ValueError("USER_KEY_PREFIX must not be empty.")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        if self.bcrypt_rounds < 10 and not self.debug:
            logger.warning("WARNING: BCRYPT_ROUNDS=%d is below the recommended minimum of 10.", self.bcrypt_rounds)
        if not self.access_control_enabled:
            logger.warning("WARNING: Channel access control is disabled. Every request has full access.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings() directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
