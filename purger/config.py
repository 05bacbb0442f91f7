"""
purger.config — Settings struct and environment loading.

The collector and the deleter only ever receive a ``Settings`` instance;
reading the process environment happens here and nowhere else.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from purger.errors import ConfigError
from purger.throttle import (
    BASE_URL,
    CONFIRM_DELAY,
    DELETE_DEFAULT_WAIT_MS,
    DELETE_DELAY_MS,
    MAX_DELETE_ATTEMPTS,
    RECORDS_FILE,
    REQUEST_TIMEOUT,
    RETRY_DELAY_BASE_MS,
    SEARCH_DEFAULT_WAIT_MS,
    SEARCH_DELAY_MS,
    SEARCH_RATE_LIMIT_FLOOR_MS,
    USER_TOKEN_DELAY,
)


@dataclass(frozen=True)
class Settings:
    token: str
    author_id: Optional[str] = None
    guild_id: Optional[str] = None
    base_url: str = BASE_URL
    records_file: str = RECORDS_FILE
    request_timeout: float = REQUEST_TIMEOUT
    search_delay_ms: int = SEARCH_DELAY_MS
    search_rate_limit_floor_ms: int = SEARCH_RATE_LIMIT_FLOOR_MS
    search_default_wait_ms: int = SEARCH_DEFAULT_WAIT_MS
    delete_delay_ms: int = DELETE_DELAY_MS
    delete_default_wait_ms: int = DELETE_DEFAULT_WAIT_MS
    retry_delay_base_ms: int = RETRY_DELAY_BASE_MS
    max_attempts: int = MAX_DELETE_ATTEMPTS
    user_token_delay: float = USER_TOKEN_DELAY
    confirm_delay: float = CONFIRM_DELAY

    def require_token(self) -> None:
        if not self.token:
            raise ConfigError(
                "Missing DISCORD_TOKEN.  Set it in the environment or in a .env file."
            )

    def require_search_scope(self) -> None:
        self.require_token()
        missing = [name for name, value in (("AUTHOR_ID", self.author_id), ("GUILD_ID", self.guild_id)) if not value]
        if missing:
            raise ConfigError(
                f"Missing environment variables: {', '.join(missing)}.  "
                "Ensure AUTHOR_ID, GUILD_ID, and DISCORD_TOKEN are set."
            )


def _int_override(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to ``os.environ``)."""
    if env is None:
        env = os.environ

    search_delay_ms = _int_override(env, "SEARCH_DELAY_MS", SEARCH_DELAY_MS)
    delete_delay_ms = _int_override(env, "DELETE_DELAY_MS", DELETE_DELAY_MS)

    return Settings(
        token=env.get("DISCORD_TOKEN", "").strip(),
        author_id=env.get("AUTHOR_ID") or None,
        guild_id=env.get("GUILD_ID") or None,
        base_url=(env.get("DISCORD_API_BASE") or BASE_URL).rstrip("/"),
        records_file=env.get("RECORDS_FILE") or RECORDS_FILE,
        search_delay_ms=search_delay_ms,
        search_rate_limit_floor_ms=search_delay_ms + 100,
        delete_delay_ms=delete_delay_ms,
        delete_default_wait_ms=delete_delay_ms * 2,
        retry_delay_base_ms=_int_override(env, "RETRY_DELAY_BASE_MS", RETRY_DELAY_BASE_MS),
        max_attempts=max(1, _int_override(env, "MAX_DELETE_ATTEMPTS", MAX_DELETE_ATTEMPTS)),
    )
