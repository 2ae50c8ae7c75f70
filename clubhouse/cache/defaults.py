"""Cache key prefixes and entry lifetimes for membership data."""

from dataclasses import dataclass
from datetime import timedelta

from clubhouse.config import Settings

USER_CLUBS_KEY_PREFIX = "user-clubs"
DEFAULT_EXPIRATION = timedelta(days=1)


@dataclass(frozen=True)
class CacheEntryOptions:
    """Per-entry lifetimes for the shared and process-local tiers.

    The local lifetime never exceeds the shared one, so a process-local copy
    cannot outlive the authoritative shared copy.
    """

    expiration: timedelta = DEFAULT_EXPIRATION
    local_expiration: timedelta = DEFAULT_EXPIRATION

    def __post_init__(self) -> None:
        if self.expiration <= timedelta(0) or self.local_expiration <= timedelta(0):
            raise ValueError("cache lifetimes must be positive")
        if self.local_expiration > self.expiration:
            raise ValueError("local_expiration must not exceed expiration")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheEntryOptions":
        return cls(
            expiration=timedelta(seconds=settings.membership_cache_ttl_seconds),
            local_expiration=timedelta(seconds=settings.membership_cache_local_ttl_seconds),
        )


def user_clubs_key(user_id: int, prefix: str = USER_CLUBS_KEY_PREFIX) -> str:
    """Build the user-scoped cache key for club memberships."""
    return f"{prefix}-{user_id}"
