# envoy_monitor/models/token.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

# Zero value for an expiry that was never set.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

TOKEN_LIFETIME = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TokenCache:
    token: str = ""
    expires_at: datetime = field(default=ZERO_TIME)

    @property
    def is_empty(self) -> bool:
        return not self.token

    def is_expired(self, now: datetime) -> bool:
        # Expiry equal to now counts as expired.
        return self.expires_at <= now

    def needs_refresh(self, now: datetime) -> bool:
        return self.is_empty or self.is_expired(now)


@dataclass
class TokenStatus:
    has_token: bool
    expires_at: datetime | None
    expired: bool
    remaining: timedelta | None
