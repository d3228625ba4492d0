"""Token record model shared by the store service and its backends."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TokenRecord:
    """One active passwordless token held for one user id."""

    user_id: str
    token: str
    expires_at: datetime
    referrer: str

    def is_expired(self, *, now: datetime) -> bool:
        """Return whether the record can no longer authenticate at `now`."""

        return now >= self.expires_at
