"""System clock adapter."""

from __future__ import annotations

from datetime import UTC, datetime

from passwordless_tokenstore.application.ports.clock_port import ClockPort


class SystemClock(ClockPort):
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(tz=UTC)
