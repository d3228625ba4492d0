"""Port for reading the current time."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    """Time source used to stamp and check token expiry."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
