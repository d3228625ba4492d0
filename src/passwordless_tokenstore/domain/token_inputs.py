"""Validation helpers for token store call arguments."""

from __future__ import annotations

import math
from datetime import timedelta


class TokenStoreContractError(ValueError):
    """Raised when a token store operation is called with missing or invalid arguments."""


def require_token(*, token: str | None) -> str:
    """Return the token unchanged or reject missing and blank values."""

    return _require_non_empty(name="token", value=token)


def require_user_id(*, user_id: str | None) -> str:
    """Return the user id unchanged or reject missing and blank values."""

    return _require_non_empty(name="user_id", value=user_id)


def require_referrer(*, referrer: str | None) -> str:
    """Return the referrer, which may be empty but must be given as a string."""

    if referrer is None:
        raise TokenStoreContractError("referrer must be provided (use an empty string for none)")
    if not isinstance(referrer, str):
        raise TokenStoreContractError("referrer must be a string")
    return referrer


def require_time_to_live(*, ms_to_live: float | None) -> timedelta:
    """Convert a strictly positive millisecond duration into a timedelta."""

    if ms_to_live is None:
        raise TokenStoreContractError("ms_to_live must be provided")
    if isinstance(ms_to_live, bool) or not isinstance(ms_to_live, (int, float)):
        raise TokenStoreContractError("ms_to_live must be a number of milliseconds")
    if not math.isfinite(ms_to_live) or ms_to_live <= 0:
        raise TokenStoreContractError("ms_to_live must be a finite number greater than zero")
    try:
        time_to_live = timedelta(milliseconds=ms_to_live)
    except OverflowError as error:
        raise TokenStoreContractError("ms_to_live is too large") from error
    # timedelta resolution is one microsecond; smaller durations round to zero.
    if time_to_live <= timedelta(0):
        raise TokenStoreContractError("ms_to_live must be at least one microsecond")
    return time_to_live


def _require_non_empty(*, name: str, value: str | None) -> str:
    if value is None:
        raise TokenStoreContractError(f"{name} must be provided")
    if not isinstance(value, str):
        raise TokenStoreContractError(f"{name} must be a string")
    if not value:
        raise TokenStoreContractError(f"{name} cannot be empty")
    return value
