# maintenix/password_reset/utils.py
import asyncio
import secrets
import weakref
from datetime import UTC, datetime, timedelta
from typing import Callable

from fastapi import Request

from maintenix.exception import RateLimitError

Clock = Callable[[], datetime]


def generate_otp() -> str:
    return f"{secrets.randbelow(1000000):06d}"


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """Sliding-window request counter kept in process memory."""

    def __init__(self, clock: Clock = utcnow):
        self.clock = clock
        self.store: dict[str, list[datetime]] = {}

    def _recent(self, identifier: str, cutoff: datetime) -> list[datetime]:
        # Clean old requests, forgetting identifiers with nothing left
        recent = [t for t in self.store.get(identifier, []) if t > cutoff]
        if recent:
            self.store[identifier] = recent
        else:
            self.store.pop(identifier, None)
        return recent

    def check(self, identifier: str, max_requests: int, window_minutes: int) -> None:
        self.check_all((identifier, max_requests, window_minutes))

    def check_all(self, *limits: tuple[str, int, int]) -> None:
        """
        Records one request against every identifier, or against none of them
        when any limit is already reached.
        """
        now = self.clock()
        for identifier, max_requests, window_minutes in limits:
            recent = self._recent(identifier, now - timedelta(minutes=window_minutes))
            if len(recent) >= max_requests:
                remaining_time = min(recent) + timedelta(minutes=window_minutes) - now
                minutes_remaining = int(remaining_time.total_seconds() / 60) + 1
                raise RateLimitError(
                    f"Rate limit exceeded. Try again in {minutes_remaining} minutes."
                )

        for identifier, _, _ in limits:
            self.store.setdefault(identifier, []).append(now)

    def reset(self, *identifiers: str) -> None:
        for identifier in identifiers:
            self.store.pop(identifier, None)


class AccountLocks:
    """Hands out one asyncio.Lock per account id while anyone still holds it."""

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def for_account(self, account_id: str) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[account_id] = lock
        return lock
