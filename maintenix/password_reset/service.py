# maintenix/password_reset/service.py
import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from maintenix.auth.models import PasswordReset
from maintenix.auth.service import AccountStore
from maintenix.auth.utils import BCRYPT_MAX_BYTES, hash_password
from maintenix.exception import (
    DeliveryError,
    ExpiredError,
    InternalError,
    InvalidCodeError,
    MaintenixError,
    NotFoundError,
    ValidationError,
    WeakPasswordError,
)
from maintenix.notifications.service import NotificationSender
from maintenix.password_reset.config import PasswordResetSettings
from maintenix.password_reset.utils import (
    AccountLocks,
    Clock,
    RateLimiter,
    as_utc,
    generate_otp,
    utcnow,
)

logger = logging.getLogger(__name__)


def _require(message: str, *values: str | None) -> tuple[str, ...]:
    cleaned = tuple((value or "").strip() for value in values)
    if not all(cleaned):
        raise ValidationError(message)
    return cleaned


class PasswordResetService:
    """
    OTP password reset: request a code, verify it, then consume it to set a
    new password.

    Each reset row moves CREATED -> VERIFIED -> USED. A row that expires, or
    that is replaced by a newer request for the same account, can no longer
    be matched by verify or consume.
    """

    def __init__(
        self,
        db: AsyncSession,
        accounts: AccountStore,
        notifier: NotificationSender,
        *,
        settings: PasswordResetSettings,
        rate_limiter: RateLimiter,
        locks: AccountLocks,
        clock: Clock = utcnow,
        bcrypt_rounds: int = 12,
    ):
        self.db = db
        self.accounts = accounts
        self.notifier = notifier
        self.settings = settings
        self.rate_limiter = rate_limiter
        self.locks = locks
        self.clock = clock
        self.bcrypt_rounds = bcrypt_rounds

    @asynccontextmanager
    async def _transaction(self, action: str):
        try:
            yield
            await self.db.commit()
        except MaintenixError:
            await self.db.rollback()
            raise
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Store failure during %s", action)
            raise InternalError() from None

    def _is_expired(self, reset: PasswordReset) -> bool:
        return self.clock() > as_utc(reset.expires_at)

    async def _find(self, email: str, otp: str, verified: bool) -> PasswordReset | None:
        result = await self.db.execute(
            select(PasswordReset).where(
                PasswordReset.email == email,
                PasswordReset.otp == otp,
                PasswordReset.verified.is_(verified),
                PasswordReset.used.is_(False),
            )
        )
        return result.scalars().first()

    async def request_reset(
        self, email: str | None, client_ip: str | None = None
    ) -> PasswordReset | None:
        """
        Issues a fresh OTP for the account behind ``email`` and sends it out.

        Returns None only for an unknown email when REVEAL_UNKNOWN_EMAIL is off.
        """
        (email,) = _require("Email is required", email)

        window = self.settings.RATE_LIMIT_WINDOW_MINUTES
        limits = [(email, self.settings.MAX_REQUESTS_PER_HOUR, window)]
        if client_ip:
            limits.append(
                (f"ip:{client_ip}", self.settings.MAX_REQUESTS_PER_HOUR * 3, window)
            )
        self.rate_limiter.check_all(*limits)

        async with self._transaction("account lookup"):
            user = await self.accounts.find_by_email(email)

        if user is None:
            logger.info("Password reset requested for unknown email")
            if self.settings.REVEAL_UNKNOWN_EMAIL:
                raise NotFoundError("No account found with this email")
            return None

        account_id, account_email, display_name = user.id, user.email, user.name

        # Invalidate-then-insert must not interleave for one account
        async with self.locks.for_account(account_id):
            async with self._transaction("reset request"):
                await self.accounts.lock_account(account_id)
                await self.db.execute(
                    delete(PasswordReset).where(
                        PasswordReset.user_id == account_id,
                        PasswordReset.used.is_(False),
                    ),
                    execution_options={"synchronize_session": False},
                )
                now = self.clock()
                reset = PasswordReset(
                    user_id=account_id,
                    email=account_email,
                    otp=generate_otp(),
                    created_at=now,
                    expires_at=now
                    + timedelta(minutes=self.settings.OTP_EXPIRE_MINUTES),
                    verified=False,
                    used=False,
                )
                self.db.add(reset)

        logger.info("Password reset %s created for account %s", reset.id, account_id)

        try:
            result = await self.notifier.send_otp(account_email, reset.otp, display_name)
        except Exception:
            logger.exception("Notification sender failed for reset %s", reset.id)
            raise DeliveryError() from None
        if not result.success:
            logger.error("OTP delivery failed for reset %s", reset.id)
            raise DeliveryError()

        return reset

    async def verify_otp(self, email: str | None, otp: str | None) -> str:
        """Marks the matching request verified and returns its id."""
        email, otp = _require("Email and OTP are required", email, otp)

        self.rate_limiter.check(
            f"verify:{email}",
            self.settings.MAX_VERIFICATION_ATTEMPTS,
            self.settings.VERIFICATION_WINDOW_MINUTES,
        )

        async with self._transaction("OTP verification"):
            reset = await self._find(email, otp, verified=False)
            if reset is None:
                raise InvalidCodeError()
            if self._is_expired(reset):
                raise ExpiredError()

            result = await self.db.execute(
                update(PasswordReset)
                .where(
                    PasswordReset.id == reset.id,
                    PasswordReset.verified.is_(False),
                    PasswordReset.used.is_(False),
                )
                .values(verified=True),
                execution_options={"synchronize_session": False},
            )
            if result.rowcount != 1:
                raise InvalidCodeError()

        logger.info("Password reset %s verified", reset.id)
        return reset.id

    async def consume_reset(
        self, email: str | None, otp: str | None, new_password: str | None
    ) -> None:
        """Sets the new password and retires the verified request in one transaction."""
        email, otp = _require(
            "Email, OTP, and new password are required", email, otp
        )
        if not new_password:
            raise ValidationError("Email, OTP, and new password are required")

        min_length = self.settings.PASSWORD_MIN_LENGTH
        if len(new_password) < min_length:
            raise WeakPasswordError(
                f"Password must be at least {min_length} characters long"
            )
        if len(new_password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise WeakPasswordError(
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes long"
            )

        async with self._transaction("password reset"):
            reset = await self._find(email, otp, verified=True)
            if reset is None:
                raise InvalidCodeError("Invalid or unverified OTP")
            if self._is_expired(reset):
                raise ExpiredError()

            result = await self.db.execute(
                update(PasswordReset)
                .where(
                    PasswordReset.id == reset.id,
                    PasswordReset.verified.is_(True),
                    PasswordReset.used.is_(False),
                )
                .values(used=True),
                execution_options={"synchronize_session": False},
            )
            if result.rowcount != 1:
                raise InvalidCodeError("Invalid or unverified OTP")

            await self.accounts.update_password(
                reset.user_id, hash_password(new_password, rounds=self.bcrypt_rounds)
            )

        self.rate_limiter.reset(email, f"verify:{email}")
        logger.info("Password reset %s consumed for account %s", reset.id, reset.user_id)

    async def purge_expired(self) -> int:
        cutoff = self.clock() - timedelta(hours=self.settings.RETENTION_HOURS)
        async with self._transaction("cleanup"):
            result = await self.db.execute(
                delete(PasswordReset).where(PasswordReset.expires_at < cutoff),
                execution_options={"synchronize_session": False},
            )

        deleted_count = result.rowcount
        if deleted_count > 0:
            logger.info("Cleaned up %d expired password resets", deleted_count)
        return deleted_count
