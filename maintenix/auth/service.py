# maintenix/auth/service.py
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from maintenix.auth.config import AuthSettings
from maintenix.auth.models import Role, User
from maintenix.auth.schemas import UserCreate
from maintenix.auth.utils import email_domain, hash_password, signup_password_problem
from maintenix.exception import InternalError, ValidationError

logger = logging.getLogger(__name__)


class AccountStore:
    """
    Account lookups and credential writes, bound to one session so they share
    the caller's transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def lock_account(self, account_id: str) -> None:
        # Row lock on PostgreSQL, no-op on SQLite
        await self.db.execute(
            select(User.id).where(User.id == account_id).with_for_update()
        )

    async def update_password(self, account_id: str, password_hash: str) -> None:
        result = await self.db.execute(
            update(User).where(User.id == account_id).values(password=password_hash)
        )
        if result.rowcount != 1:
            raise InternalError()


async def register_user(
    user: UserCreate, db: AsyncSession, settings: AuthSettings
) -> User:
    domain = email_domain(user.email)
    if domain not in settings.allowed_domains:
        raise ValidationError("Only company email addresses are allowed")

    problem = signup_password_problem(user.password)
    if problem:
        raise ValidationError(problem)

    if await AccountStore(db).find_by_email(user.email) is not None:
        raise ValidationError("User with this email already exists")

    db_user = User(
        name=user.name.strip(),
        email=user.email,
        password=hash_password(user.password, rounds=settings.BCRYPT_ROUNDS),
        role=Role.USER,
        company=domain,
    )
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("User with this email already exists") from None
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to create account for domain %s", domain)
        raise InternalError() from None

    logger.info("Created account %s", db_user.id)
    return db_user
