# maintenix/password_reset/dependencies.py
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from maintenix.auth.dependencies import get_account_store
from maintenix.auth.service import AccountStore
from maintenix.database import get_async_session
from maintenix.password_reset.service import PasswordResetService


async def get_password_reset_service(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    accounts: AccountStore = Depends(get_account_store),
) -> PasswordResetService:
    state = request.app.state
    return PasswordResetService(
        db,
        accounts,
        state.notifier,
        settings=state.password_reset_settings,
        rate_limiter=state.rate_limiter,
        locks=state.account_locks,
        clock=state.clock,
        bcrypt_rounds=state.auth_settings.BCRYPT_ROUNDS,
    )
