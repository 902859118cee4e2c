# maintenix/auth/dependencies.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from maintenix.auth.service import AccountStore
from maintenix.database import get_async_session


async def get_account_store(
    db: AsyncSession = Depends(get_async_session),
) -> AccountStore:
    return AccountStore(db)
