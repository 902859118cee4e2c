# maintenix/auth/router.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from maintenix.auth.schemas import SignupResponse, UserCreate, UserRead
from maintenix.auth.service import register_user
from maintenix.database import get_async_session

router = APIRouter()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_200_OK)
async def signup(
    user: UserCreate,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
):
    created = await register_user(user, db, request.app.state.auth_settings)
    return SignupResponse(user=UserRead.model_validate(created))
