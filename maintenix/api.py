# maintenix/api.py
from fastapi import APIRouter

from maintenix.auth.router import router as auth_router
from maintenix.password_reset.router import router as password_reset_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/api/auth", tags=["auth"])
api_router.include_router(
    password_reset_router, prefix="/api/auth", tags=["password-reset"]
)
