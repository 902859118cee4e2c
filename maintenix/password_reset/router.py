# maintenix/password_reset/router.py
from fastapi import APIRouter, Depends, Request, status

from maintenix.password_reset import schemas
from maintenix.password_reset.dependencies import get_password_reset_service
from maintenix.password_reset.service import PasswordResetService
from maintenix.password_reset.utils import get_client_ip

router = APIRouter()

UNIFORM_MESSAGE = "If an account with this email exists, an OTP has been sent."


@router.post(
    "/forgot-password",
    response_model=schemas.RequestResetResponse,
    status_code=status.HTTP_200_OK,
)
async def route_request_reset(
    payload: schemas.RequestResetSchema,
    request: Request,
    service: PasswordResetService = Depends(get_password_reset_service),
):
    await service.request_reset(payload.email, get_client_ip(request))
    if not service.settings.REVEAL_UNKNOWN_EMAIL:
        return schemas.RequestResetResponse(message=UNIFORM_MESSAGE)
    return schemas.RequestResetResponse()


@router.post(
    "/verify-otp",
    response_model=schemas.VerifyOTPResponse,
    status_code=status.HTTP_200_OK,
)
async def route_verify_otp(
    payload: schemas.VerifyOTPSchema,
    service: PasswordResetService = Depends(get_password_reset_service),
):
    reset_id = await service.verify_otp(payload.email, payload.otp)
    return schemas.VerifyOTPResponse(reset_id=reset_id)


@router.post(
    "/reset-password",
    response_model=schemas.ResetPasswordResponse,
    status_code=status.HTTP_200_OK,
)
async def route_reset_password(
    payload: schemas.ResetPasswordSchema,
    service: PasswordResetService = Depends(get_password_reset_service),
):
    await service.consume_reset(payload.email, payload.otp, payload.new_password)
    return schemas.ResetPasswordResponse()


@router.post(
    "/cleanup", response_model=schemas.CleanupResponse, status_code=status.HTTP_200_OK
)
async def route_cleanup_resets(
    service: PasswordResetService = Depends(get_password_reset_service),
):
    deleted = await service.purge_expired()
    return schemas.CleanupResponse(deleted=deleted)
