# maintenix/password_reset/schemas.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RequestResetSchema(BaseModel):
    email: EmailStr


class VerifyOTPSchema(BaseModel):
    email: EmailStr
    otp: str = Field(
        ..., min_length=1, max_length=6, description="The 6-digit code from the email."
    )


class ResetPasswordSchema(BaseModel):
    email: EmailStr
    otp: str = Field(
        ..., min_length=1, max_length=6, description="The 6-digit code from the email."
    )
    new_password: str = Field(
        ...,
        alias="newPassword",
        min_length=1,
        description="The new password for the account.",
    )

    model_config = ConfigDict(populate_by_name=True)


class RequestResetResponse(BaseModel):
    success: bool = True
    message: str = "OTP sent to your email"


class VerifyOTPResponse(BaseModel):
    success: bool = True
    message: str = "OTP verified successfully"
    reset_id: str = Field(..., alias="resetId")

    model_config = ConfigDict(populate_by_name=True)


class ResetPasswordResponse(BaseModel):
    success: bool = True
    message: str = "Password reset successfully"


class CleanupResponse(BaseModel):
    success: bool = True
    deleted: int
