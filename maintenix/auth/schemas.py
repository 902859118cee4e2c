# maintenix/auth/schemas.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from maintenix.auth.models import Role


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    id: str
    name: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class SignupResponse(BaseModel):
    success: bool = True
    message: str = "Account created successfully"
    user: UserRead
