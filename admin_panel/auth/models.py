# admin_panel/auth/models.py
from pydantic import BaseModel, EmailStr, Field

from ..sessions import UserIdentity


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    token: str = Field(description="Opaque session token, send as 'Authorization: Bearer <token>'.")
    user: UserIdentity


class LogoutResponse(BaseModel):
    message: str


class RefreshResponse(BaseModel):
    refreshed: bool
