# admin_panel/users/models.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime


class UserBase(BaseModel):
    """Fields shared by create requests and stored users."""
    email: EmailStr
    name: Optional[str] = None
    roles: List[str] = Field(default_factory=list, description="Role names, e.g. 'admin'.")


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    """Partial update - only the fields that are set are written."""
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    roles: Optional[List[str]] = None

    @field_validator("email")
    @classmethod
    def email_not_null(cls, v: Optional[str]) -> Optional[str]:
        # Omit the field to keep the current email; null would clear a required column.
        if v is None:
            raise ValueError("email cannot be null")
        return v


class UserInDB(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class User(BaseModel):
    """User as returned by the API."""
    id: int
    email: str
    name: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    createdAt: str
    updatedAt: str

    @classmethod
    def from_db(cls, user: UserInDB) -> "User":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            roles=list(user.roles),
            createdAt=user.created_at.isoformat(),
            updatedAt=user.updated_at.isoformat(),
        )


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class UserList(BaseModel):
    data: List[User]
    meta: PageMeta
