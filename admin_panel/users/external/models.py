# admin_panel/users/external/models.py
from pydantic import BaseModel
from typing import Optional


class ExternalUser(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None


class CreateExternalUser(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None


class UpdateExternalUser(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
