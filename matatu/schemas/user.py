from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from matatu.models.enums import UserRole


class UserOut(BaseModel):
    id: int
    firstname: str
    lastname: str
    username: str
    email: EmailStr
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    firstname: str
    lastname: str
    username: str
    password: str
    email: EmailStr
    role: UserRole = UserRole.commuter


class UserUpdate(BaseModel):
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    username: Optional[str] = None
    email: Optional[EmailStr] = None


class PasswordUpdate(BaseModel):
    password: Optional[str] = None


class UserDeleted(BaseModel):
    message: str
    user: UserOut
