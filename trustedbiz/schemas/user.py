from pydantic import EmailStr, Field
from datetime import datetime
from typing import List

from trustedbiz.schemas.common import CamelModel, Pagination

class UserCreate(CamelModel):
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., max_length=72, description="Plain password (will be hashed). Strength rules are checked by the handler.")
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

class AdminUserCreate(UserCreate):
    is_admin: bool = False

class UserResponse(CamelModel):
    id: int
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    is_admin: bool
    created_at: datetime

class ProfileUpdate(CamelModel):
    email: EmailStr
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

class PasswordChange(CamelModel):
    current_password: str
    new_password: str = Field(..., max_length=72)

class AdminUserSummary(CamelModel):
    id: int
    name: str
    email: str
    is_admin: bool
    created_at: datetime | None = None

class AdminUserListResponse(CamelModel):
    users: List[AdminUserSummary]
    pagination: Pagination

class UserActionRequest(CamelModel):
    user_id: int | None = None
    action: str | None = None
