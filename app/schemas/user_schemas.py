# app/schemas/user_schemas.py

import datetime as dt
from typing import Literal, Optional
from pydantic import BaseModel

UserRole = Literal['admin', 'teacher', 'staff']


# Request schemas
class UserCreateRequest(BaseModel):
    # name and email are checked by the service so the message matches the UI
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = 'staff'
    is_active: bool = True


class UserUpdateRequest(BaseModel):
    """Full update as in the user form: name, email and role are required."""
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: bool = False


# Response schemas
class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    is_active: bool
    created_at: Optional[dt.datetime] = None
