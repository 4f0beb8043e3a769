from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from .common import CamelModel, Entity


UserRole = Literal["requester", "agent", "approver", "supervisor", "admin", "hr", "it_support", "employee"]


class User(Entity):
    id: str
    name: str
    email: EmailStr
    role: UserRole = "requester"
    department: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    permissions: List[str] = Field(default_factory=list)
    manager_id: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class UserCreate(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    role: UserRole = "requester"
    department: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    is_active: bool = True
    permissions: List[str] = Field(default_factory=list)
    manager_id: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
