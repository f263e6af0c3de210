from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, ConfigDict

from licensing.workflow.status import Role


class OfficerLogin(BaseModel):
    email: EmailStr
    password: str

    model_config = ConfigDict(title="OfficerLogin")


class OfficerCreate(BaseModel):
    full_name: str
    email: EmailStr
    password: str
    role: Role
    position_type: Optional[int] = None
    phone: Optional[str] = None

    model_config = ConfigDict(title="OfficerCreate")


class OfficerResponse(BaseModel):
    id: int
    full_name: str
    email: EmailStr
    role: str
    position_type: Optional[int] = None
    is_active: bool
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, title="OfficerResponse")
