from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, ConfigDict, field_validator


class ApplicantRegister(BaseModel):
    full_name: str
    email: EmailStr
    mobile_number: str
    password: str

    model_config = ConfigDict(title="ApplicantRegister")

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters")
        return value

    @field_validator("mobile_number")
    @classmethod
    def mobile_digits(cls, value: str) -> str:
        value = value.strip()
        if not value.isdigit() or len(value) != 10:
            raise ValueError("Mobile number must be 10 digits")
        return value


class ApplicantLogin(BaseModel):
    email: EmailStr
    password: str


class ApplicantResponse(BaseModel):
    id: int
    full_name: str
    email: EmailStr
    mobile_number: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, title="ApplicantResponse")


class ApplicationCreate(BaseModel):
    position_type: int

    @field_validator("position_type")
    @classmethod
    def known_position(cls, value: int) -> int:
        if value not in range(0, 5):
            raise ValueError("position_type must be between 0 and 4")
        return value
