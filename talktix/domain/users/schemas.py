"""User domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_name, validate_password


class UserSignup(BaseModel):
    """Schema for creating a new user"""

    firstName: str
    lastName: str
    email: str
    password: str

    @field_validator("firstName", "lastName")
    @classmethod
    def check_name(cls, v, info):
        return validate_name(v, info.field_name)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password(v)


class UserLogin(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class UserUpdate(BaseModel):
    """Schema for updating an existing user"""

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None

    @field_validator("firstName", "lastName")
    @classmethod
    def check_name(cls, v, info):
        if v is not None:
            return validate_name(v, info.field_name)
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class OTPVerify(BaseModel):
    otp: str


class UserResponse(BaseModel):
    """Schema for user response (never carries the password hash)"""

    id: str
    firstName: str
    lastName: str
    email: str
    isVerified: bool
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserAuthResponse(BaseModel):
    user: UserResponse
    token: str


class MessageResponse(BaseModel):
    message: str
