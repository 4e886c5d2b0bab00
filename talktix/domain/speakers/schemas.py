"""Speaker domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import (
    validate_bio,
    validate_email,
    validate_name,
    validate_password,
    validate_price,
)


class SpeakerSignup(BaseModel):
    """Schema for creating a new speaker"""

    firstName: str
    lastName: str
    email: str
    password: str
    pricePerSession: str
    bio: Optional[str] = None

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

    @field_validator("pricePerSession", mode="before")
    @classmethod
    def check_price(cls, v):
        # Accept 50 / 49.99 as well as "49.99"
        return validate_price(v)

    @field_validator("bio")
    @classmethod
    def check_bio(cls, v):
        return validate_bio(v)


class SpeakerLogin(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class SpeakerUpdate(BaseModel):
    """Schema for updating an existing speaker"""

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    pricePerSession: Optional[str] = None
    bio: Optional[str] = None

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

    @field_validator("pricePerSession", mode="before")
    @classmethod
    def check_price(cls, v):
        if v is not None:
            return validate_price(v)
        return v

    @field_validator("bio")
    @classmethod
    def check_bio(cls, v):
        return validate_bio(v)


class SpeakerResponse(BaseModel):
    """Schema for speaker response (never carries the password hash)"""

    id: str
    firstName: str
    lastName: str
    email: str
    isVerified: bool
    pricePerSession: str
    bio: Optional[str] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True


class SpeakerAuthResponse(BaseModel):
    speaker: SpeakerResponse
    token: str
