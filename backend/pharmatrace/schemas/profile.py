from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from pharmatrace.models.profile import UserRole


class ProfileCreate(BaseModel):
    full_name: str
    organization_name: str
    contact_email: EmailStr
    phone_number: Optional[str] = None
    role: UserRole

    @field_validator("full_name", "organization_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class ProfileResponse(BaseModel):
    id: int
    full_name: str
    organization_name: str
    contact_email: str
    phone_number: Optional[str] = None
    role: UserRole

    model_config = ConfigDict(from_attributes=True)
