from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime
from toolhub.config.permissions_config import Role


class UserProfile(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    must_change_password: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Role


class InviteRequest(BaseModel):
    email: EmailStr
    name: str
    role: Role

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value.strip()


class InviteResponse(BaseModel):
    message: str
    user_id: Optional[str] = None
    email: str


class PasswordResetRequest(BaseModel):
    new_password: str


class NewUser(BaseModel):
    """One entry of a seed file consumed by the seed_users script."""
    email: EmailStr
    name: str
    role: Role

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value.strip()
