from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import ClassVar, FrozenSet, Optional
from enum import Enum


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Lowercase the domain part, matching how ``EmailStr`` stores addresses"""
    if not value:
        return value
    local, sep, domain = value.rpartition("@")
    if not sep:
        return value
    return f"{local}@{domain.lower()}"


class UserRole(str, Enum):
    """Platform roles, from least to most privileged"""
    USER = "user"
    CREATOR = "creator"
    ADMIN = "admin"

    @classmethod
    def from_stored(cls, value: Optional[str]) -> "UserRole":
        """Role of a stored user row; missing or unknown values mean ``user``"""
        try:
            return cls(value)
        except ValueError:
            return cls.USER


class UserCreate(BaseModel):
    """Schema for first sign-in registration"""
    model_config = ConfigDict(extra="allow")

    email: EmailStr
    name: Optional[str] = None
    photo: Optional[str] = None
    role: UserRole = UserRole.USER

    @field_validator("role")
    @classmethod
    def role_not_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("admin role cannot be self-assigned")
        return value


class UserProfileUpdate(BaseModel):
    """
    Schema for self profile edits.

    Arbitrary profile fields are accepted; identity and role are not.
    """
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    photo: Optional[str] = None
    bio: Optional[str] = None
    address: Optional[str] = None

    PROTECTED_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"_id", "email", "role"})

    def to_update(self) -> dict:
        data = self.model_dump(mode="json", exclude_unset=True)
        return {k: v for k, v in data.items() if k not in self.PROTECTED_FIELDS}


class RoleUpdate(BaseModel):
    """Schema for admin role changes"""
    role: UserRole = Field(..., description="user, creator or admin")
