from pydantic import BaseModel, EmailStr, field_validator, ConfigDict, model_validator
from typing import Optional, Any
from datetime import datetime

from app.core.constants import RoleEnum

class UserBase(BaseModel):
    """Base user schema with common fields."""
    full_name: str
    email: EmailStr

class UserCreate(UserBase):
    """Schema for registering a new account."""
    password: str
    role: RoleEnum = RoleEnum.STUDENT
    registration_number: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None

    @field_validator("full_name")
    def validate_name(cls, v):
        if not v or len(v.strip()) < 3:
            raise ValueError("Name must be at least 3 characters")
        return v.strip()

    @field_validator("password")
    def validate_password(cls, v):
        if not v or not v.strip():
            raise ValueError("Password cannot be empty or contain only whitespace.")
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long.")
        return v

    @field_validator("role")
    def validate_role(cls, v):
        if v not in (RoleEnum.STUDENT, RoleEnum.CONDUCTOR):
            raise ValueError("Role must be student or conductor")
        return v

    @model_validator(mode="after")
    def require_registration_number(self):
        if self.role == RoleEnum.STUDENT and not (self.registration_number or "").strip():
            raise ValueError("Registration number is required for student role")
        return self

class StudentCreate(UserBase):
    """Schema used by admins and conductors to onboard a student."""
    password: str
    registration_number: str
    department: Optional[str] = None
    semester: Optional[str] = None

    @field_validator("password")
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long.")
        return v

class StudentUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    semester: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("full_name")
    def not_empty(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Full name cannot be empty")
        return v

    @model_validator(mode='before')
    @classmethod
    def at_least_one_value(cls, data: Any):
        if isinstance(data, dict) and not any(v is not None for v in data.values()):
            raise ValueError("At least one field must be provided for update")
        return data

class User(UserBase):
    """Main user schema for reading user data."""
    id: int
    role: RoleEnum
    registration_number: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[str] = None
    examiner_id: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserContext(BaseModel):
    """The authenticated caller, as resolved from the bearer token."""
    user: User
    role: RoleEnum

    model_config = ConfigDict(from_attributes=True)
