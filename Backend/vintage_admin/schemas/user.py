from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from vintage_admin.core.normalization import USER
from vintage_admin.models.user import UserRole
from vintage_admin.schemas.common import CamelModel, NormalizedInput, to_canonical


class UserCreate(NormalizedInput):
    entity_type = USER

    email: EmailStr
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=6)  # Raw password, will be hashed before storage
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    is_verified: bool = False


class UserUpdate(NormalizedInput):
    entity_type = USER
    partial_update = True

    email: Optional[EmailStr] = None
    username: Optional[str] = Field(default=None, min_length=1, max_length=50)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None


class UserResponse(CamelModel):
    id: UUID
    email: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    is_active: bool
    is_verified: bool
    created_at: datetime

    @classmethod
    def from_model(cls, user) -> "UserResponse":
        return cls.model_validate(to_canonical(user, USER))


class EmailCheckResponse(CamelModel):
    is_duplicate: bool
    matched_id: Optional[str] = None
