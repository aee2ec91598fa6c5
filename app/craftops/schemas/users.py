from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.craftops.schemas.base import CamelModel


class UserCreateRequest(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    role: str = "user"


class UserSummary(CamelModel):
    name: str
    email: str


class UserResponse(CamelModel):
    id: UUID
    name: str
    email: str
    role: str
    created_at: datetime
