from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from bookclub.schemas.auth import UserSummary


class EmailUpdate(BaseModel):
    email: EmailStr


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str


class PasswordReset(BaseModel):
    password: str


class UserContact(UserSummary):
    email: str


class InviteCodeResponse(BaseModel):
    id: int
    code: str
    created_at: datetime
    used_at: datetime | None
    redeemed: bool
    created_by: UserSummary | None
    used_by: UserContact | None

    class Config:
        from_attributes = True
