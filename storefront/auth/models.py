from typing import Optional
from pydantic import BaseModel, Field


class RegisterIn(BaseModel):
    email: str = Field(..., examples=["user@example.com"])
    password: str = Field(..., examples=["StrongPassw0rd!"])
    admin_code: Optional[str] = None


class SignIn(BaseModel):
    email: str = Field(...)
    password: str = Field(...)


class UpdateDetailsIn(BaseModel):
    first_name: Optional[str] = Field(None, max_length=128)
    last_name: Optional[str] = Field(None, max_length=128)
    phone_number: Optional[str] = Field(None, max_length=20)

    model_config = {"extra": "forbid"}


class PasswordUpdateIn(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class AccountDeleteIn(BaseModel):
    password: str = Field(..., min_length=1)
