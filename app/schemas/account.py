"""Pydantic schemas for account endpoints."""

from datetime import datetime

from pydantic import BaseModel


class SignupRequest(BaseModel):
    name: str
    email: str
    password: str
    password_confirmation: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str
    remember_me: bool = False


class PasswordResetRequest(BaseModel):
    email: str


class PasswordResetUpdate(BaseModel):
    email: str
    password: str
    password_confirmation: str | None = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    activated: bool
    activated_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    token: str
    user: UserResponse


class ActivationResendRequest(BaseModel):
    email: str
