# backend/bookbar/schemas/admin.py

from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class TokenResponse(BaseModel):
    token: str


class SessionRead(BaseModel):
    email: str


class ChangePasswordRequest(BaseModel):
    current_password: str = ""
    new_password: str = ""


class EmailTestRequest(BaseModel):
    to: str


class SmsTestRequest(BaseModel):
    to: str


class SendResultRead(BaseModel):
    ok: bool
    error: str | None = None
