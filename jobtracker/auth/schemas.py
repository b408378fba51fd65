"""
JobTracker - Authentication Schemas

Pydantic schemas for auth request/response validation.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


# -----------------------------------------------------------------------------
# User Schemas
# -----------------------------------------------------------------------------

class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    name: Optional[str] = Field(None, max_length=200)


class UserCreate(UserBase):
    """Schema for user registration. Minimum password length is enforced by the auth service."""
    password: str = Field(..., min_length=1, max_length=128)


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Schema for user response (public user data)."""
    id: int
    email: str
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    has_password: bool  # False for OAuth-only accounts


# -----------------------------------------------------------------------------
# Token Schemas
# -----------------------------------------------------------------------------

class Token(BaseModel):
    """Schema for bearer token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until the token expires


class TokenData(BaseModel):
    """Schema for decoded token claims (internal use)."""
    user_id: int
    email: str
    name: Optional[str] = None
    exp: datetime


# -----------------------------------------------------------------------------
# Auth Responses
# -----------------------------------------------------------------------------

class AuthResponse(BaseModel):
    """
    Schema for register/login responses.

    token is only set by the bearer strategy; the session strategy sets a
    cookie instead.
    """
    user: UserResponse
    token: Optional[Token] = None
    message: str


class AuthStatus(BaseModel):
    """Schema for the auth status check used by the client on page load."""
    authenticated: bool
    user: Optional[UserResponse] = None
    strategy: str
    oauth_providers: list[str] = []
