# vanhoc/schemas/auth.py
"""
Pydantic schemas for authentication.
Defines the public user shape (session projection) and the request bodies for
login, signup, profile and history updates.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field

class AuthUser(BaseModel):
    """
    Public user information (session projection of an account record).
    Never contains the password hash or history collections.
    """
    id: str  # Opaque user id, e.g. "user_1718000000000_k3j9x0abc"
    username: str  # Lower-cased login name
    email: str
    displayName: str
    createdAt: int  # Epoch milliseconds
    lastLoginAt: int  # Epoch milliseconds
    profile: Optional[dict[str, Any]] = None  # Opaque learner profile

class LoginRequest(BaseModel):
    """Credentials for login."""
    username: str = ""
    password: str = ""

class SignupData(BaseModel):
    """
    Signup form data.
    confirmPassword is checked locally and never sent to storage.
    """
    username: str = ""
    email: str = ""
    password: str = ""
    displayName: str = ""
    confirmPassword: Optional[str] = None

class ProfileUpdate(BaseModel):
    """Replacement learner profile (stored wholesale)."""
    profile: dict[str, Any]

class HistoryUpdate(BaseModel):
    """Replacement history collections; omitted collections are left untouched."""
    chatHistory: Optional[list[dict[str, Any]]] = None
    examHistory: Optional[list[dict[str, Any]]] = None

class History(BaseModel):
    """Saved chat and exam sessions of one user."""
    chatHistory: list[dict[str, Any]] = Field(default_factory=list)
    examHistory: list[dict[str, Any]] = Field(default_factory=list)
