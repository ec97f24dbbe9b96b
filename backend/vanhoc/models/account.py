# vanhoc/models/account.py
"""
Account record model.
Represents the JSON document stored for one user at
{userDataPath}/{lowercased-username}.json in the GitHub repository.
"""
import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from vanhoc.schemas.auth import AuthUser


class AccountRecord(BaseModel):
    """
    Full account document.

    Storage:
    - One file per lower-cased username (uniqueness by path)
    - Pretty-printed JSON, rewritten wholesale on every update
    - Fields not declared here are preserved across read-modify-write

    Security:
    - Only the password hash is stored, never the plain text password
    """
    model_config = ConfigDict(extra="allow")

    id: str
    username: str
    email: str
    displayName: str
    createdAt: int  # Epoch milliseconds, set once at signup
    lastLoginAt: int  # Epoch milliseconds, bumped on every login
    passwordHash: str
    profile: Optional[dict[str, Any]] = None
    chatHistory: Optional[list[dict[str, Any]]] = None
    examHistory: Optional[list[dict[str, Any]]] = None

    @classmethod
    def from_json(cls, text: str) -> "AccountRecord":
        """
        Parse a stored account file.

        Raises:
            ValueError: If the text is not a valid account document
                (pydantic.ValidationError and json.JSONDecodeError are ValueErrors)
        """
        return cls.model_validate(json.loads(text))

    def to_json(self) -> str:
        """Serialize as the pretty-printed document written to the repository."""
        return json.dumps(self.model_dump(exclude_none=True), indent=2, ensure_ascii=False)

    def to_session_user(self) -> AuthUser:
        """Public projection cached locally (no password hash, no history)."""
        return AuthUser(
            id=self.id,
            username=self.username,
            email=self.email,
            displayName=self.displayName,
            createdAt=self.createdAt,
            lastLoginAt=self.lastLoginAt,
            profile=self.profile,
        )
