# vanhoc/schemas/github.py
"""
Pydantic schemas for GitHub repository configuration.
"""
from typing import Optional

from pydantic import BaseModel

DEFAULT_BRANCH = "main"
DEFAULT_USER_DATA_PATH = "users-data"

class GitHubConfig(BaseModel):
    """
    Resolved repository coordinates and access token.
    Passed explicitly to every content client and account store call.
    """
    owner: str
    repo: str
    branch: str = DEFAULT_BRANCH
    userDataPath: str = DEFAULT_USER_DATA_PATH  # Folder holding one JSON file per account
    token: str = ""  # Personal access token (Bearer)

    def summary(self) -> dict:
        """Coordinates without the token (safe to return to clients)."""
        return self.model_dump(exclude={"token"})

class GitHubConfigIn(BaseModel):
    """
    User-entered configuration.
    Which fields are required depends on the active configuration profile.
    """
    owner: Optional[str] = None
    repo: Optional[str] = None
    branch: Optional[str] = None
    userDataPath: Optional[str] = None
    token: Optional[str] = None
