"""
Services Module

Account storage on top of the GitHub Contents API:
- Contents API client (read / write files, verify repository, users folder)
- Account store (signup, login, profile and history updates)
- Session cache (signed-in user kept locally)
- Auth orchestrator (auth state and operations used by the API routers)
- Client sessions (one orchestrator per HTTP client)
"""

from .github_contents import (
    FileContent,
    GitHubContentClient,
)
from .account_store import AccountStore
from .session_cache import SessionCache
from .auth_result import (
    AuthErrorKind,
    AuthResult,
)
from .auth_orchestrator import (
    AuthOrchestrator,
    AuthStatus,
)
from .client_sessions import ClientSessions

__all__ = [
    # Storage
    "FileContent",
    "GitHubContentClient",
    "AccountStore",
    "SessionCache",
    # Auth
    "AuthErrorKind",
    "AuthResult",
    "AuthOrchestrator",
    "AuthStatus",
    "ClientSessions",
]
