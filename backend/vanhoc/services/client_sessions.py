"""
Client sessions

Every HTTP client gets its own auth state, mirroring the browser app where the
signed-in user and any user-entered GitHub settings live in that browser's
localStorage. A client is identified by the session id inside its session
token; its session cache and stored settings are the slice of the shared
LocalStorage scoped to that id.

Orchestrators are kept in memory for recently active sessions only. Everything
durable (cached user, token/config overrides) is in storage, so an evicted
session is rebuilt on its next request and comes back in the same state,
minus the transient last error.
"""
import logging
import secrets
from collections import OrderedDict
from typing import Optional

from ..config import Settings
from ..core.config_providers import ConfigProvider, get_config_provider
from ..core.local_storage import LocalStorage
from ..core.security import PasswordHasher
from .account_store import AccountStore
from .auth_orchestrator import AuthOrchestrator
from .github_contents import GitHubContentClient
from .session_cache import SessionCache

logger = logging.getLogger(__name__)

MAX_ACTIVE_SESSIONS = 1024


def new_session_id() -> str:
    return secrets.token_urlsafe(18)


class ClientSessions:
    """
    Registry of per-client auth orchestrators.

    Parameters:
    - settings: Application settings (selects the configuration profile)
    - storage: Shared local storage; each session uses storage.scoped(session_id)
    - client: Contents API client shared by all sessions
    - hasher: Password hashing scheme shared by all sessions
    - max_active: Number of orchestrators kept in memory
    """

    def __init__(
        self,
        settings: Settings,
        storage: LocalStorage,
        client: GitHubContentClient,
        hasher: Optional[PasswordHasher] = None,
        max_active: int = MAX_ACTIVE_SESSIONS,
    ):
        self.settings = settings
        self.storage = storage
        self.client = client
        self.hasher = hasher
        self.max_active = max_active
        # Deployment-wide view (no client overrides), used by startup tasks
        self.config_provider: ConfigProvider = get_config_provider(settings, storage)
        self._active: OrderedDict[str, AuthOrchestrator] = OrderedDict()

    def _build(self, session_id: str) -> AuthOrchestrator:
        view = self.storage.scoped(session_id)
        session = SessionCache(view)
        store = AccountStore(self.client, session, hasher=self.hasher)
        auth = AuthOrchestrator(store, session, get_config_provider(self.settings, view))
        # Restore the cached user of this client (local only, no network)
        auth.initialize()
        return auth

    def get(self, session_id: str) -> AuthOrchestrator:
        """Orchestrator for a session, built (and restored from storage) on first use."""
        auth = self._active.get(session_id)
        if auth is not None:
            self._active.move_to_end(session_id)
            return auth

        auth = self._build(session_id)
        self._active[session_id] = auth
        if len(self._active) > self.max_active:
            evicted, _ = self._active.popitem(last=False)
            logger.debug("[sessions] Evicted idle session %s", evicted[:6])
        return auth

    def __len__(self) -> int:
        return len(self._active)
