"""
Auth orchestrator

Holds the client-side auth state and sequences account store calls:

    uninitialized -> loading -> unauthenticated <-> authenticated

`last_error` is a transient annotation on the two stable states, and
`is_loading` is set while a remote call is in flight. One orchestrator serves one client
(see client_sessions); logout only forgets that client's cached user.
"""
import logging
from enum import Enum
from typing import Any, Optional

from ..core.config_providers import ConfigProvider
from ..schemas.auth import AuthUser, History, LoginRequest, SignupData
from ..schemas.github import GitHubConfig, GitHubConfigIn
from .account_store import AccountStore
from .auth_result import AuthErrorKind, AuthResult, LOGIN_ERROR, SIGNUP_ERROR
from .session_cache import SessionCache
from .validation import normalize_signup, validate_login, validate_signup

logger = logging.getLogger(__name__)


class AuthStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class AuthOrchestrator:
    def __init__(self, store: AccountStore, session: SessionCache, config_provider: ConfigProvider):
        self.store = store
        self.session = session
        self.config_provider = config_provider
        self.status = AuthStatus.UNINITIALIZED
        self.user: Optional[AuthUser] = None
        self.last_error: Optional[str] = None
        self.is_loading = False

    # ------------------------------------------------------------------ state

    def initialize(self) -> AuthStatus:
        """
        Restore the session from the local cache.
        Local only: the cached user is not re-validated against GitHub.
        """
        self.status = AuthStatus.LOADING
        self.user = self.session.load()
        self.status = AuthStatus.AUTHENTICATED if self.user else AuthStatus.UNAUTHENTICATED
        logger.info("[auth] Initialized: %s", self.status.value)
        return self.status

    @property
    def is_authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED and self.user is not None

    @property
    def is_configured(self) -> bool:
        return self.config_provider.is_configured()

    def _config(self) -> Optional[GitHubConfig]:
        config = self.config_provider.resolve()
        if config is None or not config.token:
            return None
        return config

    def _ensure_initialized(self) -> None:
        if self.status == AuthStatus.UNINITIALIZED:
            self.initialize()

    def _reject(self, kind: AuthErrorKind, message: Optional[str] = None) -> AuthResult:
        result = AuthResult.fail(kind, message)
        # Form validation errors are shown by the form itself, not kept as state
        if kind != AuthErrorKind.VALIDATION:
            self.last_error = result.error
        return result

    # ----------------------------------------------------------- operations

    async def login(self, username: str, password: str) -> AuthResult:
        self._ensure_initialized()
        if self.status == AuthStatus.AUTHENTICATED:
            return AuthResult.fail(AuthErrorKind.INVALID_STATE)

        error = validate_login(LoginRequest(username=username, password=password))
        if error:
            return self._reject(AuthErrorKind.VALIDATION, error)

        config = self._config()
        if config is None:
            return self._reject(AuthErrorKind.NOT_CONFIGURED)

        self.is_loading = True
        self.last_error = None
        try:
            result = await self.store.authenticate(username.strip(), password, config)
        except Exception:
            logger.exception("[auth] Login error")
            result = AuthResult.fail(AuthErrorKind.UNEXPECTED, LOGIN_ERROR)
        finally:
            self.is_loading = False

        if not result.success:
            self.last_error = result.error
            return result

        self.user = result.user
        self.status = AuthStatus.AUTHENTICATED
        logger.info("[auth] Logged in: %s", self.user.username)
        return result

    async def signup(self, data: SignupData) -> AuthResult:
        self._ensure_initialized()
        if self.status == AuthStatus.AUTHENTICATED:
            return AuthResult.fail(AuthErrorKind.INVALID_STATE)

        # Validate locally before touching the network
        error = validate_signup(data)
        if error:
            return self._reject(AuthErrorKind.VALIDATION, error)

        config = self._config()
        if config is None:
            return self._reject(AuthErrorKind.NOT_CONFIGURED)

        self.is_loading = True
        self.last_error = None
        try:
            result = await self.store.create(normalize_signup(data), config)
        except Exception:
            logger.exception("[auth] Signup error")
            result = AuthResult.fail(AuthErrorKind.UNEXPECTED, SIGNUP_ERROR)
        finally:
            self.is_loading = False

        if not result.success:
            self.last_error = result.error
            return result

        self.user = result.user
        self.status = AuthStatus.AUTHENTICATED
        logger.info("[auth] Signed up: %s", self.user.username)
        return result

    def logout(self) -> None:
        if self.status != AuthStatus.AUTHENTICATED:
            self.last_error = None
            return
        self.session.clear()
        logger.info("[auth] Logged out: %s", self.user.username if self.user else "-")
        self.user = None
        self.last_error = None
        self.status = AuthStatus.UNAUTHENTICATED

    async def update_profile(self, profile: dict[str, Any]) -> bool:
        """
        Replace the signed-in user's profile.
        On failure the in-memory user keeps its previous profile.
        """
        if not self.is_authenticated:
            return False
        config = self._config()
        if config is None:
            return False

        saved = await self.store.update_profile(self.user.username, profile, config)
        if saved:
            self.user = self.user.model_copy(update={"profile": profile})
        return saved

    async def save_history(
        self,
        chat_history: Optional[list[dict[str, Any]]] = None,
        exam_history: Optional[list[dict[str, Any]]] = None,
    ) -> bool:
        if not self.is_authenticated:
            return False
        config = self._config()
        if config is None:
            return False
        return await self.store.append_history(
            self.user.username,
            config,
            chat_history=chat_history,
            exam_history=exam_history,
        )

    async def load_history(self) -> Optional[History]:
        if not self.is_authenticated:
            return None
        config = self._config()
        if config is None:
            return None
        return await self.store.get_history(self.user.username, config)

    # -------------------------------------------------------- configuration

    async def configure(self, data: GitHubConfigIn) -> AuthResult:
        """
        Accept user-entered GitHub configuration.

        Steps: provider validation -> repository access check -> persist ->
        create the user data folder (best-effort).
        """
        provider = self.config_provider
        if not provider.editable:
            return self._reject(AuthErrorKind.CONFIG_LOCKED)

        error = provider.validate(data)
        if error:
            return self._reject(AuthErrorKind.VALIDATION, error)

        candidate = provider.build(data)
        self.is_loading = True
        self.last_error = None
        try:
            if not await self.store.verify_repository(candidate):
                return self._reject(AuthErrorKind.CONFIG_INVALID)

            provider.save(candidate)
            logger.info("[auth] GitHub configured: %s/%s@%s", candidate.owner, candidate.repo, candidate.branch)

            if not await self.store.initialize(candidate):
                logger.warning("[auth] Could not initialize %s folder", candidate.userDataPath)
        finally:
            self.is_loading = False
        return AuthResult.ok(self.user)

    def config_summary(self) -> dict[str, Any]:
        """Active profile and repository coordinates; never includes the token."""
        config = self.config_provider.resolve()
        summary: dict[str, Any] = {
            "profile": self.config_provider.name,
            "editable": self.config_provider.editable,
            "isConfigured": bool(config and config.token),
        }
        if config is not None:
            summary.update(config.summary())
        return summary

    def snapshot(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "isAuthenticated": self.is_authenticated,
            "isLoading": self.is_loading,
            "isConfigured": self.is_configured,
            "error": self.last_error,
            "user": self.user.model_dump() if self.user else None,
        }
