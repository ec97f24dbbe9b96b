"""
Account store

One JSON document per user at {userDataPath}/{lowercased-username}.json in the
GitHub repository. Every mutation is a read-modify-write of the whole file that
reuses the SHA from the read, so GitHub rejects the write if someone else
changed the file in between. Rejected writes are not retried.

Uniqueness is best-effort: `create` checks for the file and then writes it in a
second request, so two concurrent signups for one username can both pass the
check.
"""
import logging
import secrets
import string
import time
from typing import Any, Callable, Optional

from ..models.account import AccountRecord
from ..schemas.auth import History, SignupData
from ..schemas.github import GitHubConfig
from ..core.security import PasswordHasher, RollingHasher
from .auth_result import AuthErrorKind, AuthResult, LOGIN_ERROR
from .github_contents import FileContent, GitHubContentClient
from .session_cache import SessionCache

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    """Current time as epoch milliseconds"""
    return int(time.time() * 1000)


def new_user_id(now: int) -> str:
    """Time-based id with a random suffix, e.g. user_1718000000000_k3j9x0abc"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"user_{now}_{suffix}"


def user_file_path(username: str, config: GitHubConfig) -> str:
    return f"{config.userDataPath}/{username.lower()}.json"


class AccountStore:
    """
    Account operations on top of the Contents API client.

    The GitHub configuration is passed to every call; a configuration without a
    token short-circuits before any request is made.

    Parameters:
    - client: Contents API client
    - session: Session cache mirrored after signup/login/profile updates
    - hasher: Password hashing scheme (default: legacy rolling hash)
    - clock: Returns epoch milliseconds
    - id_factory: Builds a user id from the creation timestamp
    """

    def __init__(
        self,
        client: GitHubContentClient,
        session: SessionCache,
        hasher: Optional[PasswordHasher] = None,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[int], str] = new_user_id,
    ):
        self.client = client
        self.session = session
        self.hasher = hasher or RollingHasher()
        self.clock = clock
        self.id_factory = id_factory

    async def _load(self, username: str, config: GitHubConfig) -> Optional[tuple[AccountRecord, FileContent]]:
        """Read and parse an account file. None if absent or unreadable."""
        result = await self.client.read(user_file_path(username, config), config)
        if result is None:
            return None
        try:
            return AccountRecord.from_json(result.content), result
        except ValueError as e:
            logger.error("[store] Unreadable account file for %s: %s", username, e)
            return None

    async def _save(self, record: AccountRecord, message: str, config: GitHubConfig, sha: Optional[str] = None) -> bool:
        return await self.client.write(
            user_file_path(record.username, config),
            record.to_json(),
            message,
            config,
            sha=sha,
        )

    async def exists(self, username: str, config: GitHubConfig) -> bool:
        if not config.token:
            return False
        return await self.client.read(user_file_path(username, config), config) is not None

    async def create(self, data: SignupData, config: GitHubConfig) -> AuthResult:
        """
        Create a new account and mirror it into the session cache.

        Returns:
        - AuthResult.ok(user) on success
        - USERNAME_TAKEN if the account file already exists
        - STORAGE if GitHub rejected the write
        """
        if not config.token:
            return AuthResult.fail(AuthErrorKind.NOT_CONFIGURED)

        if await self.exists(data.username, config):
            return AuthResult.fail(AuthErrorKind.USERNAME_TAKEN)

        now = self.clock()
        record = AccountRecord(
            id=self.id_factory(now),
            username=data.username.lower(),
            email=data.email,
            displayName=data.displayName,
            createdAt=now,
            lastLoginAt=now,
            passwordHash=self.hasher.hash(data.password),
        )

        saved = await self._save(record, f"Create user: {data.username}", config)
        if not saved:
            return AuthResult.fail(AuthErrorKind.STORAGE)

        user = record.to_session_user()
        self.session.save(user)
        logger.info("[store] Created user %s (id=%s)", record.username, record.id)
        return AuthResult.ok(user)

    async def authenticate(self, username: str, password: str, config: GitHubConfig) -> AuthResult:
        """
        Check credentials and record the login time.

        The lastLoginAt write is best-effort: if GitHub rejects it (e.g. stale
        SHA) the login still succeeds and the bump is lost.

        Returns:
        - AuthResult.ok(user) on success
        - NOT_FOUND if no account file exists for the username
        - WRONG_PASSWORD on hash mismatch
        """
        if not config.token:
            return AuthResult.fail(AuthErrorKind.NOT_CONFIGURED)

        result = await self.client.read(user_file_path(username, config), config)
        if result is None:
            return AuthResult.fail(AuthErrorKind.NOT_FOUND)

        try:
            record = AccountRecord.from_json(result.content)
        except ValueError as e:
            logger.error("[store] Unreadable account file for %s: %s", username, e)
            return AuthResult.fail(AuthErrorKind.UNEXPECTED, LOGIN_ERROR)

        if not self.hasher.verify(password, record.passwordHash):
            return AuthResult.fail(AuthErrorKind.WRONG_PASSWORD)

        record = record.model_copy(update={"lastLoginAt": self.clock()})
        saved = await self._save(record, f"Update login time: {username}", config, sha=result.sha)
        if not saved:
            logger.warning("[store] Login time for %s not persisted", record.username)

        user = record.to_session_user()
        self.session.save(user)
        return AuthResult.ok(user)

    async def update_profile(self, username: str, profile: dict[str, Any], config: GitHubConfig) -> bool:
        """
        Replace the stored profile. Never creates an account.
        The session cache is refreshed only if it holds the same user.
        """
        if not config.token:
            return False

        loaded = await self._load(username, config)
        if loaded is None:
            return False
        record, current = loaded

        updated = record.model_copy(update={"profile": profile})
        saved = await self._save(updated, f"Update profile: {username}", config, sha=current.sha)
        if saved:
            self.session.update_profile(username, profile)
        return saved

    async def append_history(
        self,
        username: str,
        config: GitHubConfig,
        chat_history: Optional[list[dict[str, Any]]] = None,
        exam_history: Optional[list[dict[str, Any]]] = None,
    ) -> bool:
        """
        Store chat and/or exam history.

        Despite the name, the given collections replace the stored ones
        wholesale; a collection passed as None is left untouched.

        Raises:
            ValueError: If neither collection is given
        """
        if chat_history is None and exam_history is None:
            raise ValueError("chat_history or exam_history is required")
        if not config.token:
            return False

        loaded = await self._load(username, config)
        if loaded is None:
            return False
        record, current = loaded

        update: dict[str, Any] = {}
        if chat_history is not None:
            update["chatHistory"] = chat_history
        if exam_history is not None:
            update["examHistory"] = exam_history

        if len(update) == 2:
            message = f"Update history: {username}"
        elif "chatHistory" in update:
            message = f"Update chat history: {username}"
        else:
            message = f"Update exam history: {username}"

        return await self._save(record.model_copy(update=update), message, config, sha=current.sha)

    async def get_history(self, username: str, config: GitHubConfig) -> Optional[History]:
        """Saved history of a user, or None if the account cannot be read."""
        if not config.token:
            return None
        loaded = await self._load(username, config)
        if loaded is None:
            return None
        record, _ = loaded
        return History(
            chatHistory=record.chatHistory or [],
            examHistory=record.examHistory or [],
        )

    async def verify_repository(self, config: GitHubConfig) -> bool:
        if not config.token:
            return False
        return await self.client.verify_repository(config)

    async def initialize(self, config: GitHubConfig) -> bool:
        """Ensure the user data folder exists (creates the .gitkeep placeholder)."""
        if not config.token:
            return False
        return await self.client.ensure_directory(config)
