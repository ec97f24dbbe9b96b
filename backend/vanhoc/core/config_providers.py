# vanhoc/core/config_providers.py
"""
GitHub configuration providers.

A deployment runs exactly one configuration profile:
- fixed:    token from the environment, coordinates from settings, not editable
- override: like fixed, but a token entered by the user (stored locally) wins
- user:     owner/repo/branch/path/token all entered by the user and stored locally

Each provider keeps its own validation rules; they are intentionally not merged.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from vanhoc.config import Settings
from vanhoc.core.local_storage import LocalStorage, ScopedStorage
from vanhoc.schemas.github import DEFAULT_BRANCH, DEFAULT_USER_DATA_PATH, GitHubConfig, GitHubConfigIn

logger = logging.getLogger(__name__)

GITHUB_CONFIG_KEY = "vanhoc10_github_config"
GITHUB_TOKEN_KEY = "vanhoc10_github_token"


def _settings_config(settings: Settings, token: Optional[str]) -> GitHubConfig:
    return GitHubConfig(
        owner=settings.github_owner,
        repo=settings.github_repo,
        branch=settings.github_branch or DEFAULT_BRANCH,
        userDataPath=settings.github_user_data_path or DEFAULT_USER_DATA_PATH,
        token=(token or "").strip(),
    )


class ConfigProvider(ABC):
    """Resolves the GitHub configuration used for every account operation."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    def editable(self) -> bool:
        """Whether users may submit configuration"""
        return False

    @abstractmethod
    def resolve(self) -> Optional[GitHubConfig]:
        """Current configuration, or None if nothing usable is available"""
        pass

    def is_configured(self) -> bool:
        config = self.resolve()
        return bool(config and config.token)

    def validate(self, data: GitHubConfigIn) -> Optional[str]:
        """First validation error for user input, or None"""
        return None

    def build(self, data: GitHubConfigIn) -> GitHubConfig:
        """Configuration that would result from accepting `data` (not yet saved)"""
        raise NotImplementedError(f"{self.name} configuration is not editable")

    def save(self, config: GitHubConfig) -> None:
        raise NotImplementedError(f"{self.name} configuration is not editable")


class FixedConfigProvider(ConfigProvider):
    """Token baked in at deploy time (GITHUB_TOKEN)."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def name(self) -> str:
        return "fixed"

    def resolve(self) -> Optional[GitHubConfig]:
        return _settings_config(self.settings, self.settings.github_token)


class LocalOverrideConfigProvider(ConfigProvider):
    """Deploy-time token that a user-entered token (stored locally) overrides."""

    def __init__(self, settings: Settings, storage: LocalStorage | ScopedStorage):
        self.settings = settings
        self.storage = storage

    @property
    def name(self) -> str:
        return "override"

    @property
    def editable(self) -> bool:
        return True

    def resolve(self) -> Optional[GitHubConfig]:
        token = self.storage.get_item(GITHUB_TOKEN_KEY) or self.settings.github_token
        return _settings_config(self.settings, token)

    def validate(self, data: GitHubConfigIn) -> Optional[str]:
        if not (data.token or "").strip():
            return "Vui lòng nhập Personal Access Token"
        return None

    def build(self, data: GitHubConfigIn) -> GitHubConfig:
        return _settings_config(self.settings, data.token)

    def save(self, config: GitHubConfig) -> None:
        self.storage.set_item(GITHUB_TOKEN_KEY, config.token)


class UserConfigProvider(ConfigProvider):
    """Complete repository configuration entered by the user."""

    def __init__(self, storage: LocalStorage | ScopedStorage):
        self.storage = storage

    @property
    def name(self) -> str:
        return "user"

    @property
    def editable(self) -> bool:
        return True

    def resolve(self) -> Optional[GitHubConfig]:
        raw = self.storage.get_item(GITHUB_CONFIG_KEY)
        if not raw:
            return None
        try:
            return GitHubConfig.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning("[config] Ignoring unreadable stored GitHub config: %s", e)
            return None

    def validate(self, data: GitHubConfigIn) -> Optional[str]:
        if not (data.owner or "").strip():
            return "Vui lòng nhập tên người dùng/tổ chức GitHub"
        if not (data.repo or "").strip():
            return "Vui lòng nhập tên repository"
        if not (data.token or "").strip():
            return "Vui lòng nhập Personal Access Token"
        return None

    def build(self, data: GitHubConfigIn) -> GitHubConfig:
        return GitHubConfig(
            owner=(data.owner or "").strip(),
            repo=(data.repo or "").strip(),
            branch=(data.branch or "").strip() or DEFAULT_BRANCH,
            userDataPath=(data.userDataPath or "").strip() or DEFAULT_USER_DATA_PATH,
            token=(data.token or "").strip(),
        )

    def save(self, config: GitHubConfig) -> None:
        self.storage.set_item(GITHUB_CONFIG_KEY, config.model_dump_json())


def get_config_provider(settings: Settings, storage: LocalStorage | ScopedStorage) -> ConfigProvider:
    """
    Get the configuration provider for the deployment profile

    Raises:
        ValueError: If settings.config_profile is unknown
    """
    profile = (settings.config_profile or "").lower()
    if profile == "fixed":
        return FixedConfigProvider(settings)
    if profile == "override":
        return LocalOverrideConfigProvider(settings, storage)
    if profile == "user":
        return UserConfigProvider(storage)
    raise ValueError(f"Unknown CONFIG_PROFILE: {settings.config_profile!r} (expected fixed, override or user)")
