"""
GitHub Contents API client.

Uses a repository as a document store: files are read with
GET /repos/{owner}/{repo}/contents/{path}?ref={branch} and created/updated with
PUT on the same path. Every write is a commit.

The client never raises: failures are logged and returned as None / False.
"""
import base64
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..schemas.github import GitHubConfig

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
GITKEEP_CONTENT = "# Users data folder\nThis folder stores user account data."


@dataclass
class FileContent:
    """Decoded file text plus the revision tag (blob SHA) needed to update it."""
    content: str
    sha: str


class GitHubContentClient:
    """
    Thin async wrapper over the Contents API.

    Parameters:
    - api_url: API base URL (GitHub Enterprise can point elsewhere)
    - timeout: Request timeout in seconds
    - transport: Optional httpx transport (tests inject httpx.MockTransport)
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _headers(self, config: GitHubConfig) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {config.token}",
            "Accept": GITHUB_ACCEPT,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            timeout=self.timeout,
            transport=self.transport,
        )

    def _contents_url(self, path: str, config: GitHubConfig) -> str:
        return f"/repos/{config.owner}/{config.repo}/contents/{path}"

    async def read(self, path: str, config: GitHubConfig) -> Optional[FileContent]:
        """
        Read a file at the configured branch.

        Returns:
        - FileContent on success
        - None if the file does not exist (404) or on any failure
        """
        try:
            async with self._client() as client:
                resp = await client.get(
                    self._contents_url(path, config),
                    params={"ref": config.branch},
                    headers=self._headers(config),
                )
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            data = resp.json()
            content = base64.b64decode(data["content"]).decode("utf-8")
            return FileContent(content=content, sha=data["sha"])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.error("[github] Error getting %s: %s", path, e)
            return None

    async def write(
        self,
        path: str,
        content: str,
        message: str,
        config: GitHubConfig,
        sha: Optional[str] = None,
    ) -> bool:
        """
        Create or update a file with a commit.

        Parameters:
        - sha: Revision tag of the file being replaced. Omit to create a new file.
          GitHub rejects the write if the tag is stale; no retry is attempted.

        Returns:
        - True if GitHub accepted the commit
        """
        body = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": config.branch,
        }
        if sha:
            body["sha"] = sha

        try:
            async with self._client() as client:
                resp = await client.put(
                    self._contents_url(path, config),
                    json=body,
                    headers=self._headers(config),
                )
        except httpx.HTTPError as e:
            logger.error("[github] Error saving %s: %s", path, e)
            return False

        if not resp.is_success:
            logger.warning("[github] PUT %s rejected: HTTP %s", path, resp.status_code)
        return resp.is_success

    async def verify_repository(self, config: GitHubConfig) -> bool:
        """Check that the repository exists and the token can see it."""
        try:
            async with self._client() as client:
                resp = await client.get(
                    f"/repos/{config.owner}/{config.repo}",
                    headers=self._headers(config),
                )
            return resp.is_success
        except httpx.HTTPError as e:
            logger.error("[github] Error verifying %s/%s: %s", config.owner, config.repo, e)
            return False

    async def ensure_directory(self, config: GitHubConfig) -> bool:
        """
        Make sure the user data folder exists.
        Git has no empty folders, so a .gitkeep placeholder is committed when missing.
        """
        try:
            async with self._client() as client:
                resp = await client.get(
                    self._contents_url(config.userDataPath, config),
                    params={"ref": config.branch},
                    headers=self._headers(config),
                )
        except httpx.HTTPError as e:
            logger.error("[github] Error listing %s: %s", config.userDataPath, e)
            return False

        if resp.status_code == 404:
            logger.info("[github] Creating %s/.gitkeep", config.userDataPath)
            return await self.write(
                f"{config.userDataPath}/.gitkeep",
                GITKEEP_CONTENT,
                f"Initialize {config.userDataPath} folder",
                config,
            )
        return resp.is_success
