import base64
import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vanhoc.config import Settings
from vanhoc.core.config_providers import FixedConfigProvider
from vanhoc.core.local_storage import LocalStorage
from vanhoc.main import create_app
from vanhoc.schemas.github import GitHubConfig
from vanhoc.services.account_store import AccountStore
from vanhoc.services.auth_orchestrator import AuthOrchestrator
from vanhoc.services.github_contents import GitHubContentClient
from vanhoc.services.session_cache import SessionCache


OWNER = "vanhoc"
REPO = "accounts"
TOKEN = "test-token"


class FakeGitHub:
    """
    In-memory stand-in for the GitHub Contents API, used as an httpx.MockTransport handler.

    Mirrors the behaviour the service relies on:
    - GET of a missing file -> 404
    - PUT without sha on an existing file -> 422
    - PUT with a stale sha -> 409
    """

    def __init__(self, owner: str = OWNER, repo: str = REPO):
        self.prefix = f"/repos/{owner}/{repo}"
        self.files: dict[str, tuple[str, str]] = {}  # path -> (text, sha)
        self.requests: list[httpx.Request] = []
        self.commits: list[str] = []
        self.repo_exists = True
        self.fail_writes = False
        self._next_sha = 0

    def _sha(self) -> str:
        self._next_sha += 1
        return f"sha{self._next_sha:04d}"

    def put_file(self, path: str, text: str) -> str:
        sha = self._sha()
        self.files[path] = (text, sha)
        return sha

    def json_file(self, path: str) -> dict:
        return json.loads(self.files[path][0])

    @property
    def writes(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "PUT"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == self.prefix and request.method == "GET":
            if self.repo_exists:
                return httpx.Response(200, json={"full_name": self.prefix[len("/repos/"):]})
            return httpx.Response(404, json={"message": "Not Found"})

        contents = self.prefix + "/contents/"
        if not path.startswith(contents):
            return httpx.Response(404, json={"message": "Not Found"})
        file_path = path[len(contents):]

        if request.method == "GET":
            if file_path in self.files:
                text, sha = self.files[file_path]
                # GitHub wraps base64 content at 60 chars with newlines
                encoded = base64.encodebytes(text.encode("utf-8")).decode("ascii")
                return httpx.Response(200, json={"content": encoded, "encoding": "base64", "sha": sha})
            children = [p for p in self.files if p.startswith(file_path + "/")]
            if children:
                return httpx.Response(200, json=[{"path": p, "type": "file"} for p in children])
            return httpx.Response(404, json={"message": "Not Found"})

        if request.method == "PUT":
            if self.fail_writes:
                return httpx.Response(500, json={"message": "Server Error"})
            body = json.loads(request.content)
            existing = self.files.get(file_path)
            sha = body.get("sha")
            if existing and not sha:
                return httpx.Response(422, json={"message": "\"sha\" wasn't supplied."})
            if existing and sha != existing[1]:
                return httpx.Response(409, json={"message": "does not match"})
            if not existing and sha:
                return httpx.Response(422, json={"message": "sha for a file that does not exist"})
            text = base64.b64decode(body["content"]).decode("utf-8")
            new_sha = self.put_file(file_path, text)
            self.commits.append(body["message"])
            return httpx.Response(200 if existing else 201, json={"content": {"path": file_path, "sha": new_sha}})

        return httpx.Response(405)


class FakeClock:
    """Deterministic epoch-milliseconds clock."""

    def __init__(self, now: int = 1_718_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> None:
        self.now += ms


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def github_config():
    return GitHubConfig(owner=OWNER, repo=REPO, token=TOKEN)


@pytest.fixture
def content_client(fake_github):
    return GitHubContentClient(transport=httpx.MockTransport(fake_github.handler))


@pytest.fixture
def storage():
    """In-memory local storage (nothing written to disk)."""
    return LocalStorage()


@pytest.fixture
def session(storage):
    return SessionCache(storage)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(content_client, session, clock):
    return AccountStore(content_client, session, clock=clock)


@pytest.fixture
def test_settings():
    return Settings(
        github_token=TOKEN,
        github_owner=OWNER,
        github_repo=REPO,
        github_branch="main",
        github_user_data_path="users-data",
        config_profile="fixed",
        password_hasher="rolling",
    )


@pytest.fixture
def auth(store, session, test_settings):
    orchestrator = AuthOrchestrator(store, session, FixedConfigProvider(test_settings))
    orchestrator.initialize()
    return orchestrator


@pytest.fixture
def app(test_settings, storage, fake_github):
    """Fresh app backed by the fake GitHub API."""
    return create_app(test_settings, storage=storage, transport=httpx.MockTransport(fake_github.handler))


@pytest_asyncio.fixture
async def client(app):
    """
    Provide an HTTPX AsyncClient bound to the app.
    The client keeps its session cookie between requests, like a browser.
    """
    # ASGITransport does not run startup hooks; create_app has already wired everything
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def other_client(app):
    """A second, independent client (own cookie jar) on the same app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def signup_payload():
    """Factory for signup request bodies."""

    def _payload(username: str = "hoc_sinh1", password: str = "abcdef", **overrides) -> dict:
        body = {
            "username": username,
            "email": "a@b.com",
            "password": password,
            "confirmPassword": password,
            "displayName": "Nguyen Van A",
        }
        body.update(overrides)
        return body

    return _payload
