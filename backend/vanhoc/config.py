# vanhoc/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "VanHoc10 Account API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # GitHub Contents API Settings (account storage)
    # Token is injected at deploy time; owner/repo/branch/path are fixed per deployment
    github_token: str | None = os.getenv("GITHUB_TOKEN")
    github_owner: str = os.getenv("GITHUB_OWNER", "")
    github_repo: str = os.getenv("GITHUB_REPO", "")
    github_branch: str = os.getenv("GITHUB_BRANCH", "main")
    github_user_data_path: str = os.getenv("GITHUB_USER_DATA_PATH", "users-data")
    github_api_url: str = os.getenv("GITHUB_API_URL", "https://api.github.com")
    github_timeout: float = float(os.getenv("GITHUB_TIMEOUT", "30"))

    # Configuration profile: "fixed" (env token only), "override" (env token, user may
    # replace it) or "user" (owner/repo/branch/path/token all entered by the user)
    config_profile: str = os.getenv("CONFIG_PROFILE", "override").lower()

    # Local persistence (session user, user-entered GitHub config/token)
    local_storage_path: str = os.getenv("LOCAL_STORAGE_PATH", ".vanhoc10/local_storage.json")

    # Password hashing scheme: "rolling" (compatible with existing accounts, NOT secure) or "argon2"
    password_hasher: str = os.getenv("PASSWORD_HASHER", "rolling").lower()

settings = Settings()  # Instantiate configuration
