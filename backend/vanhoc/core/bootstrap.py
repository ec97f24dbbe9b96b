# vanhoc/core/bootstrap.py
"""
Bootstrap module for application initialization.
Handles startup tasks such as creating the user data folder in the GitHub
repository on first run.
"""
import logging

from vanhoc.core.config_providers import ConfigProvider
from vanhoc.services.github_contents import GitHubContentClient

logger = logging.getLogger("uvicorn.error")

async def ensure_user_data_folder(client: GitHubContentClient, config_provider: ConfigProvider) -> bool:
    """
    Make sure {userDataPath}/ exists in the deployment's repository.
    Only takes effect when a deployment token is configured; otherwise the
    folder is created later, when a client submits its configuration.
    """
    config = config_provider.resolve()
    if config is None or not config.token:
        logger.warning("[bootstrap] GitHub not configured (profile=%s) -> skip users folder check.",
                       config_provider.name)
        return False

    ok = await client.ensure_directory(config)
    if ok:
        logger.info("[bootstrap] Users folder ready -> %s/%s:%s/%s",
                    config.owner, config.repo, config.branch, config.userDataPath)
    else:
        logger.warning("[bootstrap] Could not verify or create users folder %s", config.userDataPath)
    return ok
