# vanhoc/api/v1/routers/github_config.py
from fastapi import APIRouter, Depends
from vanhoc.api.v1.deps import get_auth
from vanhoc.schemas.github import GitHubConfigIn
from vanhoc.services.auth_orchestrator import AuthOrchestrator

router = APIRouter(prefix="/config", tags=["config"])

@router.get("")
async def get_config(auth: AuthOrchestrator = Depends(get_auth)):
    """
    Active configuration profile and repository coordinates.

    Returns:
        dict: success + data with profile ("fixed" | "override" | "user"),
        editable, isConfigured and, when known, owner/repo/branch/userDataPath.
        The access token is never returned.
    """
    return {"success": True, "data": auth.config_summary()}

@router.post("")
async def set_config(body: GitHubConfigIn, auth: AuthOrchestrator = Depends(get_auth)):
    """
    Submit GitHub configuration (self-service deployments only).

    Required fields depend on the profile: "override" needs only a token,
    "user" needs owner, repo and token (branch defaults to "main", data path
    to "users-data"). Repository access is checked before anything is saved.
    """
    result = await auth.configure(body)
    if not result.success:
        return {"success": False, "error": result.error}
    return {"success": True, "data": auth.config_summary()}
