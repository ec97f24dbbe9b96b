# vanhoc/api/v1/routers/auth.py
from fastapi import APIRouter, Depends
from vanhoc.api.v1.deps import get_auth, get_current_user
from vanhoc.schemas.auth import AuthUser, HistoryUpdate, LoginRequest, ProfileUpdate, SignupData
from vanhoc.services.auth_orchestrator import AuthOrchestrator
from vanhoc.services.auth_result import AuthResult
from vanhoc.services.validation import password_strength

router = APIRouter(prefix="/auth", tags=["auth"])

def _user_response(result: AuthResult, **extra) -> dict:
    if not result.success:
        return {"success": False, "error": result.error}
    return {"success": True, "data": {"user": result.user.model_dump(), **extra}}

@router.get("/state")
async def state(auth: AuthOrchestrator = Depends(get_auth)):
    """
    Current auth state, used by the front end on load.

    Returns:
        dict: success + data with status ("authenticated" | "unauthenticated"),
        isAuthenticated, isLoading, isConfigured, error (last backend error or
        null) and user (session user or null)
    """
    return {"success": True, "data": auth.snapshot()}

@router.post("/login")
async def login(payload: LoginRequest, auth: AuthOrchestrator = Depends(get_auth)):
    """
    Sign in with username and password.

    The account file is read from GitHub, the password hash compared, and the
    login time written back (best-effort). On success the user is cached
    locally so a restart keeps the session.

    Returns:
        dict: {"success": True, "data": {"user": {...}}} or
              {"success": False, "error": "<message>"}
    """
    result = await auth.login(payload.username, payload.password)
    return _user_response(result)

@router.post("/signup")
async def signup(body: SignupData, auth: AuthOrchestrator = Depends(get_auth)):
    """
    Create an account and sign in.

    Fields are validated locally first (display name, username >= 3 chars of
    letters/digits/underscore, email format, password >= 6 chars, matching
    confirmation); nothing is sent to GitHub when validation fails.

    Returns:
        dict: success + data with user and passwordStrength, or error message
    """
    if body.confirmPassword is None:
        # HTTP clients must always send the confirmation
        body = body.model_copy(update={"confirmPassword": ""})
    result = await auth.signup(body)
    return _user_response(result, passwordStrength=password_strength(body.password))

@router.post("/logout")
async def logout(auth: AuthOrchestrator = Depends(get_auth)):
    """
    Forget the user signed in on this client. Always succeeds; the session
    token is kept so the client stays the same (signed-out) session.
    """
    auth.logout()
    return {"success": True}

@router.get("/me")
async def me(user: AuthUser = Depends(get_current_user)):
    """
    Get the signed-in user (from the local session, no GitHub round trip).

    Raises:
        HTTPException (401): If nobody is signed in
    """
    return {"success": True, "data": user.model_dump()}

@router.put("/profile")
async def update_profile(body: ProfileUpdate,
                         user: AuthUser = Depends(get_current_user),
                         auth: AuthOrchestrator = Depends(get_auth)):
    """
    Replace the learner profile of the signed-in user.
    On failure the previous profile is kept.
    """
    ok = await auth.update_profile(body.profile)
    if not ok:
        return {"success": False, "error": "Không thể cập nhật hồ sơ"}
    return {"success": True, "data": auth.user.model_dump()}

@router.get("/history")
async def get_history(user: AuthUser = Depends(get_current_user),
                      auth: AuthOrchestrator = Depends(get_auth)):
    """Saved chat and exam history of the signed-in user."""
    history = await auth.load_history()
    if history is None:
        return {"success": False, "error": "Không thể tải lịch sử"}
    return {"success": True, "data": history.model_dump()}

@router.put("/history")
async def save_history(body: HistoryUpdate,
                       user: AuthUser = Depends(get_current_user),
                       auth: AuthOrchestrator = Depends(get_auth)):
    """
    Store chat and/or exam history. Each collection sent replaces the stored
    one; a collection left out is not touched.
    """
    if body.chatHistory is None and body.examHistory is None:
        return {"success": False, "error": "Không có dữ liệu lịch sử"}
    ok = await auth.save_history(chat_history=body.chatHistory, exam_history=body.examHistory)
    if not ok:
        return {"success": False, "error": "Không thể lưu lịch sử"}
    return {"success": True, "data": {"ok": True}}
