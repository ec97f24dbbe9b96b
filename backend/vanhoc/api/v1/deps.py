# vanhoc/api/v1/deps.py
import logging

import jwt
from fastapi import Depends, Header, HTTPException, Request, Response, status
from vanhoc.core.security import create_session_token, decode_session_token
from vanhoc.schemas.auth import AuthUser
from vanhoc.services.auth_orchestrator import AuthOrchestrator
from vanhoc.services.client_sessions import new_session_id

logger = logging.getLogger(__name__)

SESSION_COOKIE = "sessionToken"
SESSION_HEADER = "X-Session-Token"

def get_auth(
    request: Request,
    response: Response,
    authorization: str | None = Header(default=None),
) -> AuthOrchestrator:
    """
    FastAPI dependency returning the auth orchestrator of the calling client.

    The client is identified by its session token, taken from either:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (sessionToken) - fallback method

    A client without a valid token (first visit, expired or tampered token)
    gets a new, signed-out session. The new token is set as an HttpOnly
    cookie and also returned in the X-Session-Token response header for
    clients that send it as a Bearer token.
    """
    token = None
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    # 2) Secondly HttpOnly Cookie: sessionToken
    if not token:
        token = request.cookies.get(SESSION_COOKIE)

    session_id = None
    if token:
        try:
            session_id = decode_session_token(token)
        except jwt.InvalidTokenError as e:
            logger.info("[auth] Rejected session token: %s", e)

    if session_id is None:
        session_id = new_session_id()
        token = create_session_token(session_id)
        response.set_cookie(SESSION_COOKIE, token, httponly=True, secure=False, samesite="lax")
        response.headers[SESSION_HEADER] = token

    return request.app.state.sessions.get(session_id)

async def get_current_user(auth: AuthOrchestrator = Depends(get_auth)) -> AuthUser:
    """
    FastAPI dependency to get the user signed in on the calling client.

    Raises:
        HTTPException (401): If nobody is signed in on this client (AUTH_REQUIRED)

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthUser = Depends(get_current_user)):
            return {"username": user.username}
    """
    if not auth.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_REQUIRED")
    return auth.user
