import logging
import secrets

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse, JSONResponse

from config.constants import (
    TOKEN_COOKIE_NAME,
    TOKEN_COOKIE_MAX_AGE,
    OAUTH_STATE_COOKIE_NAME,
    OAUTH_STATE_MAX_AGE,
)
from utils.context import AppContext, get_context
from utils.errors import Unauthorized
from utils.security import get_current_user
from utils.serializers import serialize_doc

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


# ======================
# Google sign-in
# ======================

@router.get("/auth/external/start")
async def auth_start(ctx: AppContext = Depends(get_context)):
    state = secrets.token_urlsafe(24)

    response = RedirectResponse(ctx.oauth.authorization_url(state), status_code=302)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE_NAME,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        secure=ctx.cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/auth/external/callback")
async def auth_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    ctx: AppContext = Depends(get_context),
):
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE_NAME)
    if not code or not state or not expected_state:
        raise Unauthorized()
    if not secrets.compare_digest(state.encode(), expected_state.encode()):
        raise Unauthorized()

    profile = await run_in_threadpool(ctx.oauth.fetch_profile, code)
    user = await ctx.users.upsert_from_profile(profile)

    token = ctx.tokens.issue(user["_id"], role=user.get("role"))
    logger.info("LOGIN user=%s role=%s", user["_id"], user.get("role"))

    response = RedirectResponse(f"{ctx.frontend_url}/profile", status_code=302)
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        max_age=TOKEN_COOKIE_MAX_AGE,
        httponly=True,
        secure=ctx.cookie_secure,
        samesite="lax",
    )
    response.delete_cookie(OAUTH_STATE_COOKIE_NAME)
    return response


# ======================
# Logout
# ======================

@router.post("/logout")
async def logout(ctx: AppContext = Depends(get_context)):
    response = JSONResponse({"message": "Logged out"})
    response.delete_cookie(
        TOKEN_COOKIE_NAME,
        httponly=True,
        secure=ctx.cookie_secure,
        samesite="lax",
    )
    return response


# ======================
# Current User
# ======================

@router.get("/profile")
async def profile(user=Depends(get_current_user)):
    return {"user": serialize_doc(user)}
