"""
Auth endpoints.

- POST /login  - credential sign-in from the login form
- POST /logout - clear the session cookie

On success the Supabase access token is stored in an HttpOnly session cookie
and the browser is redirected. Recognized sign-in failures return a message
for the form; anything else propagates to the framework.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from supabase import Client

from invoice_dashboard.config import settings
from invoice_dashboard.db.client import get_auth_client
from invoice_dashboard.schemas.auth import AuthFailureKind, LoginErrorResponse, LoginForm
from invoice_dashboard.services import auth_service
from invoice_dashboard.utils.constants import LOGIN_PATH

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/login",
    summary="Sign in with email and password (form action)",
    responses={
        303: {"description": "Signed in; redirect to redirectTo"},
        401: {"model": LoginErrorResponse, "description": "Sign-in rejected"},
    },
)
async def login(
    request: Request,
    client: Annotated[Client, Depends(get_auth_client)],
) -> Response:
    form = LoginForm.from_mapping(await request.form())
    outcome = await auth_service.sign_in(client, form)

    if outcome.kind is AuthFailureKind.UNHANDLED and outcome.error is not None:
        raise outcome.error

    if not outcome.ok or outcome.access_token is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=LoginErrorResponse(message=outcome.message or "").model_dump(),
        )

    response = RedirectResponse(outcome.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=outcome.access_token,
        httponly=True,
        secure=settings.is_production(),
        samesite="lax",
    )
    return response


@router.post("/logout", summary="Sign out")
async def logout() -> Response:
    response = RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
