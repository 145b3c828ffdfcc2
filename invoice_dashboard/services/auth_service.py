"""
Credential authenticator.

Forwards login form credentials to Supabase Auth and maps provider failures
to user-facing messages.

RULES:
1. Passwords are never logged
2. "Invalid credentials" gets its own message; every other recognized auth
   failure gets the generic message
3. Errors that are not authentication errors are never turned into a
   message; they are re-raised to the caller
"""

import logging
from typing import Any, Mapping, Optional, Union

from supabase import AuthApiError, AuthError, AuthInvalidCredentialsError, Client

from invoice_dashboard.schemas.auth import AuthFailureKind, AuthOutcome, LoginForm
from invoice_dashboard.utils.constants import AUTH_MESSAGES

logger = logging.getLogger(__name__)

# Supabase Auth error codes mapped to our failure kinds.
# Codes not listed here fall back to PROVIDER_ERROR.
_ERROR_CODE_KINDS = {
    "invalid_credentials": AuthFailureKind.INVALID_CREDENTIALS,
    "email_not_confirmed": AuthFailureKind.EMAIL_NOT_CONFIRMED,
    "over_request_rate_limit": AuthFailureKind.RATE_LIMITED,
}


def classify_auth_error(exc: BaseException) -> AuthFailureKind:
    """
    Map an exception raised during sign-in to an AuthFailureKind.

    - AuthInvalidCredentialsError (client-side check) → INVALID_CREDENTIALS
    - AuthApiError → looked up by its error code, else PROVIDER_ERROR
    - any other AuthError → PROVIDER_ERROR
    - anything else → UNHANDLED
    """
    if isinstance(exc, AuthInvalidCredentialsError):
        return AuthFailureKind.INVALID_CREDENTIALS
    if isinstance(exc, AuthApiError):
        return _ERROR_CODE_KINDS.get(str(exc.code or ""), AuthFailureKind.PROVIDER_ERROR)
    if isinstance(exc, AuthError):
        return AuthFailureKind.PROVIDER_ERROR
    return AuthFailureKind.UNHANDLED


def message_for(kind: AuthFailureKind) -> Optional[str]:
    """User-facing message for a failure kind (None for UNHANDLED)."""
    if kind is AuthFailureKind.UNHANDLED:
        return None
    if kind is AuthFailureKind.INVALID_CREDENTIALS:
        return AUTH_MESSAGES['INVALID_CREDENTIALS']
    return AUTH_MESSAGES['GENERIC']


async def sign_in(client: Client, form: LoginForm) -> AuthOutcome:
    """
    Exchange email/password for a session with Supabase Auth.

    Args:
        client: Supabase client (see db.client.get_auth_client)
        form: Validated login form

    Returns:
        AuthOutcome. On success it carries the session tokens. On failure it
        carries the failure kind and message; for UNHANDLED the original
        exception is kept in `error` for the caller to re-raise.
    """
    try:
        response = client.auth.sign_in_with_password(
            {"email": form.email, "password": form.password}
        )
    except Exception as e:
        kind = classify_auth_error(e)
        if kind is AuthFailureKind.UNHANDLED:
            logger.error(f"Unexpected error during sign-in: {type(e).__name__}")
        else:
            logger.warning(f"Sign-in failed: kind={kind.value}")
        return AuthOutcome(
            ok=False,
            kind=kind,
            message=message_for(kind),
            redirect_to=form.redirect_to,
            error=e if kind is AuthFailureKind.UNHANDLED else None,
        )

    session = getattr(response, "session", None)
    if session is None:
        # Provider accepted the call but opened no session (e.g. MFA pending)
        logger.warning("Sign-in returned no session")
        return AuthOutcome(
            ok=False,
            kind=AuthFailureKind.PROVIDER_ERROR,
            message=message_for(AuthFailureKind.PROVIDER_ERROR),
            redirect_to=form.redirect_to,
        )

    user = getattr(response, "user", None)
    logger.info(f"User signed in: user_id={getattr(user, 'id', None)}")

    return AuthOutcome(
        ok=True,
        access_token=session.access_token,
        redirect_to=form.redirect_to,
    )


async def authenticate(
    previous_state: Optional[str],
    form_data: Union[LoginForm, Mapping[str, Any]],
    client: Client,
) -> Optional[str]:
    """
    Login form action.

    Args:
        previous_state: Message from the previous submission (unused, kept
            so the form can thread its state through)
        form_data: LoginForm or raw key/value submission
        client: Supabase client used for sign-in

    Returns:
        None on success, otherwise the user-facing failure message.

    Raises:
        Exception: the original error, when it is not an authentication error.
    """
    form = form_data if isinstance(form_data, LoginForm) else LoginForm.from_mapping(form_data)
    outcome = await sign_in(client, form)

    if outcome.ok:
        return None
    if outcome.kind is AuthFailureKind.UNHANDLED and outcome.error is not None:
        raise outcome.error
    return outcome.message
