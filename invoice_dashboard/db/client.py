"""
Supabase client factory for credential sign-in.

Invoice data lives in PostgreSQL and is reached through
`invoice_dashboard.db.database`. Supabase is used ONLY as the external
authentication provider:

1. The client is created with the publishable key (never the service_role key)
2. It is used to exchange email/password for a session
3. Session tokens are verified separately (see auth/dependencies.py)
"""

import logging

from invoice_dashboard.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_auth_client() -> Client:
    """
    Create a Supabase client for signing users in.

    A new client is created per request so that sessions obtained by one
    user are never shared with another.

    Returns:
        A Supabase client configured with the publishable key.

    Example:
        >>> client = get_auth_client()
        >>> client.auth.sign_in_with_password({"email": email, "password": password})
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    logger.debug("Created Supabase auth client")

    return client
