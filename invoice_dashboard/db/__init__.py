"""
Database access layer for the invoice dashboard backend.

All SQL MUST:
- Use positional parameters ($1, $2, ...) for every value
- Touch only the `invoices` and `customers` tables
- Perform at most one write per request

Includes:
- asyncpg pool management and query helpers (database.py)
- Supabase client factory used for credential sign-in (client.py)
"""

from .client import get_auth_client
from .database import STORAGE_ERRORS, DatabaseUnavailableError

__all__ = ["get_auth_client", "STORAGE_ERRORS", "DatabaseUnavailableError"]
