"""
Service layer for the invoice dashboard backend.

Services are the glue between routes (HTTP layer) and the database,
the page cache and the Supabase Auth provider. They return explicit
outcomes instead of raising for expected failures.
"""

from .auth_service import authenticate, classify_auth_error, message_for, sign_in
from .invoice_service import (
    create_invoice,
    delete_invoice,
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    fetch_invoice_pages,
    update_invoice,
    validate_invoice_form,
)
from .page_cache import PageCache, page_cache, revalidate_path

__all__ = [
    "authenticate",
    "classify_auth_error",
    "message_for",
    "sign_in",
    "create_invoice",
    "update_invoice",
    "delete_invoice",
    "validate_invoice_form",
    "fetch_filtered_invoices",
    "fetch_invoice_pages",
    "fetch_invoice_by_id",
    "PageCache",
    "page_cache",
    "revalidate_path",
]
