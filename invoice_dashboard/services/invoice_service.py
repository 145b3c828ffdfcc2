"""
Invoice form handler.

Turns raw invoice form submissions into writes against the `invoices` table.

RULES:
1. Validation is pure and runs before any storage call; a failing form never
   touches the database
2. Amounts are stored as integer cents (amount × 100)
3. `date` is stamped once at creation and never updated
4. Each action performs at most one write and is never retried
5. Storage failures become a generic message; details go to the log only
6. After a successful write the invoice list page is revalidated
"""

import logging
import math
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import ValidationError

from invoice_dashboard.db import database
from invoice_dashboard.db.database import STORAGE_ERRORS
from invoice_dashboard.schemas.invoices import (
    InvoiceActionMessage,
    InvoiceDetailResponse,
    InvoiceForm,
    InvoiceFormData,
    InvoiceFormState,
    InvoiceListItem,
    InvoiceNotFound,
    InvoiceRedirect,
)
from invoice_dashboard.services.page_cache import revalidate_path
from invoice_dashboard.utils.constants import (
    INVOICE_MESSAGES,
    INVOICES_PATH,
    ITEMS_PER_PAGE,
)

logger = logging.getLogger(__name__)


def _today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


def validate_invoice_form(
    form_data: InvoiceFormData,
    failure_message: str = INVOICE_MESSAGES['CREATE_MISSING_FIELDS'],
) -> Union[InvoiceForm, InvoiceFormState]:
    """
    Validate a raw invoice form.

    All three fields are checked together, so the returned state lists every
    failing field, not just the first one.

    Args:
        form_data: Raw form submission
        failure_message: Overall message to attach when validation fails

    Returns:
        InvoiceForm on success, or InvoiceFormState with per-field errors
        keyed by form field name (customerId, amount, status).
    """
    try:
        return InvoiceForm.model_validate(form_data.as_payload())
    except ValidationError as exc:
        errors: dict[str, List[str]] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "form"
            errors.setdefault(field, []).append(error["msg"])
        return InvoiceFormState(errors=errors, message=failure_message)


async def create_invoice(
    form_data: InvoiceFormData,
) -> Union[InvoiceRedirect, InvoiceFormState]:
    """
    Create an invoice from a form submission.

    Flow:
    1. Validate; on failure return field errors without touching storage
    2. Convert amount to cents and stamp today's date
    3. INSERT one row
    4. Revalidate the invoice list and redirect to it

    Returns:
        InvoiceRedirect on success, InvoiceFormState on validation or
        storage failure. Never raises for storage errors.
    """
    validated = validate_invoice_form(form_data, INVOICE_MESSAGES['CREATE_MISSING_FIELDS'])
    if isinstance(validated, InvoiceFormState):
        logger.info(f"Invoice create rejected: invalid fields {sorted(validated.errors)}")
        return validated

    invoice_date = _today()

    try:
        await database.execute(
            """
            INSERT INTO invoices (customer_id, amount, status, date)
            VALUES ($1, $2, $3, $4)
            """,
            validated.customer_id,
            validated.amount_in_cents,
            validated.status.value,
            invoice_date,
        )
    except STORAGE_ERRORS as e:
        logger.error(f"Failed to create invoice for customer {validated.customer_id}: {e}", exc_info=True)
        return InvoiceFormState(message=INVOICE_MESSAGES['CREATE_DATABASE_ERROR'])

    logger.info(
        f"Invoice created: customer_id={validated.customer_id}, "
        f"status={validated.status.value}, date={invoice_date.isoformat()}"
    )

    revalidate_path(INVOICES_PATH)
    return InvoiceRedirect(location=INVOICES_PATH)


async def update_invoice(
    invoice_id: str,
    form_data: InvoiceFormData,
) -> Union[InvoiceRedirect, InvoiceFormState, InvoiceNotFound]:
    """
    Update customer, amount and status of an existing invoice.

    `id` and `date` are never written. An id with no matching row yields
    InvoiceNotFound and leaves the cache untouched.

    Returns:
        InvoiceRedirect on success, InvoiceNotFound for a missing id,
        InvoiceFormState on validation or storage failure.
    """
    validated = validate_invoice_form(form_data, INVOICE_MESSAGES['UPDATE_MISSING_FIELDS'])
    if isinstance(validated, InvoiceFormState):
        logger.info(f"Invoice {invoice_id} update rejected: invalid fields {sorted(validated.errors)}")
        return validated

    try:
        row = await database.fetch_one(
            """
            UPDATE invoices
            SET customer_id = $2, amount = $3, status = $4
            WHERE id = $1
            RETURNING id
            """,
            invoice_id,
            validated.customer_id,
            validated.amount_in_cents,
            validated.status.value,
        )
    except STORAGE_ERRORS as e:
        logger.error(f"Failed to update invoice {invoice_id}: {e}", exc_info=True)
        return InvoiceFormState(message=INVOICE_MESSAGES['UPDATE_DATABASE_ERROR'])

    if row is None:
        logger.warning(f"Invoice {invoice_id} not found for update")
        return InvoiceNotFound(message=INVOICE_MESSAGES['NOT_FOUND'])

    logger.info(f"Invoice {invoice_id} updated: status={validated.status.value}")

    revalidate_path(INVOICES_PATH)
    return InvoiceRedirect(location=INVOICES_PATH)


async def delete_invoice(invoice_id: str) -> InvoiceActionMessage:
    """
    Delete an invoice by id.

    Deleting is idempotent: an id with no row (including a second delete of
    the same id) returns the same confirmation as a real delete.

    Returns:
        InvoiceActionMessage with ok=True, or ok=False and a generic
        message when storage fails. Never raises for storage errors.
    """
    try:
        status_tag = await database.execute("DELETE FROM invoices WHERE id = $1", invoice_id)
    except STORAGE_ERRORS as e:
        logger.error(f"Failed to delete invoice {invoice_id}: {e}", exc_info=True)
        return InvoiceActionMessage(message=INVOICE_MESSAGES['DELETE_DATABASE_ERROR'], ok=False)

    if status_tag == "DELETE 0":
        logger.info(f"Invoice {invoice_id} already absent; delete is a no-op")
    else:
        logger.info(f"Invoice {invoice_id} deleted")

    revalidate_path(INVOICES_PATH)
    return InvoiceActionMessage(message=INVOICE_MESSAGES['DELETED'])


# --- Read side (invoice list and edit form) ---

_FILTER_CLAUSE = """
    FROM invoices
    JOIN customers ON invoices.customer_id = customers.id
    WHERE
        customers.name ILIKE $1 OR
        customers.email ILIKE $1 OR
        invoices.amount::text ILIKE $1 OR
        invoices.date::text ILIKE $1 OR
        invoices.status ILIKE $1
"""


async def fetch_filtered_invoices(query: str = "", page: int = 1) -> List[InvoiceListItem]:
    """
    Fetch one page of invoices matching `query`, newest first.

    The query is matched case-insensitively against customer name and email,
    amount, date and status. Pages hold ITEMS_PER_PAGE rows; page numbers
    below 1 are treated as 1.
    """
    page = max(page, 1)
    offset = (page - 1) * ITEMS_PER_PAGE

    rows = await database.fetch_all(
        f"""
        SELECT
            invoices.id::text AS id,
            invoices.customer_id::text AS customer_id,
            invoices.amount,
            invoices.date,
            invoices.status,
            customers.name,
            customers.email,
            customers.image_url
        {_FILTER_CLAUSE}
        ORDER BY invoices.date DESC
        LIMIT $2 OFFSET $3
        """,
        f"%{query}%",
        ITEMS_PER_PAGE,
        offset,
    )

    logger.debug(f"Fetched {len(rows)} invoices (query={query!r}, page={page})")
    return [InvoiceListItem(**row) for row in rows]


async def fetch_invoice_pages(query: str = "") -> int:
    """Number of list pages for `query`."""
    row = await database.fetch_one(f"SELECT COUNT(*) AS count {_FILTER_CLAUSE}", f"%{query}%")
    count = int(row["count"]) if row else 0
    return math.ceil(count / ITEMS_PER_PAGE)


async def fetch_invoice_by_id(invoice_id: str) -> Optional[InvoiceDetailResponse]:
    """
    Fetch one invoice for the edit form, with amount converted back to major units.

    Returns:
        The invoice, or None if no row has this id.
    """
    row = await database.fetch_one(
        """
        SELECT id::text AS id, customer_id::text AS customer_id, amount, status
        FROM invoices
        WHERE id = $1
        """,
        invoice_id,
    )

    if row is None:
        logger.warning(f"Invoice {invoice_id} not found")
        return None

    return InvoiceDetailResponse(
        id=row["id"],
        customer_id=row["customer_id"],
        amount=(Decimal(row["amount"]) / 100).quantize(Decimal("0.01")),
        status=row["status"],
    )
