"""
Invoice dashboard endpoints.

Form actions (browser form posts, application/x-www-form-urlencoded):
1. POST /dashboard/invoices/create        - create, redirect to the list
2. POST /dashboard/invoices/{id}/edit     - update, redirect to the list
3. POST /dashboard/invoices/{id}/delete   - delete, return a message

Pages:
4. GET /dashboard/invoices                - invoice list (page-cached)
5. GET /dashboard/invoices/{id}           - one invoice, to prefill the edit form

The service layer returns explicit outcomes; this module is the only place
they are turned into HTTP responses.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from invoice_dashboard.auth.dependencies import AuthenticatedUser, get_authenticated_user
from invoice_dashboard.db.database import STORAGE_ERRORS
from invoice_dashboard.schemas.invoices import (
    InvoiceActionMessage,
    InvoiceActionResult,
    InvoiceDetailResponse,
    InvoiceFormData,
    InvoiceFormState,
    InvoiceListResponse,
    InvoiceNotFound,
    InvoiceRedirect,
)
from invoice_dashboard.services import invoice_service
from invoice_dashboard.services.page_cache import list_page_key, page_cache
from invoice_dashboard.utils.constants import INVOICES_PATH

logger = logging.getLogger(__name__)

router = APIRouter(prefix=INVOICES_PATH, tags=["invoices"])


def to_response(result: InvoiceActionResult) -> Response:
    """
    Interpret an invoice action outcome.

    - InvoiceRedirect      → 303 See Other to its location
    - InvoiceFormState     → 422 with field errors, or 500 when it carries
                             only a storage failure message
    - InvoiceNotFound      → 404
    - InvoiceActionMessage → 200 (ok) or 500 (storage failure)
    """
    if isinstance(result, InvoiceRedirect):
        return RedirectResponse(result.location, status_code=status.HTTP_303_SEE_OTHER)

    if isinstance(result, InvoiceFormState):
        status_code = (
            status.HTTP_422_UNPROCESSABLE_ENTITY
            if result.errors
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(
            status_code=status_code,
            content={"errors": result.errors, "message": result.message},
        )

    if isinstance(result, InvoiceNotFound):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": result.message},
        )

    if isinstance(result, InvoiceActionMessage):
        return JSONResponse(
            status_code=status.HTTP_200_OK if result.ok else status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": result.message},
        )

    raise TypeError(f"Unknown invoice action result: {type(result).__name__}")


@router.get(
    "",
    response_model=InvoiceListResponse,
    status_code=status.HTTP_200_OK,
    summary="List invoices",
    description="""
    Paginated invoice list, filtered by a free-text query.

    Responses are cached per query and page, and recomputed after
    any invoice is created, updated or deleted.
    """
)
async def list_invoices(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    query: Annotated[str, Query(max_length=200)] = "",
    page: Annotated[int, Query(ge=1)] = 1,
) -> InvoiceListResponse:
    async def load() -> InvoiceListResponse:
        invoices = await invoice_service.fetch_filtered_invoices(query=query, page=page)
        total_pages = await invoice_service.fetch_invoice_pages(query=query)
        return InvoiceListResponse(
            invoices=invoices,
            query=query,
            page=page,
            total_pages=total_pages,
        )

    try:
        return await page_cache.get_or_load(list_page_key(INVOICES_PATH, query, page), load)
    except STORAGE_ERRORS as e:
        logger.error(f"Failed to fetch invoices for user {auth_user.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "database_error", "details": "Failed to fetch invoices."}
        )


@router.post(
    "/create",
    summary="Create invoice (form action)",
    responses={303: {"description": "Created; redirect to the invoice list"}},
)
async def create_invoice_action(
    request: Request,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> Response:
    form = await request.form()
    logger.info(f"Create invoice requested by user {auth_user.user_id}")
    result = await invoice_service.create_invoice(InvoiceFormData.from_mapping(form))
    return to_response(result)


@router.get(
    "/{invoice_id}",
    response_model=InvoiceDetailResponse,
    summary="Get invoice for editing",
)
async def get_invoice(
    invoice_id: UUID,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> InvoiceDetailResponse:
    try:
        invoice = await invoice_service.fetch_invoice_by_id(str(invoice_id))
    except STORAGE_ERRORS as e:
        logger.error(f"Failed to fetch invoice {invoice_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "database_error", "details": "Failed to fetch invoice."}
        )

    if invoice is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": "Invoice not found."}
        )
    return invoice


@router.post(
    "/{invoice_id}/edit",
    summary="Update invoice (form action)",
    responses={303: {"description": "Updated; redirect to the invoice list"}},
)
async def update_invoice_action(
    invoice_id: UUID,
    request: Request,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> Response:
    form = await request.form()
    logger.info(f"Update invoice {invoice_id} requested by user {auth_user.user_id}")
    result = await invoice_service.update_invoice(str(invoice_id), InvoiceFormData.from_mapping(form))
    return to_response(result)


@router.post(
    "/{invoice_id}/delete",
    summary="Delete invoice (form action)",
)
async def delete_invoice_action(
    invoice_id: UUID,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> Response:
    logger.info(f"Delete invoice {invoice_id} requested by user {auth_user.user_id}")
    result = await invoice_service.delete_invoice(str(invoice_id))
    return to_response(result)
