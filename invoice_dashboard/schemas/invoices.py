"""
Pydantic schemas for invoice form actions.

These models define the strict contracts between the HTTP layer and the
invoice form handler:

- InvoiceFormData: the raw form submission, built explicitly at the boundary
- InvoiceForm: the validated, typed form (amount still in major units)
- InvoiceRedirect / InvoiceFormState / InvoiceNotFound / InvoiceActionMessage:
  the explicit outcomes of an action, interpreted by the route layer
"""

from dataclasses import dataclass
import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from invoice_dashboard.utils.constants import FIELD_ERROR_MESSAGES, MAX_AMOUNT_CENTS


def _to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _cents_in_range(amount: Decimal) -> bool:
    # quantize() fails past 28 digits, so bound the exponent first.
    if amount.adjusted() >= 10:
        return False
    return 0 < _to_cents(amount) <= MAX_AMOUNT_CENTS


class InvoiceStatus(str, Enum):
    """Lifecycle state of an invoice."""
    PENDING = "pending"
    PAID = "paid"


# --- Form input ---

@dataclass(frozen=True)
class InvoiceFormData:
    """
    Raw invoice form submission.

    Every field is the submitted value, or None when the client omitted it.
    Nothing here is validated yet; see validate_invoice_form().
    """
    customer_id: Optional[Any] = None
    amount: Optional[Any] = None
    status: Optional[Any] = None

    @classmethod
    def from_mapping(cls, form: Mapping[str, Any]) -> "InvoiceFormData":
        """Build the record from a key/value form using the HTML field names."""
        return cls(
            customer_id=form.get("customerId"),
            amount=form.get("amount"),
            status=form.get("status"),
        )

    def as_payload(self) -> Dict[str, Any]:
        return {
            "customerId": self.customer_id,
            "amount": self.amount,
            "status": self.status,
        }


class InvoiceForm(BaseModel):
    """
    Validated invoice form.

    INVARIANTS:
    - customer_id is a non-blank string
    - amount is a finite number strictly greater than 0 whose cents fit
      in the INT amount column (at most MAX_AMOUNT_CENTS)
    - status is one of InvoiceStatus

    Each field validator raises the user-facing message for that field, so
    ValidationError.errors() can be handed back to the form as-is.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    customer_id: str = Field(..., alias="customerId", description="Customer UUID")
    amount: Decimal = Field(..., description="Amount in major units (e.g. dollars)")
    status: InvoiceStatus = Field(..., description="pending or paid")

    @field_validator("customer_id", mode="before")
    @classmethod
    def validate_customer_id(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise PydanticCustomError("customer_required", FIELD_ERROR_MESSAGES["customerId"])
        return value.strip()

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> Decimal:
        # Absent or blank amounts coerce to 0 and fail the > 0 rule below.
        if value is None or isinstance(value, bool):
            value = "0"
        if not isinstance(value, (str, int, float, Decimal)):
            raise PydanticCustomError("amount_invalid", FIELD_ERROR_MESSAGES["amount"])
        try:
            amount = Decimal(str(value).strip() or "0")
        except InvalidOperation:
            raise PydanticCustomError("amount_invalid", FIELD_ERROR_MESSAGES["amount"])
        if not amount.is_finite() or amount <= 0 or not _cents_in_range(amount):
            raise PydanticCustomError("amount_not_positive", FIELD_ERROR_MESSAGES["amount"])
        return amount

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, value: Any) -> InvoiceStatus:
        if not isinstance(value, str) or value not in {s.value for s in InvoiceStatus}:
            raise PydanticCustomError("status_invalid", FIELD_ERROR_MESSAGES["status"])
        return InvoiceStatus(value)

    @property
    def amount_in_cents(self) -> int:
        """Amount in minor units, rounded half-up to a whole cent."""
        return _to_cents(self.amount)


# --- Action outcomes ---

class InvoiceRedirect(BaseModel):
    """Successful create/update: the caller should navigate to `location`."""
    kind: Literal["redirect"] = "redirect"
    location: str = Field(..., examples=["/dashboard/invoices"])


class InvoiceFormState(BaseModel):
    """
    Failed create/update, re-rendered by the form.

    `errors` maps form field names (customerId, amount, status) to messages.
    It is empty when the failure came from storage rather than validation.
    """
    kind: Literal["form_error"] = "form_error"
    errors: Dict[str, List[str]] = Field(default_factory=dict)
    message: Optional[str] = None


class InvoiceNotFound(BaseModel):
    """Update targeted an id that has no row."""
    kind: Literal["not_found"] = "not_found"
    message: str


class InvoiceActionMessage(BaseModel):
    """Delete outcome: a plain confirmation or error message."""
    kind: Literal["message"] = "message"
    message: str
    ok: bool = True


InvoiceActionResult = Union[InvoiceRedirect, InvoiceFormState, InvoiceNotFound, InvoiceActionMessage]


# --- Read models ---

class InvoiceListItem(BaseModel):
    """One row of the invoice list page (invoice joined with its customer)."""
    id: str
    customer_id: str
    name: str
    email: str
    image_url: Optional[str] = None
    date: datetime.date
    amount: int = Field(..., description="Amount in cents")
    status: InvoiceStatus


class InvoiceListResponse(BaseModel):
    """Response for GET /dashboard/invoices."""
    invoices: List[InvoiceListItem]
    query: str = ""
    page: int = 1
    total_pages: int = 0


class InvoiceDetailResponse(BaseModel):
    """Response for GET /dashboard/invoices/{id}, used to prefill the edit form."""
    id: str
    customer_id: str
    amount: Decimal = Field(..., description="Amount in major units (e.g. dollars), two decimal places")
    status: InvoiceStatus
