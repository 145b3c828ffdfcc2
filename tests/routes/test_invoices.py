"""
Tests for the invoice dashboard endpoints.

- Happy path: form post → 303 redirect to the invoice list
- Failure path: invalid form → 422 with field errors
- Failure path: storage error → 500 with a generic message
- Failure path: missing session → 401
- Invoice list is page-cached and revalidated after writes
"""

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from invoice_dashboard.auth.dependencies import AuthenticatedUser, get_authenticated_user
from invoice_dashboard.main import app
from invoice_dashboard.schemas.invoices import InvoiceListItem

INVOICE_ID = "3958dc9e-787f-4377-85e9-fec4b6a6442a"
CUSTOMER_ID = "d6e15727-9fe1-4961-8c5b-ea44a9bd81aa"


@pytest.fixture
def client():
    """Create test client for FastAPI app."""
    return TestClient(app)


async def mock_authenticated_user() -> AuthenticatedUser:
    return AuthenticatedUser(user_id="test-user-uuid-123", access_token="fake-test-token")


@pytest.fixture
def authenticated():
    """Override the session dependency to return a test user."""
    app.dependency_overrides[get_authenticated_user] = mock_authenticated_user
    yield
    app.dependency_overrides.clear()


class TestCreateInvoiceAction:
    """POST /dashboard/invoices/create"""

    def test_valid_form_redirects_to_list(self, client, authenticated, mock_db):
        response = client.post(
            "/dashboard/invoices/create",
            data={"customerId": CUSTOMER_ID, "amount": "42.50", "status": "pending"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard/invoices"
        assert mock_db["execute"].call_args.args[1:4] == (CUSTOMER_ID, 4250, "pending")

    def test_invalid_form_returns_field_errors(self, client, authenticated, mock_db):
        response = client.post(
            "/dashboard/invoices/create",
            data={"customerId": "", "amount": "-5", "status": "paid"},
            follow_redirects=False,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Missing Fields. Failed to Create Invoice."
        assert set(body["errors"]) == {"customerId", "amount"}
        mock_db["execute"].assert_not_awaited()

    def test_storage_error_returns_generic_message(self, client, authenticated, mock_db):
        mock_db["execute"].side_effect = OSError("connection refused")

        response = client.post(
            "/dashboard/invoices/create",
            data={"customerId": CUSTOMER_ID, "amount": "10", "status": "paid"},
            follow_redirects=False,
        )

        assert response.status_code == 500
        assert response.json() == {
            "errors": {},
            "message": "Database Error: Failed to Create Invoice.",
        }
        assert "connection refused" not in response.text

    def test_missing_session_returns_401(self, client, mock_db):
        response = client.post(
            "/dashboard/invoices/create",
            data={"customerId": CUSTOMER_ID, "amount": "10", "status": "paid"},
        )

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "unauthorized"
        mock_db["execute"].assert_not_awaited()


class TestUpdateInvoiceAction:
    """POST /dashboard/invoices/{id}/edit"""

    def test_valid_form_redirects_to_list(self, client, authenticated, mock_db):
        mock_db["fetch_one"].return_value = {"id": INVOICE_ID}

        response = client.post(
            f"/dashboard/invoices/{INVOICE_ID}/edit",
            data={"customerId": CUSTOMER_ID, "amount": "7", "status": "paid"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard/invoices"
        assert mock_db["fetch_one"].call_args.args[1:] == (INVOICE_ID, CUSTOMER_ID, 700, "paid")

    def test_unknown_invoice_returns_404(self, client, authenticated, mock_db):
        mock_db["fetch_one"].return_value = None

        response = client.post(
            f"/dashboard/invoices/{INVOICE_ID}/edit",
            data={"customerId": CUSTOMER_ID, "amount": "7", "status": "paid"},
            follow_redirects=False,
        )

        assert response.status_code == 404
        assert response.json() == {"message": "Invoice not found."}

    def test_malformed_id_returns_422(self, client, authenticated, mock_db):
        response = client.post(
            "/dashboard/invoices/not-a-uuid/edit",
            data={"customerId": CUSTOMER_ID, "amount": "7", "status": "paid"},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
        mock_db["fetch_one"].assert_not_awaited()


class TestDeleteInvoiceAction:
    """POST /dashboard/invoices/{id}/delete"""

    def test_delete_returns_confirmation(self, client, authenticated, mock_db):
        mock_db["execute"].return_value = "DELETE 1"

        response = client.post(f"/dashboard/invoices/{INVOICE_ID}/delete")

        assert response.status_code == 200
        assert response.json() == {"message": "Deleted Invoice."}

    def test_delete_twice_succeeds(self, client, authenticated, mock_db):
        mock_db["execute"].side_effect = ["DELETE 1", "DELETE 0"]

        first = client.post(f"/dashboard/invoices/{INVOICE_ID}/delete")
        second = client.post(f"/dashboard/invoices/{INVOICE_ID}/delete")

        assert first.status_code == second.status_code == 200

    def test_storage_error_returns_500_message(self, client, authenticated, mock_db):
        mock_db["execute"].side_effect = OSError("connection reset")

        response = client.post(f"/dashboard/invoices/{INVOICE_ID}/delete")

        assert response.status_code == 500
        assert response.json() == {"message": "Database Error: Failed to Delete Invoice."}


class TestInvoicePages:
    """GET /dashboard/invoices and GET /dashboard/invoices/{id}"""

    @pytest.fixture
    def mock_list_queries(self):
        item = InvoiceListItem(
            id=INVOICE_ID,
            customer_id=CUSTOMER_ID,
            name="Lee Robinson",
            email="lee@robinson.com",
            date=date(2023, 6, 27),
            amount=20348,
            status="pending",
        )
        with patch(
            "invoice_dashboard.services.invoice_service.fetch_filtered_invoices",
            new_callable=AsyncMock,
            return_value=[item],
        ) as fetch_invoices, patch(
            "invoice_dashboard.services.invoice_service.fetch_invoice_pages",
            new_callable=AsyncMock,
            return_value=1,
        ) as fetch_pages:
            yield fetch_invoices, fetch_pages

    def test_list_is_cached_until_a_write_revalidates(
        self, client, authenticated, mock_db, mock_list_queries
    ):
        fetch_invoices, _ = mock_list_queries

        first = client.get("/dashboard/invoices")
        second = client.get("/dashboard/invoices")

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json()
        assert first.json()["invoices"][0]["amount"] == 20348
        assert fetch_invoices.await_count == 1

        mock_db["execute"].return_value = "DELETE 1"
        client.post(f"/dashboard/invoices/{INVOICE_ID}/delete")
        client.get("/dashboard/invoices")

        assert fetch_invoices.await_count == 2

    def test_query_string_is_cached_separately(
        self, client, authenticated, mock_db, mock_list_queries
    ):
        fetch_invoices, _ = mock_list_queries

        client.get("/dashboard/invoices")
        response = client.get("/dashboard/invoices", params={"query": "lee", "page": 1})

        assert response.json()["query"] == "lee"
        fetch_invoices.assert_awaited_with(query="lee", page=1)
        assert fetch_invoices.await_count == 2

    def test_unknown_parameters_share_one_cached_page(
        self, client, authenticated, mock_db, mock_list_queries
    ):
        fetch_invoices, _ = mock_list_queries

        client.get("/dashboard/invoices", params={"x": "1"})
        client.get("/dashboard/invoices", params={"x": "2", "page": 1})
        client.get("/dashboard/invoices")

        assert fetch_invoices.await_count == 1

    def test_list_storage_error_returns_500(self, client, authenticated, mock_db):
        mock_db["fetch_all"].side_effect = OSError("db down")

        response = client.get("/dashboard/invoices")

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "database_error"

    def test_get_invoice_returns_major_units(self, client, authenticated, mock_db):
        mock_db["fetch_one"].return_value = {
            "id": INVOICE_ID,
            "customer_id": CUSTOMER_ID,
            "amount": 4250,
            "status": "paid",
        }

        response = client.get(f"/dashboard/invoices/{INVOICE_ID}")

        assert response.status_code == 200
        assert response.json()["amount"] == "42.50"

    def test_get_missing_invoice_returns_404(self, client, authenticated, mock_db):
        response = client.get(f"/dashboard/invoices/{INVOICE_ID}")

        assert response.status_code == 404


def test_health_is_public(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
