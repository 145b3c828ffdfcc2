"""
User-facing messages and fixed paths for the invoice dashboard.

Messages here are shown to end users as-is. They MUST NOT contain
database errors, stack traces or internal identifiers.
"""

# Page whose cached render is revalidated after every invoice write,
# and where successful create/update actions redirect to.
INVOICES_PATH = "/dashboard/invoices"
DASHBOARD_PATH = "/dashboard"
LOGIN_PATH = "/login"

ITEMS_PER_PAGE = 6

# Largest storable amount: invoices.amount is an INT of cents.
MAX_AMOUNT_CENTS = 2_147_483_647

# Distinct rendered pages kept in memory before the least recently used is dropped.
PAGE_CACHE_MAX_ENTRIES = 256

FIELD_ERROR_MESSAGES = {
    'customerId': 'Please select a customer.',
    'amount': 'Please enter an amount greater than $0.',
    'status': 'Please select an invoice status.',
}

INVOICE_MESSAGES = {
    'CREATE_MISSING_FIELDS': 'Missing Fields. Failed to Create Invoice.',
    'UPDATE_MISSING_FIELDS': 'Missing Fields. Failed to Update Invoice.',
    'CREATE_DATABASE_ERROR': 'Database Error: Failed to Create Invoice.',
    'UPDATE_DATABASE_ERROR': 'Database Error: Failed to Update Invoice.',
    'DELETE_DATABASE_ERROR': 'Database Error: Failed to Delete Invoice.',
    'DELETED': 'Deleted Invoice.',
    'NOT_FOUND': 'Invoice not found.',
}

AUTH_MESSAGES = {
    'INVALID_CREDENTIALS': 'Invalid credentials.',
    'GENERIC': 'Something went wrong.',
}
