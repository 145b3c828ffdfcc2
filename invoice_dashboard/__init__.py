"""
Invoice dashboard backend.

FastAPI service handling invoice form actions (create, update, delete)
and credential sign-in for the invoicing dashboard.
"""

__version__ = "0.1.0"
