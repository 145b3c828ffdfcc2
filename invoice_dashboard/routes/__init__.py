"""
FastAPI routers for all API endpoints.

Each module defines a router for one area (invoices, auth, health).
Routes only translate HTTP to service calls and service outcomes to HTTP.
"""
