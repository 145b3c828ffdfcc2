"""
Pydantic schemas for the invoice dashboard API.

These models are the only contracts shared between routes and services.
"""
