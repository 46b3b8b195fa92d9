"""
Pydantic schema definitions for API payloads.

Schemas are kept apart from the store records so that the API
representation can change without touching the business logic.
"""
