"""
Application package for the Clean Slate marketplace API.

``core`` holds configuration, logging, security and the in-memory
store; ``services`` holds the business logic for bookings, workers,
training, payments and matching; ``schemas`` the request and response
models; ``api`` the versioned FastAPI routers.
"""

from .main import app  # noqa: F401
