"""
Endpoint modules for API v1.

Each module defines an ``APIRouter`` for one domain (bookings, workers,
training, ...).  They are aggregated in ``router.py``.
"""
