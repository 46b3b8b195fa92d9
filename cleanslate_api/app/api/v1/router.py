"""
Top-level router for version 1 of the API.

Aggregates the domain routers under their prefixes.  When a new domain
is added, include its router here.
"""

from fastapi import APIRouter

from .endpoints import (
    audit,
    auth,
    bookings,
    catalog,
    customers,
    matching,
    payments,
    statistics,
    training,
    workers,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
router.include_router(workers.router, prefix="/workers", tags=["workers"])
router.include_router(customers.router, prefix="/customers", tags=["customers"])
router.include_router(training.router, prefix="/training", tags=["training"])
router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
router.include_router(payments.router, prefix="/payments", tags=["payments"])
router.include_router(matching.router, prefix="/matching", tags=["matching"])
router.include_router(statistics.router, prefix="/statistics", tags=["statistics"])
router.include_router(audit.router, prefix="/audit", tags=["audit"])
