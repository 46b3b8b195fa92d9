"""
Exception types raised by the service layer.

Services raise these and the API handlers translate them into HTTP
responses (see ``error_status``).  All of them derive from
``ValueError`` so callers that only care about "the request could not
be honoured" can catch a single type.
"""

from fastapi import status


class MarketplaceError(ValueError):
    """Base class for expected, recoverable service failures."""


class NotFoundError(MarketplaceError):
    """An entity id (booking, worker, customer, module, item) is absent."""


class IllegalTransitionError(MarketplaceError):
    """A status change is not present in the transition table."""


class ForbiddenTransitionError(MarketplaceError):
    """The acting role may not perform the requested status change."""


class WorkerUnavailableError(MarketplaceError):
    """The worker cannot be booked for the requested window."""


class VersionConflictError(MarketplaceError):
    """The entity changed since the caller last read it."""


class DuplicateAssignmentError(MarketplaceError):
    """The training module is already assigned to the worker."""


class NoWorkerAvailableError(MarketplaceError):
    """Matching found no suitable worker for the request."""


class MatchingError(MarketplaceError):
    """The matching endpoint failed or answered with an unusable result."""


class PaymentError(MarketplaceError):
    """The payment provider rejected or failed the request."""


_STATUS_BY_TYPE = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenTransitionError, status.HTTP_403_FORBIDDEN),
    (IllegalTransitionError, status.HTTP_409_CONFLICT),
    (WorkerUnavailableError, status.HTTP_409_CONFLICT),
    (VersionConflictError, status.HTTP_409_CONFLICT),
    (DuplicateAssignmentError, status.HTTP_409_CONFLICT),
    (NoWorkerAvailableError, status.HTTP_409_CONFLICT),
    (MatchingError, status.HTTP_502_BAD_GATEWAY),
    (PaymentError, status.HTTP_502_BAD_GATEWAY),
)


def error_status(exc: ValueError) -> int:
    """Map a service exception to an HTTP status code (400 by default)."""
    for exc_type, code in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST
