"""
Service layer.

Each service wraps a ``MarketplaceStore`` and encapsulates the business
rules of one domain.  Services raise ``MarketplaceError`` subclasses;
endpoints translate them to HTTP responses.
"""
