"""
Versioned API routes.  Each version subpackage exposes a ``router``.
"""
