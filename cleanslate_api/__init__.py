"""
Top-level package for the Clean Slate API.

All functionality lives in submodules under ``app``; the package
itself provides no public exports.
"""

__all__ = []
