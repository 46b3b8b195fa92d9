"""
Version 1 of the Clean Slate API, mounted under ``/api/v1``.
"""
