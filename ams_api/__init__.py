"""
Top-level package for the Article Management System API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``ams_api.app.main:app``.
"""

__all__ = []
