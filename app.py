"""
App assembly entry point.

Re-exports the FastAPI `app` from `campus_connect.api.main` so servers can
be started with ``uvicorn app:app``.
"""

from campus_connect.api.main import app  # noqa: F401
