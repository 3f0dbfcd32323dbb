"""
FastAPI entrypoint for Uvicorn and shared imports.
"""

from .app_factory import create_app

app = create_app()

__all__ = ["app"]
