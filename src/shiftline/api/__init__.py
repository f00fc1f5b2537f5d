"""
shiftline HTTP API (FastAPI).

Usage::

    from shiftline.api import create_app
    app = create_app()
"""

from shiftline.api.app import create_app

__all__ = ["create_app"]
