"""HTTP application for the exploration services.

Exports the FastAPI app factory; settings are read from the environment
(and a local .env file) at import time.
"""

from .app import create_app

__all__ = ["create_app"]
