"""Web API for OneLine.

JSON endpoints for writing entries, browsing history and managing the
remote sync settings, served with FastAPI.
"""

from .app import create_app

__all__ = ["create_app"]
