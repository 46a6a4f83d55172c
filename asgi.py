"""
asgi.py -- Application assembly for Inkwell.

The only module the ASGI server imports. Keeps the server command stable
even if the app object moves inside api/.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import app

__all__ = ["app"]
