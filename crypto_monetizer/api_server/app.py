"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn crypto_monetizer.api_server.app:app --host 0.0.0.0 --port 3000
"""

from crypto_monetizer.api_server.server import app, create_app

__all__ = ["app", "create_app"]
