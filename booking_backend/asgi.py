"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn -k uvicorn.workers.UvicornWorker) importe
  `booking_backend.asgi:app`.
- Toute la configuration FastAPI est centralisée dans booking_backend.app_setup.factory.
"""

from booking_backend.app import app

__all__ = ["app"]
