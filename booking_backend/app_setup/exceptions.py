"""
Gestionnaires d'exceptions.
- BookingError: rendu JSON typé {"error": kind, "detail": message[, "errors": {champ: message}]}.
- Exception inattendue: journalisée, réponse générique 500 (jamais de détail interne).
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from booking_backend.bookings.errors import BookingError, ValidationError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers BookingError et Exception.
    - Les erreurs de validation portent la carte des champs pour l'affichage inline.
    - Les erreurs externes gardent un message générique (la cause n'est que dans les logs).
    """
    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        content = {"error": exc.kind, "detail": exc.message}
        if isinstance(exc, ValidationError):
            content["errors"] = exc.errors
        if exc.status_code >= 500:
            logger.error("booking error path=%s kind=%s cause=%r", request.url.path, exc.kind, exc.__cause__)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Erreur inattendue path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "internal", "detail": "Something went wrong, please try again"},
        )
