import secrets
from fastapi import Depends, HTTPException, Request

from booking_backend.config import Settings, get_settings

ADMIN_KEY_HEADER = "X-Admin-Key"

def require_admin_key(request: Request, settings: Settings = Depends(get_settings)) -> None:
    """
    Accès back-office (listing des réservations d'un client).
    - 403 si ADMIN_API_KEY n'est pas configurée: l'endpoint est alors désactivé.
    - 401 si l'en-tête X-Admin-Key est absent ou ne correspond pas.
    """
    expected = settings.admin_api_key
    if not expected:
        raise HTTPException(status_code=403, detail="Accès interdit")
    provided = request.headers.get(ADMIN_KEY_HEADER, "")
    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=401, detail="Non authentifié")
