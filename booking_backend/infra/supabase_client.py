from typing import Optional
from supabase import create_client, Client
from booking_backend.config import SUPABASE_URL, SUPABASE_ANON, SUPABASE_SERVICE_KEY

# Clients partagés par le process (créés au premier appel)
_anon_client: Optional[Client] = None
_service_client: Optional[Client] = None

def _require_url() -> str:
    if not SUPABASE_URL:
        raise RuntimeError("SUPABASE_URL manquant")
    return SUPABASE_URL

def get_supabase() -> Client:
    """
    Client 'anon' (RLS actif): lectures publiques du catalogue 'services'.
    """
    global _anon_client
    if _anon_client is None:
        if not SUPABASE_ANON:
            raise RuntimeError("SUPABASE_ANON_KEY manquant pour get_supabase()")
        _anon_client = create_client(_require_url(), SUPABASE_ANON)
    return _anon_client

def get_service_supabase() -> Client:
    """
    Client service-role: lectures/écritures de la table 'bookings'.
    Les réservations sont anonymes, toutes les écritures passent donc par le backend.
    """
    global _service_client
    if _service_client is None:
        if not SUPABASE_SERVICE_KEY:
            raise RuntimeError("SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
        _service_client = create_client(_require_url(), SUPABASE_SERVICE_KEY)
    return _service_client
