"""
Accès aux données pour la feature 'bookings' (table Supabase 'bookings').
Un appel distant par opération, sans retry. Toute erreur Supabase/réseau est
remontée en ExternalServiceError avec la cause chaînée; aucune donnée de repli n'est fabriquée.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
# Import du module (et non des fonctions) pour rester patchable par les tests
import booking_backend.infra.supabase_client as supabase_client

from .errors import ExternalServiceError, IntegrityError, NotFoundError
from .models import Booking, BookingStatus

logger = logging.getLogger(__name__)

TABLE = "bookings"

def _rows(res) -> List[dict]:
    rows = getattr(res, "data", None) or []
    return rows if isinstance(rows, list) else [rows]

# module booking_backend.bookings.repository
def insert_booking(data: Dict[str, Any]) -> Booking:
    """
    Insère une réservation (status 'pending' attendu dans data).
    Retour: Booking avec id/created_at attribués par le store.
    """
    try:
        res = supabase_client.get_service_supabase().table(TABLE).insert(data).execute()
    except Exception as e:
        logger.exception("bookings.repository.insert_booking failed email=%s", data.get("customer_email"))
        raise ExternalServiceError("persistence failed", cause=e) from e
    rows = _rows(res)
    if not rows:
        raise ExternalServiceError("persistence failed")
    return Booking.from_row(rows[0])

def update_status(booking_id: str, status: BookingStatus, session_ref: Optional[str] = None) -> Booking:
    """
    Mise à jour partielle: status, stripe_session_id (si fourni) et updated_at (toujours rafraîchi).
    - NotFoundError si aucune ligne ne correspond à booking_id.
    """
    payload: Dict[str, Any] = {
        "status": BookingStatus(status).value,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    if session_ref:
        payload["stripe_session_id"] = session_ref
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .update(payload)
            .eq("id", booking_id)
            .execute()
        )
    except Exception as e:
        logger.exception("bookings.repository.update_status failed id=%s status=%s", booking_id, payload["status"])
        raise ExternalServiceError("persistence failed", cause=e) from e
    rows = _rows(res)
    if not rows:
        raise NotFoundError()
    return Booking.from_row(rows[0])

def find_by_session_ref(session_ref: str) -> Booking:
    """
    Récupère LA réservation liée à une session/intent Stripe.
    - 0 ligne -> NotFoundError; >1 lignes -> IntegrityError (jamais de choix arbitraire).
    """
    if not session_ref:
        raise NotFoundError()
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("stripe_session_id", session_ref)
            .execute()
        )
    except Exception as e:
        logger.exception("bookings.repository.find_by_session_ref failed ref=%s", session_ref)
        raise ExternalServiceError("persistence failed", cause=e) from e
    rows = _rows(res)
    if not rows:
        raise NotFoundError()
    if len(rows) > 1:
        logger.error("bookings.repository.find_by_session_ref ambiguous ref=%s count=%s", session_ref, len(rows))
        raise IntegrityError()
    return Booking.from_row(rows[0])

def find_by_id(booking_id: str) -> Booking:
    if not booking_id:
        raise NotFoundError()
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("id", booking_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("bookings.repository.find_by_id failed id=%s", booking_id)
        raise ExternalServiceError("persistence failed", cause=e) from e
    rows = _rows(res)
    if not rows:
        raise NotFoundError()
    return Booking.from_row(rows[0])

def find_by_idempotency_key(key: str) -> Optional[Booking]:
    """Réservation déjà créée pour ce rendu de formulaire, ou None."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("idempotency_key", key)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("bookings.repository.find_by_idempotency_key failed key=%s", key)
        raise ExternalServiceError("persistence failed", cause=e) from e
    rows = _rows(res)
    return Booking.from_row(rows[0]) if rows else None

def list_by_customer_email(email: str) -> List[Booking]:
    """Réservations d'un client, les plus récentes d'abord."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("customer_email", email)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.exception("bookings.repository.list_by_customer_email failed email=%s", email)
        raise ExternalServiceError("persistence failed", cause=e) from e
    return [Booking.from_row(r) for r in _rows(res)]
