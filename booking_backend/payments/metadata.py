"""
Métadonnées Stripe des réservations: booking_id posé à la création, relu dans les webhooks.
"""
from typing import Any, Dict, Optional, Tuple

# module booking_backend.payments.metadata
def make_metadata(booking_id: str, service_name: str, customer_email: str) -> Dict[str, str]:
    """
    Métadonnées attachées à la session/intent (valeurs str, limite Stripe 500 chars).
    """
    return {
        "booking_id": str(booking_id),
        "service_name": (service_name or "")[:500],
        "customer_email": (customer_email or "")[:500],
    }

def event_object(event: Dict[str, Any]) -> Dict[str, Any]:
    data = ((event or {}).get("data") or {}) if isinstance(event, dict) else {}
    return data.get("object") or {}

def extract_booking_ref(event: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """
    Extrait (booking_id, reference) depuis un event Stripe (webhook).
    - reference: id de l'objet (cs_... pour Checkout, pi_... pour PaymentIntent)
    - booking_id: metadata.booking_id, à défaut client_reference_id (Checkout)
    """
    obj = event_object(event)
    meta = obj.get("metadata") or {}
    booking_id = meta.get("booking_id") or obj.get("client_reference_id")
    return booking_id, obj.get("id")
