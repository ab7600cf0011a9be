"""
Catalogue des prestations (table Supabase 'services', lecture via le client anon).
Le prix d'une réservation est toujours relu ici côté serveur, jamais pris du formulaire.
"""
from decimal import Decimal, InvalidOperation
from typing import List, Optional
import logging

from pydantic import BaseModel
import booking_backend.infra.supabase_client as supabase_client
from booking_backend.bookings.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class ServiceOption(BaseModel):
    id: str
    name: str
    price: Decimal
    description: str = ""
    category: str = ""


def _to_option(row: dict) -> Optional[ServiceOption]:
    try:
        price = Decimal(str(row.get("price")))
    except (InvalidOperation, TypeError):
        logger.warning("catalog.repository invalid price id=%s price=%r", row.get("id"), row.get("price"))
        return None
    # NaN/Infinity ou plus de 2 décimales: non facturable sans arrondi
    if not price.is_finite() or price != price.quantize(Decimal("0.01")):
        logger.warning("catalog.repository invalid price id=%s price=%r", row.get("id"), row.get("price"))
        return None
    if price <= 0 or not row.get("name"):
        return None
    return ServiceOption(
        id=str(row.get("id") or ""),
        name=row.get("name") or "",
        price=price,
        description=row.get("description") or "",
        category=row.get("category") or "",
    )

def list_services() -> List[ServiceOption]:
    try:
        res = get_client().table("services").select("*").order("name").execute()
    except Exception as e:
        logger.exception("catalog.repository.list_services failed")
        raise ExternalServiceError(cause=e) from e
    options = (_to_option(r) for r in (res.data or []))
    return [o for o in options if o]

def get_service(service_id: str) -> Optional[ServiceOption]:
    """Prestation par id, ou None si inconnue (ou prix invalide)."""
    if not service_id:
        return None
    try:
        res = (
            get_client()
            .table("services")
            .select("*")
            .eq("id", service_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("catalog.repository.get_service failed id=%s", service_id)
        raise ExternalServiceError(cause=e) from e
    rows = res.data or []
    return _to_option(rows[0]) if rows else None

def get_client():
    return supabase_client.get_supabase()
